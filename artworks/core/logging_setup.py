import logging
import logging.handlers
import os

LOG_FILE = "app.log"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
MAX_LOG_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 5

CONSOLE_HANDLER = "artworks.console"
FILE_HANDLER = "artworks.file"

# Third-party loggers that log every request at INFO
QUIET_LOGGERS = ("urllib3", "uvicorn.access")

def _installed(root: logging.Logger, name: str) -> bool:
    return any(h.get_name() == name for h in root.handlers)

def setup_logging(log_dir: str = "logs", level: int = logging.INFO):
    """
    Sends application logs to the console and to a size-rotated file in log_dir.

    Calling it again adds nothing. Handlers installed by other code (pytest,
    uvicorn) are left alone.
    """
    root = logging.getLogger()
    root.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if not _installed(root, CONSOLE_HANDLER):
        console = logging.StreamHandler()
        console.set_name(CONSOLE_HANDLER)
        console.setFormatter(formatter)
        root.addHandler(console)

    if not _installed(root, FILE_HANDLER):
        os.makedirs(log_dir, exist_ok=True)
        log_path = os.path.join(log_dir, LOG_FILE)
        rotating = logging.handlers.RotatingFileHandler(
            log_path, maxBytes=MAX_LOG_BYTES, backupCount=BACKUP_COUNT, encoding='utf-8'
        )
        rotating.set_name(FILE_HANDLER)
        rotating.setFormatter(formatter)
        root.addHandler(rotating)
        logging.getLogger(__name__).info(f"Writing logs to {log_path}")

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
