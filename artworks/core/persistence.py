import json
import yaml
import os
import time
import logging
import uuid
from typing import Any, Dict, Iterable, Set, Tuple
from artworks.core.config import config_manager

DATA_DIR = "data"
STATE_FILE = "ui_state.json"
SELECTION_KEY = "selected_artworks"
logger = logging.getLogger(__name__)

class PersistenceManager:
    """Key-value document on disk (JSON, or YAML by file extension)."""

    def __init__(self, data_dir: str = DATA_DIR, state_file: str = STATE_FILE):
        self.data_dir = data_dir
        self.state_file = state_file
        os.makedirs(self.data_dir, exist_ok=True)

    @property
    def filepath(self) -> str:
        return os.path.join(self.data_dir, self.state_file)

    def _is_yaml(self) -> bool:
        return self.state_file.endswith(('.yaml', '.yml'))

    def read_state(self) -> Dict[str, Any]:
        """Returns the stored document. Raises on unreadable content; a missing file is an empty document."""
        if not os.path.exists(self.filepath):
            return {}

        with open(self.filepath, 'r', encoding='utf-8') as f:
            if self._is_yaml():
                data = yaml.safe_load(f)
            else:
                data = json.load(f)

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Expected a mapping in {self.filepath}, got {type(data).__name__}")
        return data

    def write_state(self, data: Dict[str, Any]):
        """Replaces the stored document atomically."""
        # Use UUID to prevent collisions if multiple saves run concurrently
        temp_filepath = self.filepath + f".{uuid.uuid4()}.tmp"

        try:
            with open(temp_filepath, 'w', encoding='utf-8') as f:
                if self._is_yaml():
                    yaml.safe_dump(data, f)
                else:
                    json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())

            # Retry logic for Windows file locking issues
            max_retries = 3
            for attempt in range(max_retries):
                try:
                    os.replace(temp_filepath, self.filepath)
                    break
                except PermissionError as e:
                    if attempt < max_retries - 1:
                        time.sleep(0.1)
                    else:
                        raise e
        except Exception as e:
            logger.error(f"Error saving {self.filepath}: {e}")
            if os.path.exists(temp_filepath):
                try:
                    os.remove(temp_filepath)
                except OSError:
                    pass
            raise

    # --- UI State Persistence ---

    def load_ui_state(self) -> dict:
        try:
            return self.read_state()
        except Exception as e:
            logger.error(f"Error loading UI state: {e}")
            return {}

    def save_ui_state(self, state: dict):
        """Merges the given keys into the stored document."""
        try:
            current = self.load_ui_state()
            current.update(state)
            self.write_state(current)
        except Exception as e:
            logger.error(f"Error saving UI state: {e}")


def _coerce_ids(values: Iterable[Any]) -> Set[int]:
    ids: Set[int] = set()
    for v in values:
        if isinstance(v, bool):
            continue
        if isinstance(v, int):
            ids.add(v)
        elif isinstance(v, str) and v.strip().isdigit():
            ids.add(int(v.strip()))
        else:
            logger.warning(f"Ignoring invalid stored artwork id: {v!r}")
    return ids


class SelectionStore:
    """
    Durable set of selected artwork ids, stored as a sorted list under one key
    of the persistence document.

    merge() only ever adds ids. Removal happens through discard(), clear() or
    save() with a smaller set.
    """

    def __init__(self, persistence: PersistenceManager, key: str = SELECTION_KEY):
        self.persistence = persistence
        self.key = key
        self._ids: Set[int] = set()

    def __contains__(self, artwork_id: int) -> bool:
        return artwork_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    @property
    def ids(self) -> Set[int]:
        return set(self._ids)

    def load(self) -> Set[int]:
        """Restores the set from storage. Absent or unreadable data is an empty selection."""
        try:
            self._ids = self._read_stored(self.persistence.read_state())
        except Exception as e:
            logger.warning(f"Could not restore selection, starting empty: {e}")
            self._ids = set()

        logger.info(f"Restored {len(self._ids)} selected artworks")
        return self.ids

    def merge(self, ids: Iterable[int]) -> Set[int]:
        document, stored = self._read_document()
        # Ids already on disk count even if load() was never called
        current = stored | self._ids
        merged = current | set(ids)
        self._write(document, merged)

        added = len(merged) - len(current)
        if added:
            logger.info(f"Merged {added} new ids into selection ({len(merged)} total)")
        return self.ids

    def save(self, ids: Iterable[int]):
        document, _ = self._read_document()
        self._write(document, set(ids))

    def discard(self, ids: Iterable[int]) -> Set[int]:
        document, stored = self._read_document()
        current = stored | self._ids
        remaining = current - set(ids)
        if remaining != current:
            self._write(document, remaining)
            logger.info(f"Removed {len(current) - len(remaining)} ids from selection ({len(remaining)} total)")
        return self.ids

    def clear(self):
        logger.info("Clearing selection")
        self.save(set())

    def _read_stored(self, document: Dict[str, Any]) -> Set[int]:
        stored = document.get(self.key, [])
        if not isinstance(stored, list):
            raise ValueError(f"'{self.key}' is a {type(stored).__name__}, expected a list")
        return _coerce_ids(stored)

    def _read_document(self) -> Tuple[Dict[str, Any], Set[int]]:
        try:
            document = self.persistence.read_state()
        except Exception as e:
            logger.warning(f"Overwriting unreadable state file: {e}")
            return {}, set()
        try:
            return document, self._read_stored(document)
        except ValueError as e:
            logger.warning(f"Replacing invalid stored selection: {e}")
            return document, set()

    def _write(self, document: Dict[str, Any], ids: Set[int]):
        """Writes ids to disk; the in-memory set follows only once the write succeeded."""
        document = dict(document)
        document[self.key] = sorted(ids)
        self.persistence.write_state(document)
        self._ids = ids

# Global instances
persistence = PersistenceManager(data_dir=config_manager.get_data_dir())
selection_store = SelectionStore(persistence)
