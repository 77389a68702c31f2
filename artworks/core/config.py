import json
import os
import logging
from typing import Dict, Any, List

CONFIG_FILE = "config.json"

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "api_url": "https://api.artic.edu/api/v1/artworks",
    "page_size": 12,
    "page_size_options": [12, 24, 48],
    "request_timeout": 30,
    "data_dir": "data",
    "persist_deselection": False
}

class ConfigManager:
    def __init__(self, config_file: str = CONFIG_FILE):
        self.config_file = config_file
        self.config: Dict[str, Any] = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        if not os.path.exists(self.config_file):
            return self._default_config()

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                stored = json.load(f)
            # Merge with defaults to ensure all keys exist
            merged = self._default_config()
            if isinstance(stored, dict):
                merged.update(stored)
            return merged
        except Exception as e:
            logger.warning(f"Failed to load config {self.config_file}, using defaults: {e}")
            return self._default_config()

    def _default_config(self) -> Dict[str, Any]:
        config = DEFAULT_CONFIG.copy()
        config["page_size_options"] = list(DEFAULT_CONFIG["page_size_options"])
        return config

    def save_config(self):
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(self.config, f, indent=2)

    def get_api_url(self) -> str:
        return self.config.get("api_url", DEFAULT_CONFIG["api_url"])

    def get_page_size(self) -> int:
        return int(self.config.get("page_size", DEFAULT_CONFIG["page_size"]))

    def set_page_size(self, size: int):
        if size < 1:
            raise ValueError(f"Page size must be positive, got {size}")
        self.config["page_size"] = size
        self.save_config()

    def get_page_size_options(self) -> List[int]:
        options = self.config.get("page_size_options") or DEFAULT_CONFIG["page_size_options"]
        return sorted({int(o) for o in options} | {self.get_page_size()})

    def get_request_timeout(self) -> float:
        return float(self.config.get("request_timeout", DEFAULT_CONFIG["request_timeout"]))

    def get_data_dir(self) -> str:
        return self.config.get("data_dir", DEFAULT_CONFIG["data_dir"])

    def get_persist_deselection(self) -> bool:
        return bool(self.config.get("persist_deselection", False))

    def set_persist_deselection(self, enabled: bool):
        self.config["persist_deselection"] = enabled
        self.save_config()

config_manager = ConfigManager()
