"""
Configuration management for WordBar.
Handles hotkeys, the word list location and the remembered word position.
"""
import os
import json
import logging
from typing import Optional, Dict, Any

from wordbar.constants import APP_NAME, DEFAULT_HOTKEYS, WORDS_FILE_NAME, LAST_INDEX_KEY


def _default_config_dir() -> str:
    base = os.environ.get('APPDATA') or os.path.join(os.path.expanduser('~'), '.config')
    return os.path.join(base, APP_NAME)


class Config:
    """Manages application configuration stored in %APPDATA%/WordBar/config.json
    (~/.config/WordBar/config.json outside Windows).
    """

    CONFIG_DIR = _default_config_dir()
    CONFIG_FILE = os.path.join(CONFIG_DIR, 'config.json')

    DEFAULT_CONFIG = {
        "hotkeys": DEFAULT_HOTKEYS.copy(),
        "words_file": None,  # None = words.json next to config.json
        LAST_INDEX_KEY: 0,
    }

    def __init__(self):
        self._config: Dict[str, Any] = {}
        self._ensure_config_dir()
        self.load()

    def _ensure_config_dir(self):
        """Create config directory if it doesn't exist."""
        if not os.path.exists(self.CONFIG_DIR):
            os.makedirs(self.CONFIG_DIR)

    def load(self) -> Dict[str, Any]:
        """Load configuration from file."""
        if os.path.exists(self.CONFIG_FILE):
            try:
                with open(self.CONFIG_FILE, 'r', encoding='utf-8') as f:
                    self._config = json.load(f)
            except (json.JSONDecodeError, IOError) as e:
                logging.warning(f"Could not read {self.CONFIG_FILE}, using defaults: {e}")
                self._config = self._defaults()
        else:
            self._config = self._defaults()

        if not isinstance(self._config, dict):
            logging.warning(f"Ignoring malformed config in {self.CONFIG_FILE}")
            self._config = self._defaults()

        # Merge with defaults for any missing keys
        for key, value in self._defaults().items():
            if key not in self._config:
                self._config[key] = value

        return self._config

    def _defaults(self) -> Dict[str, Any]:
        config = self.DEFAULT_CONFIG.copy()
        config["hotkeys"] = DEFAULT_HOTKEYS.copy()
        return config

    def save(self):
        """Save configuration to file."""
        self._ensure_config_dir()
        with open(self.CONFIG_FILE, 'w', encoding='utf-8') as f:
            json.dump(self._config, f, indent=2, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())

    # Hotkey management
    def get_hotkeys(self) -> Dict[str, str]:
        """Get hotkey combos keyed by action ('advance', 'retreat')."""
        hotkeys = DEFAULT_HOTKEYS.copy()
        configured = self._config.get('hotkeys')
        if configured is None:
            return hotkeys
        if not isinstance(configured, dict):
            logging.warning(f"Ignoring malformed hotkeys setting {configured!r}, using defaults")
            return hotkeys
        for action, combo in configured.items():
            if action in hotkeys:
                hotkeys[action] = combo
            else:
                logging.warning(f"Ignoring hotkey for unknown action '{action}'")
        return hotkeys

    # Word list
    def get_words_file(self) -> str:
        """Path of the JSON word list."""
        path = self._config.get('words_file')
        if path and isinstance(path, str):
            return path
        if path:
            logging.warning(f"Ignoring malformed words_file setting {path!r}")
        return os.path.join(self.CONFIG_DIR, WORDS_FILE_NAME)

    # Remembered position
    def get_last_index(self) -> Optional[int]:
        value = self._config.get(LAST_INDEX_KEY)
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        return value

    # Generic getter/setter
    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value."""
        return self._config.get(key, default)

    def set(self, key: str, value: Any):
        """Set a config value."""
        self._config[key] = value
        self.save()
