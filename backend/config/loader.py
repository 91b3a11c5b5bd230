"""
Configuration loader
Loads project defaults from config/config.toml and merges the user config file on top
"""

import copy
from pathlib import Path
from typing import Any, Dict, Optional

import toml

from core.logger import get_logger

logger = get_logger(__name__)

PROJECT_CONFIG_FILE = Path(__file__).parent / "config.toml"
DEFAULT_USER_CONFIG_FILE = Path.home() / ".config" / "worktime" / "config.toml"


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base"""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigLoader:
    """
    Configuration loader

    Project defaults are always loaded first. The user config file only needs
    to contain the keys it wants to override.

    Example:
        config = get_config()
        data_file = config.get("storage.data_file")
    """

    def __init__(self, config_file: Optional[str] = None, create_if_missing: bool = True):
        self.config_file = Path(config_file).expanduser() if config_file else DEFAULT_USER_CONFIG_FILE
        self.create_if_missing = create_if_missing
        self._config: Dict[str, Any] = {}
        self._loaded = False

    def load(self) -> Dict[str, Any]:
        """Load project defaults and merge the user config file"""
        with open(PROJECT_CONFIG_FILE, "r", encoding="utf-8") as f:
            defaults = toml.load(f)

        if not self.config_file.exists() and self.create_if_missing:
            self._create_user_config(defaults)

        user_config: Dict[str, Any] = {}
        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    user_config = toml.load(f)
            except toml.TomlDecodeError as e:
                logger.warning(f"Ignoring malformed config file {self.config_file}: {e}")

        self._config = _merge(defaults, user_config)
        self._loaded = True
        logger.debug(f"Config loaded from {PROJECT_CONFIG_FILE} and {self.config_file}")
        return self._config

    def _create_user_config(self, defaults: Dict[str, Any]) -> None:
        """Write the defaults to the user config path so they can be edited"""
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            user_defaults = {
                key: value for key, value in defaults.items() if key != "logging"
            }
            with open(self.config_file, "w", encoding="utf-8") as f:
                toml.dump(user_defaults, f)
            logger.info(f"Created default config file: {self.config_file}")
        except OSError as e:
            logger.warning(f"Could not create config file {self.config_file}: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dotted key, e.g. "tracking.default_start" """
        if not self._loaded:
            self.load()

        node: Any = self._config
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Override a value in memory (not persisted)"""
        if not self._loaded:
            self.load()

        parts = key.split(".")
        node = self._config
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value

    def as_dict(self) -> Dict[str, Any]:
        if not self._loaded:
            self.load()
        return copy.deepcopy(self._config)


_config_loader: Optional[ConfigLoader] = None


def get_config(config_file: Optional[str] = None) -> ConfigLoader:
    """Get global ConfigLoader instance (recreated when a different file is requested)"""
    global _config_loader

    if _config_loader is None or (
        config_file is not None
        and Path(config_file).expanduser() != _config_loader.config_file
    ):
        _config_loader = ConfigLoader(config_file)

    return _config_loader
