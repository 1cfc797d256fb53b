"""
Configuration management for the live magnifier.
"""
import json
import os
from pathlib import Path
from typing import Dict, Any, Optional

from utils.constants import CONFIGS_DIR
from utils.failures import ConfigError
from utils.logger import Logger


class Config:
    """Configuration manager that merges multiple domain-specific JSON files."""

    def __init__(self, configs_dir: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration by loading all JSON files in the configs directory.

        Args:
            configs_dir: Path to directory containing JSON configs (defaults to ./configs)
            overrides: Nested dict merged last (used by tests and the CLI)
        """
        self.config: Dict[str, Any] = {}
        self.logger = Logger("Config")

        configs_dir = Path(configs_dir) if configs_dir else CONFIGS_DIR

        # 1. Load all JSON files if directory exists
        if configs_dir.exists() and configs_dir.is_dir():
            for config_file in sorted(configs_dir.glob("*.json")):
                self.load_from_file(str(config_file))

        # 2. Override from environment variables if present
        self._load_from_env()

        if overrides:
            self._merge_config(overrides)

    def _load_from_env(self):
        """Load configuration from environment variables."""
        if os.environ.get('EVM_SOURCE'):
            self.config.setdefault('settings', {})['source'] = os.environ.get('EVM_SOURCE')
        if os.environ.get('EVM_LOG_LEVEL'):
            self.config.setdefault('logging', {})['level'] = os.environ.get('EVM_LOG_LEVEL')

    def load_from_file(self, path: str):
        """Load configuration from JSON file."""
        try:
            with open(path, 'r') as f:
                user_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to load config from {path}: {e}", critical=True) from e
        self._merge_config(user_config)

    def _merge_config(self, user_config: Dict[str, Any]):
        """Merge user config with defaults recursively."""
        def update(d, u):
            for k, v in u.items():
                if isinstance(v, dict):
                    d[k] = update(d.get(k, {}), v)
                else:
                    d[k] = v
            return d

        update(self.config, user_config)

    def get_int(self, key: str, default: int = 0) -> int:
        """Get config value as integer; malformed values fall back to the default."""
        val = self.get(key, default)
        try:
            return int(val)
        except (ValueError, TypeError):
            self.logger.warning(f"Ignoring malformed integer for '{key}': {val!r}")
            return default

    def get_float(self, key: str, default: float = 0.0) -> float:
        """Get config value as float; malformed values fall back to the default."""
        val = self.get(key, default)
        try:
            return float(val)
        except (ValueError, TypeError):
            self.logger.warning(f"Ignoring malformed number for '{key}': {val!r}")
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Get config value as boolean."""
        val = self.get(key, default)
        if isinstance(val, bool):
            return val
        if isinstance(val, str):
            return val.lower() in ('true', '1', 'yes', 'on')
        return bool(val)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dotted key."""
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value
