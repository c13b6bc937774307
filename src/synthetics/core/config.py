import os
import yaml
import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_ENVIRONMENT = "development"

CONFIG_FILENAMES = [
    "synthetics.config.yaml",
    "synthetics.config.yml",
    "synthetics.config.json",
]


def deep_merge(base: Mapping[str, Any], override: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Merge two mappings recursively.

    Nested mappings are merged key by key; any other value in ``override``
    replaces the value in ``base``. Neither input is modified.
    """
    merged = {k: (dict(v) if isinstance(v, Mapping) else v) for k, v in (base or {}).items()}

    for key, value in (override or {}).items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        elif isinstance(value, Mapping):
            merged[key] = deep_merge({}, value)
        else:
            merged[key] = value

    return merged


class ConfigManager:
    """Manages configuration for Synthetics runs"""

    def __init__(self, config_path: Optional[Path] = None, environment: Optional[str] = None):
        self.environment = environment or os.getenv("SYNTHETICS_ENV") or DEFAULT_ENVIRONMENT
        self.config_path = Path(config_path) if config_path else self._get_default_config_path()
        self._config = self._resolve_environment(self._load_config())

    def _get_default_config_path(self) -> Optional[Path]:
        """Get default configuration path"""
        # Check environment variable first
        if env_path := os.getenv("SYNTHETICS_CONFIG"):
            return Path(env_path)

        for name in CONFIG_FILENAMES:
            location = Path.cwd() / name
            if location.exists():
                return location

        return None

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file"""
        if self.config_path is None:
            return self._get_default_config()

        if not self.config_path.exists():
            raise ConfigurationError(f"Config file not found: {self.config_path}")

        with open(self.config_path, 'r') as f:
            if self.config_path.suffix in ('.yaml', '.yml'):
                loaded = yaml.safe_load(f)
            elif self.config_path.suffix == '.json':
                loaded = json.load(f)
            else:
                raise ConfigurationError(f"Unsupported config format: {self.config_path.suffix}")

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Config file must contain a mapping: {self.config_path}")

        logger.debug(f"Loaded config from {self.config_path}")
        return deep_merge(self._get_default_config(), loaded)

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration"""
        return {
            "params": {},
            "playwright_options": {},
            "context_options": {},
        }

    def _resolve_environment(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Overlay the section of ``environments`` matching the active environment"""
        environments = config.pop("environments", None) or {}
        overlay = environments.get(self.environment)
        if overlay:
            logger.debug(f"Applying '{self.environment}' environment overrides")
            config = deep_merge(config, overlay)
        return config

    @property
    def params(self) -> Dict[str, Any]:
        return self.get("params", {}) or {}

    @property
    def playwright_options(self) -> Dict[str, Any]:
        return self.get("playwright_options", {}) or {}

    @property
    def context_options(self) -> Dict[str, Any]:
        return self.get("context_options", {}) or {}

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation"""
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value
