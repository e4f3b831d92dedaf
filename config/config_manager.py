"""
Configuration management for resource pools.

Settings live under a ``pools`` section keyed by pool name::

    pools:
      database:
        max_size: 5
        reuse_policy: lifo
        max_idle_seconds: 300
"""
import os
import json
import yaml
from copy import deepcopy
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional
from utils.logging_config import get_logger
from utils.exceptions import ConfigurationError, ValidationError
from validation.schema import PoolSettingsSchema

@dataclass(frozen=True)
class PoolSettings:
    """Validated settings for one pool."""
    name: str = 'pool'
    max_size: int = 10
    reuse_policy: str = 'lifo'
    block: bool = False
    acquire_timeout: Optional[float] = None
    max_idle_seconds: Optional[float] = None
    enable_metrics: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any], name: Optional[str] = None) -> 'PoolSettings':
        """Validate a settings block; ``name`` fills in a missing name."""
        data = dict(data)
        if name is not None:
            data.setdefault('name', name)
        try:
            validated = PoolSettingsSchema().validate(data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid settings for pool '{data.get('name', 'pool')}'",
                details=e.details
            ) from e
        return cls(**validated)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


_MISSING = object()


class Config:
    """Configuration container with dot notation access."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._data = data or {}

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __contains__(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dotted path, e.g. ``pools.database.max_size``."""
        value = self._data
        for part in key.split('.'):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value

    def set(self, key: str, value: Any):
        """Set a value by dotted path, creating intermediate sections."""
        parts = key.split('.')
        data = self._data
        for part in parts[:-1]:
            if not isinstance(data.get(part), dict):
                data[part] = {}
            data = data[part]
        data[parts[-1]] = value

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return deepcopy(self._data)

    def update(self, other: Dict[str, Any]):
        """Deep-merge another dict into this configuration."""
        self._deep_update(self._data, other)

    @staticmethod
    def _deep_update(base: Dict, update: Dict):
        for key, value in update.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                Config._deep_update(base[key], value)
            else:
                base[key] = deepcopy(value)


class ConfigManager:
    """
    Configuration loaded from files, environment variables and dicts.

    Later loads override earlier ones key by key.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._config = Config()
        self.logger = get_logger(self.__class__.__name__)
        if data:
            self.load_from_dict(data)

    def load_from_file(self, filepath: str):
        """
        Load configuration from file (JSON or YAML).

        Args:
            filepath: Path to configuration file
        """
        path = Path(filepath)

        if not path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {filepath}",
                details={'filepath': str(path)}
            )

        if path.suffix not in ('.yaml', '.yml', '.json'):
            raise ConfigurationError(
                f"Unsupported file format: {path.suffix}",
                details={'filepath': str(path)}
            )

        try:
            with open(path, 'r') as f:
                if path.suffix == '.json':
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to load configuration from {filepath}: {e}",
                details={'filepath': str(path), 'error': str(e)}
            ) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping: {filepath}",
                details={'filepath': str(path), 'actual_type': type(data).__name__}
            )

        self._config.update(data)
        self.logger.info(f"Loaded configuration from {filepath}")

    def load_from_env(self, prefix: str = "POOL_", environ: Optional[Dict[str, str]] = None) -> int:
        """
        Load configuration from environment variables.

        Double underscores separate path segments and values are parsed as
        JSON when possible: ``POOL_POOLS__DATABASE__MAX_SIZE=5`` sets
        ``pools.database.max_size`` to ``5``.

        Returns:
            Number of values loaded
        """
        environ = os.environ if environ is None else environ
        count = 0

        for key, value in environ.items():
            if not key.startswith(prefix) or key == f"{prefix}LOG_LEVEL":
                continue
            path = key[len(prefix):].lower().replace('__', '.')
            if not path:
                continue
            try:
                parsed_value = json.loads(value)
            except json.JSONDecodeError:
                parsed_value = value
            self._config.set(path, parsed_value)
            count += 1

        self.logger.info(f"Loaded {count} configuration values from environment")
        return count

    def load_from_dict(self, data: Dict[str, Any]):
        """Load configuration from dictionary."""
        self._config.update(data)
        self.logger.debug("Loaded configuration from dictionary")

    def save_to_file(self, filepath: str, format: str = 'yaml'):
        """
        Save configuration to file.

        Args:
            filepath: Path to save configuration
            format: File format ('yaml' or 'json')
        """
        if format not in ('yaml', 'json'):
            raise ConfigurationError(f"Unsupported format: {format}")

        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w') as f:
            if format == 'yaml':
                yaml.safe_dump(self._config.to_dict(), f, default_flow_style=False)
            else:
                json.dump(self._config.to_dict(), f, indent=2)

        self.logger.info(f"Saved configuration to {filepath}")

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def set(self, key: str, value: Any):
        """Set configuration value."""
        self._config.set(key, value)
        self.logger.debug(f"Set config: {key} = {value}")

    def get_config(self) -> Config:
        """Get the full configuration object."""
        return self._config

    def pool_names(self) -> List[str]:
        """Names of all pools with a settings block."""
        pools = self._config.get('pools', {})
        return sorted(pools) if isinstance(pools, dict) else []

    def pool_settings(self, name: str) -> PoolSettings:
        """Validated settings for the pool ``name``."""
        block = self._config.get(f'pools.{name}')
        if block is None:
            raise ConfigurationError(
                f"No settings for pool '{name}'",
                details={'available_pools': self.pool_names()}
            )
        if not isinstance(block, dict):
            raise ConfigurationError(
                f"Settings for pool '{name}' must be a mapping",
                details={'actual_type': type(block).__name__}
            )
        return PoolSettings.from_dict(block, name=name)

    def clear(self):
        """Clear all configuration."""
        self._config = Config()
        self.logger.info("Cleared all configuration")
