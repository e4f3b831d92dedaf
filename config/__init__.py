"""
Configuration management for resource pools.
"""
from .config_manager import (
    Config,
    ConfigManager,
    PoolSettings
)
from .presets import ConfigPresets

__all__ = [
    'Config',
    'ConfigManager',
    'PoolSettings',
    'ConfigPresets',
]
