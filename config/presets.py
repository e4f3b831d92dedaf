"""
Predefined pool configurations for common use cases.
"""
from typing import Dict, Any
from utils.exceptions import ConfigurationError


class ConfigPresets:
    """Collection of predefined configuration presets."""

    @staticmethod
    def database() -> Dict[str, Any]:
        """Connection pool: few warm connections, reused most-recent first."""
        return {
            'pools': {
                'database': {
                    'max_size': 5,
                    'reuse_policy': 'lifo',
                    'block': True,
                    'acquire_timeout': 5.0,
                    'max_idle_seconds': 300.0,
                    'enable_metrics': True
                }
            }
        }

    @staticmethod
    def workers() -> Dict[str, Any]:
        """Worker pool: spread tasks evenly, fail fast at capacity."""
        return {
            'pools': {
                'workers': {
                    'max_size': 8,
                    'reuse_policy': 'fifo',
                    'block': False,
                    'enable_metrics': True
                }
            }
        }

    @staticmethod
    def single_slot() -> Dict[str, Any]:
        """One shared resource handed out to a single holder at a time."""
        return {
            'pools': {
                'single': {
                    'max_size': 1,
                    'reuse_policy': 'lifo',
                    'block': False,
                    'enable_metrics': False
                }
            }
        }

    @classmethod
    def get(cls, name: str) -> Dict[str, Any]:
        """Look up a preset by method name."""
        presets = {
            'database': cls.database,
            'workers': cls.workers,
            'single_slot': cls.single_slot,
        }
        if name not in presets:
            raise ConfigurationError(
                f"Unknown preset: {name}",
                details={'available_presets': sorted(presets)}
            )
        return presets[name]()
