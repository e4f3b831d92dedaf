"""
Validation utilities for pool settings.
"""
from .validators import (
    Validator,
    TypeValidator,
    RangeValidator,
    ChoiceValidator,
    validate_non_negative,
)
from .schema import (
    Schema,
    PoolSettingsSchema
)

__all__ = [
    'Validator',
    'TypeValidator',
    'RangeValidator',
    'ChoiceValidator',
    'validate_non_negative',
    'Schema',
    'PoolSettingsSchema',
]
