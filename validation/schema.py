"""
Schema validation for settings dictionaries.
"""
from typing import Any, Dict
from utils.logging_config import get_logger
from utils.exceptions import ValidationError
from .validators import (
    ChoiceValidator,
    RangeValidator,
    TypeValidator,
)

logger = get_logger(__name__)


class Schema:
    """Schema for validating dictionaries."""

    def __init__(self, schema: Dict[str, Any], strict: bool = False):
        """
        Initialize schema.

        Each field spec is either a type or a dict with the keys ``type``,
        ``required`` (default True), ``default``, ``nullable``, ``validator``
        and ``choices``.

        Args:
            schema: Dictionary defining expected structure
            strict: If True, reject extra keys not in schema
        """
        self.schema = schema
        self.strict = strict

    def validate(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Validate data against schema and return a new dict with defaults filled in."""
        if not isinstance(data, dict):
            raise ValidationError(
                f"Expected dict, got {type(data)}",
                details={'actual_type': str(type(data))}
            )

        validated = {}
        errors = []

        for key, spec in self.schema.items():
            if key not in data:
                if isinstance(spec, dict) and not spec.get('required', True):
                    if 'default' in spec:
                        validated[key] = spec['default']
                    continue
                errors.append(f"Missing required field: {key}")
                continue

            try:
                validated[key] = self._validate_field(key, data[key], spec)
            except ValidationError as e:
                errors.append(f"Field '{key}': {e.message}")

        if self.strict:
            extra_keys = set(data.keys()) - set(self.schema.keys())
            if extra_keys:
                errors.append(f"Unexpected fields: {sorted(extra_keys)}")
        else:
            for key in data:
                if key not in validated:
                    validated[key] = data[key]

        if errors:
            logger.debug(f"Schema validation failed: {errors}")
            raise ValidationError(
                "Schema validation failed",
                details={'errors': errors}
            )

        return validated

    def _validate_field(self, key: str, value: Any, spec: Any) -> Any:
        """Validate a single field."""
        if isinstance(spec, type):
            return TypeValidator(spec, name=key).validate(value)

        if isinstance(spec, dict):
            if value is None:
                if spec.get('nullable', False):
                    return None
                raise ValidationError(f"{key} must not be null")

            expected_type = spec.get('type')
            if expected_type:
                TypeValidator(expected_type, name=key).validate(value)

            if 'validator' in spec:
                value = spec['validator'].validate(value)

            if 'choices' in spec:
                value = ChoiceValidator(spec['choices'], name=key).validate(value)

            return value

        return value


class PoolSettingsSchema(Schema):
    """Schema for a single pool's settings block."""

    REUSE_POLICIES = ['lifo', 'fifo']

    def __init__(self):
        schema = {
            'name': {
                'type': str,
                'required': False,
                'default': 'pool'
            },
            'max_size': {
                'type': int,
                'required': True,
                'validator': RangeValidator(min_value=0, name='max_size')
            },
            'reuse_policy': {
                'type': str,
                'required': False,
                'default': 'lifo',
                'choices': self.REUSE_POLICIES
            },
            'block': {
                'type': bool,
                'required': False,
                'default': False
            },
            'acquire_timeout': {
                'type': (int, float),
                'required': False,
                'default': None,
                'nullable': True,
                'validator': RangeValidator(min_value=0, name='acquire_timeout')
            },
            'max_idle_seconds': {
                'type': (int, float),
                'required': False,
                'default': None,
                'nullable': True,
                'validator': RangeValidator(min_value=0, inclusive=False, name='max_idle_seconds')
            },
            'enable_metrics': {
                'type': bool,
                'required': False,
                'default': True
            }
        }
        super().__init__(schema, strict=True)
