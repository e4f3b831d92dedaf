"""
Input validators used by the settings schemas.
"""
from typing import Any, List, Optional, Tuple, Union
from utils.exceptions import ValidationError


class Validator:
    """Base validator class."""

    def __init__(self, name: str = "value"):
        self.name = name

    def validate(self, value: Any) -> Any:
        """Validate and return the value."""
        return value

    def __call__(self, value: Any) -> Any:
        """Allow validator to be called as a function."""
        return self.validate(value)


class TypeValidator(Validator):
    """Validates value type. Booleans are not accepted where ints are expected."""

    def __init__(self, expected_type: Union[type, Tuple[type, ...]], name: str = "value"):
        super().__init__(name)
        self.expected_type = expected_type

    def validate(self, value: Any) -> Any:
        """Validate type."""
        if isinstance(value, bool) and not self._accepts_bool():
            raise ValidationError(
                f"{self.name} must be of type {self.expected_type}, got bool",
                details={'expected': str(self.expected_type), 'actual': 'bool'}
            )
        if not isinstance(value, self.expected_type):
            raise ValidationError(
                f"{self.name} must be of type {self.expected_type}, got {type(value)}",
                details={'expected': str(self.expected_type), 'actual': str(type(value))}
            )
        return value

    def _accepts_bool(self) -> bool:
        types = self.expected_type if isinstance(self.expected_type, tuple) else (self.expected_type,)
        return bool in types


class RangeValidator(Validator):
    """Validates numeric value is within range."""

    def __init__(
        self,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        inclusive: bool = True,
        name: str = "value"
    ):
        super().__init__(name)
        self.min_value = min_value
        self.max_value = max_value
        self.inclusive = inclusive

    def validate(self, value: Union[int, float]) -> Union[int, float]:
        """Validate range."""
        if self.min_value is not None:
            if self.inclusive and value < self.min_value:
                raise ValidationError(
                    f"{self.name} must be >= {self.min_value}, got {value}"
                )
            elif not self.inclusive and value <= self.min_value:
                raise ValidationError(
                    f"{self.name} must be > {self.min_value}, got {value}"
                )

        if self.max_value is not None:
            if self.inclusive and value > self.max_value:
                raise ValidationError(
                    f"{self.name} must be <= {self.max_value}, got {value}"
                )
            elif not self.inclusive and value >= self.max_value:
                raise ValidationError(
                    f"{self.name} must be < {self.max_value}, got {value}"
                )

        return value


class ChoiceValidator(Validator):
    """Validates value is in allowed choices."""

    def __init__(self, choices: List[Any], name: str = "value"):
        super().__init__(name)
        self.choices = choices

    def validate(self, value: Any) -> Any:
        """Validate choice."""
        if value not in self.choices:
            raise ValidationError(
                f"{self.name} must be one of {self.choices}, got {value}",
                details={'allowed': self.choices, 'actual': value}
            )
        return value


def validate_non_negative(value: Union[int, float], name: str = "value") -> Union[int, float]:
    """Validate value is non-negative."""
    return RangeValidator(min_value=0, inclusive=True, name=name).validate(value)

