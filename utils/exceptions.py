"""
Exception hierarchy for the pool toolkit.
"""
from typing import Any, Dict, Optional


class CreationalError(Exception):
    """Base exception for all toolkit errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'details': self.details
        }


# Configuration Exceptions
class ConfigurationError(CreationalError):
    """Raised when configuration is invalid."""
    pass


class ValidationError(CreationalError):
    """Raised when a value or settings dict fails validation."""
    pass


# Pool Exceptions
class PoolError(CreationalError):
    """Base exception for resource pool errors."""
    pass


class PoolExhausted(PoolError):
    """
    Raised when the pool is at capacity and nothing is available.

    Recoverable: the caller may retry later or apply backpressure.
    """
    pass


class UnknownResource(PoolError):
    """Raised when releasing a resource the pool has not checked out."""
    pass


class ResourceConstructionFailed(PoolError):
    """Raised when the factory fails to produce a usable resource."""

    def __init__(
        self,
        message: str,
        original: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details=details)
        self.original = original


class ResourceResetFailed(PoolError):
    """Raised when a resource's reset hook fails during release."""

    def __init__(
        self,
        message: str,
        original: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details=details)
        self.original = original


class PoolClosed(PoolError):
    """Raised when acquiring from a pool that has been closed."""
    pass


# Process State Exceptions
class StateError(CreationalError):
    """Raised when the process-wide state is used before or after its lifetime."""
    pass
