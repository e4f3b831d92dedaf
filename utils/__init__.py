"""
Utility modules for the pool toolkit.
"""
from .logging_config import get_logger, LoggerFactory, LogContext, StructuredFormatter
from .exceptions import *
from .error_handlers import retry, ErrorContext

__all__ = [
    'get_logger',
    'LoggerFactory',
    'LogContext',
    'StructuredFormatter',
    'retry',
    'ErrorContext',
    'CreationalError',
    'ConfigurationError',
    'ValidationError',
    'PoolError',
    'PoolExhausted',
    'UnknownResource',
    'ResourceConstructionFailed',
    'ResourceResetFailed',
    'PoolClosed',
    'StateError',
]
