"""
Caller-side error handling helpers.

The pool itself never retries; these helpers let callers decide their own
policy for recoverable conditions such as ``PoolExhausted``.
"""
import functools
import time
from typing import Callable, Optional, Type, Tuple
from .logging_config import get_logger


logger = get_logger(__name__)


def retry(
    max_attempts: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep
):
    """
    Decorator for retrying functions with exponential backoff.

    Args:
        max_attempts: Maximum number of attempts, including the first call
        delay: Initial delay between retries in seconds
        backoff: Multiplier for delay after each retry
        exceptions: Tuple of exception types to catch and retry
        sleep: Function used to wait between attempts
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            current_delay = delay

            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_attempts:
                        logger.error(
                            f"All {max_attempts} attempts failed for {func.__name__}: {e}"
                        )
                        raise
                    logger.warning(
                        f"Attempt {attempt}/{max_attempts} failed for {func.__name__}: {e}. "
                        f"Retrying in {current_delay}s..."
                    )
                    sleep(current_delay)
                    current_delay *= backoff

        return wrapper
    return decorator


class ErrorContext:
    """Context manager that logs an operation and runs cleanup on failure."""

    def __init__(
        self,
        operation_name: str,
        cleanup_func: Optional[Callable] = None,
        raise_on_error: bool = True
    ):
        self.operation_name = operation_name
        self.cleanup_func = cleanup_func
        self.raise_on_error = raise_on_error
        self.error: Optional[BaseException] = None
        self.logger = get_logger(__name__)

    def __enter__(self):
        self.logger.info(f"Starting operation: {self.operation_name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.logger.info(f"Completed operation: {self.operation_name}")
            return False

        self.error = exc_val
        self.logger.error(
            f"Error in operation {self.operation_name}: {exc_val}",
            exc_info=(exc_type, exc_val, exc_tb)
        )

        if self.cleanup_func:
            try:
                self.cleanup_func()
            except Exception as cleanup_error:
                self.logger.error(
                    f"Error during cleanup: {cleanup_error}",
                    exc_info=True
                )

        # Suppress only when the caller asked for it
        return not self.raise_on_error
