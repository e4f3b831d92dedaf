"""
Prototype pattern with an explicit clone capability.

Implementers decide per field whether the clone shares the original's
sub-object or receives its own copy, and document that choice on the class.
"""
from abc import ABC, abstractmethod
from typing import Callable, TypeVar
from utils.logging_config import get_logger

logger = get_logger(__name__)

P = TypeVar('P', bound='Prototype')


class Prototype(ABC):
    """Object that can produce an independent copy of itself."""

    @abstractmethod
    def clone(self: P) -> P:
        """Return a new instance equivalent to this one."""
        pass


def prototype_factory(prototype: P) -> Callable[[], P]:
    """
    Adapt a prototype into a zero-argument factory.

    Each call returns a fresh clone, which makes a configured template
    usable as the ``factory`` of a resource pool.
    """
    if not isinstance(prototype, Prototype):
        raise TypeError(f"Expected a Prototype, got {type(prototype).__name__}")

    def factory() -> P:
        copy = prototype.clone()
        logger.debug(f"Cloned {type(prototype).__name__} prototype")
        return copy

    return factory
