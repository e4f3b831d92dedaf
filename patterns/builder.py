"""
Builder pattern for complex object construction.
"""
from abc import ABC, abstractmethod
from typing import Any


class Builder(ABC):
    """Abstract builder base class."""

    @abstractmethod
    def reset(self):
        """Reset the builder."""
        pass

    @abstractmethod
    def build(self) -> Any:
        """Build and return the final product."""
        pass
