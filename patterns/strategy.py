"""
Strategy pattern for interchangeable algorithms.
"""
from abc import ABC, abstractmethod
from typing import Any


class Strategy(ABC):
    """Abstract strategy base class."""

    name: str = 'strategy'

    @abstractmethod
    def execute(self, *args, **kwargs) -> Any:
        """Execute the strategy."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"

