"""
Factory pattern over a closed set of variants.

A factory is bound to an ``Enum`` and must provide a constructor for every
member. The check runs when the factory is created, so a module-level
factory fails at import time if a new member is added without a
constructor, rather than at the first lookup of that member.
"""
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Mapping, Type, TypeVar, Union
from utils.logging_config import get_logger
from utils.exceptions import ConfigurationError

logger = get_logger(__name__)

K = TypeVar('K', bound=Enum)
T = TypeVar('T')


class EnumFactory(Generic[K, T]):
    """Creates products keyed by the members of one enum."""

    def __init__(self, kind: Type[K], constructors: Mapping[K, Callable[..., T]]):
        missing = [member.name for member in kind if member not in constructors]
        foreign = [key for key in constructors if not isinstance(key, kind)]
        if missing or foreign:
            raise ConfigurationError(
                f"Factory for {kind.__name__} is not exhaustive",
                details={'missing': missing, 'foreign': [repr(k) for k in foreign]}
            )
        self.kind = kind
        self._constructors: Dict[K, Callable[..., T]] = dict(constructors)
        logger.debug(f"Created factory for {kind.__name__} with {len(self._constructors)} variants")

    def resolve(self, kind: Union[K, str]) -> K:
        """Turn a member or its value (case-insensitive) into a member."""
        if isinstance(kind, self.kind):
            return kind
        if isinstance(kind, str):
            for member in self.kind:
                if str(member.value).lower() == kind.lower():
                    return member
        raise ConfigurationError(
            f"Unknown {self.kind.__name__}: {kind!r}",
            details={'available_types': self.list_available()}
        )

    def create(self, kind: Union[K, str], *args: Any, **kwargs: Any) -> T:
        """Create an instance of the given variant."""
        member = self.resolve(kind)
        return self._constructors[member](*args, **kwargs)

    def list_available(self) -> List[str]:
        """List the values of all variants."""
        return [str(member.value) for member in self.kind]
