"""
Fluent construction of resource pools.
"""
from typing import Any, Callable, Hashable, List, Optional, Tuple, Union
from config.config_manager import PoolSettings
from patterns.builder import Builder
from patterns.observer import Observer, WILDCARD
from utils.logging_config import get_logger
from utils.exceptions import ConfigurationError
from .policies import ReusePolicy, ReusePolicyKind
from .pool import ResourcePool


class PoolBuilder(Builder):
    """
    Builder for :class:`ResourcePool`.

    Example::

        pool = (PoolBuilder()
                .with_factory(DatabaseConnection)
                .max_size(3)
                .reuse('lifo')
                .build())
    """

    def __init__(self):
        self.reset()
        self.logger = get_logger(self.__class__.__name__)

    def reset(self):
        """Reset the builder state."""
        self._factory: Optional[Callable[[], Any]] = None
        self._max_size = 10
        self._options: dict = {}
        self._observers: List[Tuple[Observer, str]] = []
        return self

    def with_factory(self, factory: Callable[[], Any]):
        self._factory = factory
        return self

    def max_size(self, max_size: int):
        self._max_size = max_size
        return self

    def named(self, name: str):
        self._options['name'] = name
        return self

    def reuse(self, policy: Union[ReusePolicy, ReusePolicyKind, str]):
        """Set the reuse order ('lifo' or 'fifo')."""
        self._options['policy'] = policy
        return self

    def on_reset(self, reset: Callable[[Any], None]):
        self._options['reset'] = reset
        return self

    def on_destroy(self, destroy: Callable[[Any], None]):
        self._options['destroy'] = destroy
        return self

    def keyed_by(self, key: Callable[[Any], Hashable]):
        self._options['key'] = key
        return self

    def expire_idle_after(self, seconds: Optional[float]):
        self._options['max_idle_seconds'] = seconds
        return self

    def blocking(self, timeout: Optional[float] = None):
        """Make acquire() wait at capacity by default, up to ``timeout`` seconds."""
        self._options['block'] = True
        self._options['acquire_timeout'] = timeout
        return self

    def with_clock(self, clock: Callable[[], float]):
        self._options['clock'] = clock
        return self

    def observe(self, observer: Observer, event: str = WILDCARD):
        """Attach ``observer`` to the pool once it is built."""
        self._observers.append((observer, event))
        return self

    def from_settings(self, settings: PoolSettings):
        """Apply every field of a validated :class:`PoolSettings`."""
        self._max_size = settings.max_size
        self._options.update({
            'name': settings.name,
            'policy': settings.reuse_policy,
            'block': settings.block,
            'acquire_timeout': settings.acquire_timeout,
            'max_idle_seconds': settings.max_idle_seconds,
        })
        self.logger.debug(f"Applied settings for pool '{settings.name}'")
        return self

    def build(self) -> ResourcePool:
        """Build and return the pool."""
        if self._factory is None:
            raise ConfigurationError("A factory is required to build a pool")

        pool = ResourcePool(self._factory, self._max_size, **self._options)
        for observer, event in self._observers:
            pool.attach(observer, event)
        self.logger.info(f"Built pool '{pool.name}' with max_size={pool.max_size}")
        return pool
