"""
Process-wide state, created once at startup and handed to consumers.

Instead of classes that look themselves up through a hidden global, the
entry point calls :meth:`AppState.initialize` and passes the returned object
to whatever needs configuration, metrics or a named pool. ``current()`` is
meant for entry points only; library code should take the state as an
argument.
"""
import threading
from typing import Any, Callable, Dict, Hashable, List, Optional
from config.config_manager import ConfigManager
from infrastructure.observability import PoolMetrics
from utils.logging_config import get_logger
from utils.error_handlers import ErrorContext
from utils.exceptions import ConfigurationError, StateError
from .builder import PoolBuilder
from .pool import ResourcePool


class AppState:
    """Configuration, metrics and named pools shared by one process."""

    _current: Optional['AppState'] = None
    _lock = threading.Lock()

    def __init__(self, config: Optional[ConfigManager] = None, metrics: Optional[PoolMetrics] = None):
        self.config = config or ConfigManager()
        self.metrics = metrics or PoolMetrics()
        self._pools: Dict[str, ResourcePool] = {}
        self._shut_down = False
        self.logger = get_logger(self.__class__.__name__)

    # -- process lifetime --------------------------------------------------

    @classmethod
    def initialize(
        cls,
        config: Optional[ConfigManager] = None,
        metrics: Optional[PoolMetrics] = None
    ) -> 'AppState':
        """Create the process state. Raises StateError if it already exists."""
        with cls._lock:
            if cls._current is not None:
                raise StateError("Application state is already initialized")
            state = cls(config, metrics)
            cls._current = state
        state.logger.info("Application state initialized")
        return state

    @classmethod
    def current(cls) -> 'AppState':
        """The state created by initialize(); for process entry points."""
        state = cls._current
        if state is None:
            raise StateError("Application state has not been initialized")
        return state

    @classmethod
    def reset(cls):
        """Shut down and forget the process state, so tests start clean."""
        with cls._lock:
            state, cls._current = cls._current, None
        if state is not None:
            state.shutdown()

    # -- pools -------------------------------------------------------------

    def create_pool(
        self,
        name: str,
        factory: Callable[[], Any],
        reset: Optional[Callable[[Any], None]] = None,
        destroy: Optional[Callable[[Any], None]] = None,
        key: Optional[Callable[[Any], Hashable]] = None
    ) -> ResourcePool:
        """
        Build the pool ``name`` from its ``pools.<name>`` settings and register it.

        Metrics are attached unless the settings disable them.
        """
        if self._shut_down:
            raise StateError("Application state has been shut down")
        if name in self._pools:
            raise ConfigurationError(f"Pool '{name}' already exists")

        settings = self.config.pool_settings(name)
        builder = PoolBuilder().with_factory(factory).from_settings(settings)
        if reset is not None:
            builder.on_reset(reset)
        if destroy is not None:
            builder.on_destroy(destroy)
        if key is not None:
            builder.keyed_by(key)
        if settings.enable_metrics:
            builder.observe(self.metrics)

        pool = builder.build()
        self._pools[name] = pool
        self.logger.info(f"Registered pool '{name}'")
        return pool

    def pool(self, name: str) -> ResourcePool:
        """A previously created pool."""
        try:
            return self._pools[name]
        except KeyError:
            raise ConfigurationError(
                f"Unknown pool: {name}",
                details={'available_pools': sorted(self._pools)}
            ) from None

    @property
    def pools(self) -> Dict[str, ResourcePool]:
        return dict(self._pools)

    def shutdown(self) -> List[str]:
        """
        Close every registered pool. Safe to call more than once.

        A pool whose close() raises is logged and skipped; the rest are still closed.

        Returns:
            Names of the pools that failed to close
        """
        if self._shut_down:
            return []
        self._shut_down = True
        failed = []
        for name, pool in self._pools.items():
            with ErrorContext(f"close pool '{name}'", raise_on_error=False) as ctx:
                pool.close()
            if ctx.error is not None:
                failed.append(name)
        self.logger.info(
            f"Application state shut down ({len(self._pools) - len(failed)} pools closed, {len(failed)} failed)"
        )
        return failed
