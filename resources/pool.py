"""
Bounded pool of reusable, possibly expensive resources.
"""
import threading
import time
from collections import deque
from contextlib import contextmanager
from typing import Any, Callable, Deque, Dict, Generic, Hashable, Iterator, List, Optional, TypeVar, Union

from infrastructure.observability import Timer
from patterns.observer import Subject
from utils.logging_config import get_logger
from utils.exceptions import (
    ConfigurationError,
    PoolClosed,
    PoolExhausted,
    ResourceConstructionFailed,
    ResourceResetFailed,
    UnknownResource,
    ValidationError,
)
from validation.validators import RangeValidator, TypeValidator, validate_non_negative
from .policies import IdleEntry, ReusePolicy, ReusePolicyKind, create_policy

T = TypeVar('T')

_MISSING = object()


class ResourcePool(Subject, Generic[T]):
    """
    Pool that lends out resources built by ``factory``, at most ``max_size`` at a time.

    Resources are created lazily, only when nothing is idle and capacity is
    left. Every created resource is either idle (``available``) or checked
    out (``in_use``), and ``available + in_use`` never exceeds ``max_size``.
    A slot is reserved while the factory runs, so construction happens
    outside the lock without letting a concurrent caller overshoot.

    Events published to attached observers: ``created``, ``acquired``,
    ``released``, ``exhausted``, ``destroyed`` and ``closed``. Each payload
    is a dict with the pool name and the current counts.

    Hooks (``reset``, ``destroy``, the resource's own ``reset()``) must not
    call back into the pool.
    """

    def __init__(
        self,
        factory: Callable[[], T],
        max_size: int = 10,
        *,
        reset: Optional[Callable[[T], None]] = None,
        destroy: Optional[Callable[[T], None]] = None,
        key: Callable[[T], Hashable] = id,
        policy: Union[ReusePolicy, ReusePolicyKind, str] = ReusePolicyKind.LIFO,
        max_idle_seconds: Optional[float] = None,
        block: bool = False,
        acquire_timeout: Optional[float] = None,
        name: str = 'pool',
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize resource pool.

        Args:
            factory: Zero-argument callable that builds a new resource
            max_size: Maximum number of resources alive at once
            reset: Called on release; defaults to the resource's ``reset()`` if it has one
            destroy: Called when the pool discards a resource
            key: Identity used to track checked-out resources
            policy: Reuse order for idle resources ('lifo' or 'fifo')
            max_idle_seconds: Discard idle resources older than this
            block: Default for acquire(): wait at capacity instead of failing
            acquire_timeout: Default wait bound for blocking acquires
            name: Label used in logs and metrics
            clock: Time source for idle expiry
        """
        super().__init__()
        try:
            TypeValidator(int, name='max_size').validate(max_size)
            validate_non_negative(max_size, name='max_size')
            if max_idle_seconds is not None:
                TypeValidator((int, float), name='max_idle_seconds').validate(max_idle_seconds)
                RangeValidator(min_value=0, inclusive=False, name='max_idle_seconds').validate(max_idle_seconds)
            if acquire_timeout is not None:
                TypeValidator((int, float), name='acquire_timeout').validate(acquire_timeout)
                validate_non_negative(acquire_timeout, name='acquire_timeout')
        except ValidationError as e:
            raise ConfigurationError(e.message, details={'pool': name}) from e

        self.factory = factory
        self.name = name
        self._max_size = max_size
        self._reset = reset
        self._destroy = destroy
        self._key = key
        self._policy = create_policy(policy)
        self._max_idle_seconds = max_idle_seconds
        self._block = block
        self._acquire_timeout = acquire_timeout
        self._clock = clock

        self._available: Deque[IdleEntry] = deque()
        self._in_use: Dict[Hashable, T] = {}
        self._reserved = 0
        self._closed = False
        self._counters = {
            'created': 0,
            'reused': 0,
            'released': 0,
            'exhausted': 0,
            'destroyed': 0,
        }

        self._lock = threading.Lock()
        self._cond = threading.Condition(self._lock)
        self.logger = get_logger(self.__class__.__name__)
        self.logger.debug(
            f"Pool '{name}' ready (max_size={max_size}, policy={self._policy.name})"
        )

    # -- introspection -----------------------------------------------------

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def policy(self) -> ReusePolicy:
        return self._policy

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def available_count(self) -> int:
        with self._lock:
            return len(self._available)

    @property
    def in_use_count(self) -> int:
        with self._lock:
            return len(self._in_use)

    @property
    def size(self) -> int:
        """Resources currently alive: idle plus checked out."""
        with self._lock:
            return len(self._available) + len(self._in_use)

    def __len__(self) -> int:
        return self.size

    def is_in_use(self, resource: T) -> bool:
        """Whether ``resource`` is currently checked out from this pool."""
        with self._lock:
            return self._tracked(resource)

    def stats(self) -> Dict[str, Any]:
        """Current counts and lifetime counters."""
        with self._lock:
            stats: Dict[str, Any] = {
                'name': self.name,
                'max_size': self._max_size,
                'available': len(self._available),
                'in_use': len(self._in_use),
                'policy': self._policy.name,
                'closed': self._closed,
            }
            stats.update(self._counters)
            return stats

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(name={self.name!r}, max_size={self._max_size}, "
            f"available={len(self._available)}, in_use={len(self._in_use)})"
        )

    # -- acquire -------------------------------------------------------------

    def acquire(self, block: Optional[bool] = None, timeout: Optional[float] = None) -> T:
        """
        Check a resource out of the pool.

        Reuses an idle resource when there is one, otherwise builds a new
        one if capacity allows.

        Args:
            block: Wait for a release instead of failing when at capacity;
                None uses the pool default
            timeout: Upper bound on the wait, in seconds; None uses the pool
                default, which itself may be None (wait forever)

        Raises:
            PoolExhausted: At capacity with nothing idle (after the wait, if blocking)
            ResourceConstructionFailed: The factory or the key function failed, or the
                new resource is already tracked
            PoolClosed: The pool has been closed
        """
        if block is None:
            block = self._block
        if timeout is None:
            timeout = self._acquire_timeout
        reused, resource, expired = self._checkout(block, timeout)
        self._discard_all(expired)

        if reused:
            self.logger.debug(f"Pool '{self.name}' reused a resource")
            self.notify('acquired', self._payload(resource))
            return resource

        resource, duration = self._construct()
        self.logger.debug(f"Pool '{self.name}' created a resource in {duration:.4f}s")
        self.notify('created', self._payload(resource, duration=duration))
        self.notify('acquired', self._payload(resource))
        return resource

    def _checkout(self, block: bool, timeout: Optional[float]):
        """Pop an idle resource or reserve a slot; returns (reused, resource, expired)."""
        deadline = None if timeout is None else time.monotonic() + timeout
        expired: List[T] = []

        with self._cond:
            while True:
                if self._closed:
                    raise PoolClosed(f"Pool '{self.name}' is closed", details={'pool': self.name})

                expired.extend(self._expire_idle_locked())

                if self._available:
                    entry = self._policy.execute(self._available)
                    self._in_use[self._key(entry.resource)] = entry.resource
                    self._counters['reused'] += 1
                    return True, entry.resource, expired

                if len(self._in_use) + self._reserved < self._max_size:
                    self._reserved += 1
                    return False, None, expired

                # Only a release or a cancelled reservation can free a slot
                outstanding = len(self._in_use) + self._reserved
                remaining = None if deadline is None else deadline - time.monotonic()
                if not block or not outstanding or (remaining is not None and remaining <= 0):
                    self._counters['exhausted'] += 1
                    break

                self._cond.wait(remaining)

            in_use = len(self._in_use)

        self.logger.warning(
            f"Pool '{self.name}' exhausted ({in_use}/{self._max_size} in use)"
        )
        self.notify('exhausted', self._payload())
        raise PoolExhausted(
            f"Pool '{self.name}' is at capacity ({self._max_size}) with no available resource",
            details={'pool': self.name, 'max_size': self._max_size, 'in_use': in_use}
        )

    def _construct(self):
        """Build a resource on a reserved slot and move it into ``in_use``."""
        built = False
        timer = Timer()
        try:
            with timer:
                resource = self.factory()
            built = True
        except Exception as e:
            self.logger.error(f"Factory for pool '{self.name}' failed: {e}", exc_info=True)
            raise ResourceConstructionFailed(
                f"Failed to construct resource for pool '{self.name}': {e}",
                original=e,
                details={'pool': self.name}
            ) from e
        finally:
            if not built:
                self._cancel_reservation()

        key_error = None
        with self._cond:
            self._reserved -= 1
            if self._closed:
                self._cond.notify()
                closed = True
            else:
                closed = False
                try:
                    resource_key = self._key(resource)
                except Exception as e:
                    key_error = e
                else:
                    duplicate = resource_key in self._in_use or any(
                        self._key(entry.resource) == resource_key for entry in self._available
                    )
                    if not duplicate:
                        self._in_use[resource_key] = resource
                        self._counters['created'] += 1
                        return resource, timer.duration
                self._cond.notify()

        if closed:
            self._discard_all([resource])
            raise PoolClosed(f"Pool '{self.name}' was closed during construction", details={'pool': self.name})

        if key_error is not None:
            self.logger.error(
                f"Key function for pool '{self.name}' failed on a new resource: {key_error}",
                exc_info=key_error
            )
            self._discard_all([resource])
            raise ResourceConstructionFailed(
                f"Failed to key new resource for pool '{self.name}': {key_error}",
                original=key_error,
                details={'pool': self.name}
            ) from key_error

        self.logger.error(f"Factory for pool '{self.name}' returned a resource the pool already tracks")
        raise ResourceConstructionFailed(
            f"Factory for pool '{self.name}' returned a resource that is already pooled",
            details={'pool': self.name}
        )

    def _cancel_reservation(self):
        with self._cond:
            self._reserved -= 1
            self._cond.notify()

    # -- release -------------------------------------------------------------

    def release(self, resource: T):
        """
        Return a checked-out resource to the pool.

        The reset hook runs before the resource becomes available again. If
        it raises, the resource is discarded and its slot freed.

        Raises:
            UnknownResource: ``resource`` is not currently checked out from this pool
            ResourceResetFailed: The reset hook raised
        """
        with self._cond:
            if not self._tracked(resource):
                self.logger.error(f"Pool '{self.name}' asked to release an unknown resource")
                raise UnknownResource(
                    f"Resource is not checked out from pool '{self.name}'",
                    details={'pool': self.name, 'resource': repr(resource)}
                )

            del self._in_use[self._key(resource)]
            reset_error = None
            if not self._closed:
                try:
                    self._run_reset(resource)
                except Exception as e:
                    reset_error = e

            keep = not self._closed and reset_error is None
            if keep:
                self._available.append(IdleEntry(resource, self._clock()))
                self._counters['released'] += 1
            self._cond.notify()

        if keep:
            self.logger.debug(f"Pool '{self.name}' took a resource back")
            self.notify('released', self._payload(resource))
            return

        self._discard_all([resource])
        if reset_error is not None:
            self.logger.error(
                f"Reset failed in pool '{self.name}', resource discarded: {reset_error}",
                exc_info=reset_error
            )
            raise ResourceResetFailed(
                f"Failed to reset resource for pool '{self.name}': {reset_error}",
                original=reset_error,
                details={'pool': self.name}
            ) from reset_error

    def _run_reset(self, resource: T):
        if self._reset is not None:
            self._reset(resource)
            return
        own_reset = getattr(resource, 'reset', None)
        if callable(own_reset):
            own_reset()

    def _tracked(self, resource: T) -> bool:
        try:
            resource_key = self._key(resource)
        except Exception:
            return False
        return self._in_use.get(resource_key, _MISSING) is resource

    @contextmanager
    def get_resource(self, block: Optional[bool] = None, timeout: Optional[float] = None) -> Iterator[T]:
        """Context manager for acquiring and releasing a resource."""
        resource = self.acquire(block=block, timeout=timeout)
        try:
            yield resource
        finally:
            self.release(resource)

    # -- expiry and shutdown ---------------------------------------------

    def _expire_idle_locked(self) -> List[T]:
        """Remove idle entries older than ``max_idle_seconds``; caller holds the lock."""
        if self._max_idle_seconds is None:
            return []
        cutoff = self._clock() - self._max_idle_seconds
        expired = []
        # Oldest entries sit at the left end
        while self._available and self._available[0].released_at < cutoff:
            expired.append(self._available.popleft().resource)
        if expired:
            self._cond.notify(len(expired))
        return expired

    def prune_idle(self) -> int:
        """Discard expired idle resources now; returns how many were removed."""
        with self._cond:
            expired = self._expire_idle_locked()
        self._discard_all(expired)
        return len(expired)

    def close(self):
        """
        Discard every idle resource and refuse further acquires.

        Resources still checked out are discarded when they are released.
        Calling close() again has no effect.
        """
        with self._cond:
            if self._closed:
                return
            self._closed = True
            idle = [entry.resource for entry in self._available]
            self._available.clear()
            self._cond.notify_all()

        self._discard_all(idle)
        self.logger.info(f"Closed pool '{self.name}' ({len(idle)} idle resources discarded)")
        self.notify('closed', self._payload())

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def _discard_all(self, resources: List[T]):
        for resource in resources:
            with self._lock:
                self._counters['destroyed'] += 1
            if self._destroy is not None:
                try:
                    self._destroy(resource)
                except Exception as e:
                    self.logger.error(
                        f"Destroy hook failed in pool '{self.name}': {e}",
                        exc_info=True
                    )
            self.notify('destroyed', self._payload(resource))

    def _payload(self, resource: Any = None, **extra: Any) -> Dict[str, Any]:
        with self._lock:
            payload = {
                'pool': self.name,
                'max_size': self._max_size,
                'in_use': len(self._in_use),
                'available': len(self._available),
            }
        if resource is not None:
            payload['resource'] = resource
        payload.update(extra)
        return payload
