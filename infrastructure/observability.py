"""Pool observability with Prometheus metrics."""
from __future__ import annotations
import time
from typing import Any, Dict, Optional
from collections import defaultdict

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest

from patterns.observer import Observer, Subject
from utils.logging_config import get_logger

# event name -> counter attribute
_EVENT_COUNTERS = {
    'acquired': 'acquisitions',
    'created': 'created',
    'released': 'releases',
    'exhausted': 'exhausted',
    'destroyed': 'destroyed',
}


class PoolMetrics(Observer):
    """
    Observer that turns pool lifecycle events into metrics.

    Attach one instance to any number of pools; samples are labelled with
    the pool name carried in each event payload. With ``use_prometheus=False``
    values are kept in plain dictionaries instead of a collector registry.
    """

    def __init__(
        self,
        namespace: str = 'creational',
        use_prometheus: bool = True,
        registry: Optional[CollectorRegistry] = None
    ):
        self.namespace = namespace
        self.use_prometheus = use_prometheus
        self.logger = get_logger(self.__class__.__name__)

        if self.use_prometheus:
            self.registry = registry or CollectorRegistry()
            self._init_prometheus_metrics()
        else:
            self._init_fallback_metrics()
        self.logger.debug(f"Metrics initialised (namespace={namespace}, prometheus={use_prometheus})")

    def _init_prometheus_metrics(self):
        """Initialize Prometheus metrics."""
        prefix = f'{self.namespace}_pool'

        # Counters
        self.acquisitions = Counter(
            f'{prefix}_acquisitions',
            'Resources handed out by the pool',
            ['pool'],
            registry=self.registry
        )
        self.created = Counter(
            f'{prefix}_created',
            'Resources constructed by the pool factory',
            ['pool'],
            registry=self.registry
        )
        self.releases = Counter(
            f'{prefix}_releases',
            'Resources returned to the pool',
            ['pool'],
            registry=self.registry
        )
        self.exhausted = Counter(
            f'{prefix}_exhausted',
            'Acquire attempts rejected at capacity',
            ['pool'],
            registry=self.registry
        )
        self.destroyed = Counter(
            f'{prefix}_destroyed',
            'Resources discarded by the pool',
            ['pool'],
            registry=self.registry
        )

        # Gauges
        self.in_use = Gauge(
            f'{prefix}_in_use',
            'Resources currently checked out',
            ['pool'],
            registry=self.registry
        )
        self.available = Gauge(
            f'{prefix}_available',
            'Resources idle in the pool',
            ['pool'],
            registry=self.registry
        )

        # Histograms
        self.construction_duration = Histogram(
            f'{prefix}_construction_duration_seconds',
            'Time spent in the resource factory',
            ['pool'],
            registry=self.registry
        )

    def _init_fallback_metrics(self):
        """Initialize in-memory metrics."""
        self.metrics: Dict[str, Dict[str, float]] = defaultdict(lambda: defaultdict(float))
        self.histograms: Dict[str, list] = defaultdict(list)

    def update(self, subject: Subject, event: str, data: Any):
        """Record one pool event."""
        if not isinstance(data, dict):
            return
        pool = data.get('pool', 'unknown')

        counter = _EVENT_COUNTERS.get(event)
        if counter:
            self._inc(counter, pool)

        if event == 'created' and data.get('duration') is not None:
            self.observe_construction(pool, data['duration'])

        if 'in_use' in data and 'available' in data:
            self._set_gauges(pool, data['in_use'], data['available'])

    def _inc(self, counter: str, pool: str, amount: float = 1.0):
        if self.use_prometheus:
            getattr(self, counter).labels(pool=pool).inc(amount)
        else:
            self.metrics[pool][counter] += amount

    def _set_gauges(self, pool: str, in_use: int, available: int):
        if self.use_prometheus:
            self.in_use.labels(pool=pool).set(in_use)
            self.available.labels(pool=pool).set(available)
        else:
            self.metrics[pool]['in_use'] = in_use
            self.metrics[pool]['available'] = available

    def observe_construction(self, pool: str, duration: float):
        """Record how long the factory took to build one resource."""
        if self.use_prometheus:
            self.construction_duration.labels(pool=pool).observe(duration)
        else:
            self.histograms[pool].append(duration)

    def get_metrics(self) -> str:
        """Get metrics in Prometheus text format."""
        if self.use_prometheus:
            return generate_latest(self.registry).decode('utf-8')

        lines = []
        for pool, values in sorted(self.metrics.items()):
            for key, value in sorted(values.items()):
                lines.append(f"{pool}.{key}: {value}")
        for pool, durations in sorted(self.histograms.items()):
            if durations:
                lines.append(f"{pool}.construction_count: {len(durations)}")
                lines.append(f"{pool}.construction_sum: {sum(durations)}")
        return '\n'.join(lines)

    def get_stats(self, pool: str) -> Dict[str, float]:
        """Get the current values for one pool as a flat dictionary."""
        names = list(_EVENT_COUNTERS.values()) + ['in_use', 'available']

        if not self.use_prometheus:
            stats = {name: self.metrics[pool].get(name, 0.0) for name in names}
            stats['construction_count'] = float(len(self.histograms.get(pool, [])))
            return stats

        prefix = f'{self.namespace}_pool'
        labels = {'pool': pool}
        stats = {}
        for name in names:
            sample = f'{prefix}_{name}' if name in ('in_use', 'available') else f'{prefix}_{name}_total'
            stats[name] = self.registry.get_sample_value(sample, labels) or 0.0
        stats['construction_count'] = self.registry.get_sample_value(
            f'{prefix}_construction_duration_seconds_count', labels
        ) or 0.0
        return stats


class Timer:
    """Context manager for timing code blocks."""

    def __init__(self):
        self.start_time: Optional[float] = None
        self.duration: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self.start_time
        return False
