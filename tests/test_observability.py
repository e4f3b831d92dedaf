"""Tests for pool metrics."""
import pytest
from prometheus_client import CollectorRegistry

from infrastructure import PoolMetrics, Timer
from resources import ResourcePool
from utils.exceptions import PoolExhausted


def exercise(pool):
    """Two acquisitions, one release and one rejected acquire."""
    first = pool.acquire()
    pool.acquire()
    pool.release(first)
    pool.acquire()
    with pytest.raises(PoolExhausted):
        pool.acquire()


class TestPoolMetrics:
    """Tests for the metrics observer."""

    @pytest.mark.parametrize('use_prometheus', [True, False])
    def test_counts_pool_events(self, use_prometheus):
        metrics = PoolMetrics(use_prometheus=use_prometheus)
        pool = ResourcePool(dict, max_size=2, name='db')
        pool.attach(metrics)

        exercise(pool)
        stats = metrics.get_stats('db')

        assert stats['acquisitions'] == 3
        assert stats['created'] == 2
        assert stats['releases'] == 1
        assert stats['exhausted'] == 1
        assert stats['destroyed'] == 0
        assert stats['in_use'] == 2
        assert stats['available'] == 0
        assert stats['construction_count'] == 2

    def test_pools_are_labelled_separately(self):
        metrics = PoolMetrics(use_prometheus=False)
        db = ResourcePool(dict, max_size=1, name='db')
        cache = ResourcePool(dict, max_size=1, name='cache')
        db.attach(metrics)
        cache.attach(metrics)

        db.acquire()

        assert metrics.get_stats('db')['acquisitions'] == 1
        assert metrics.get_stats('cache')['acquisitions'] == 0

    def test_destroyed_counted_on_close(self):
        metrics = PoolMetrics(use_prometheus=False)
        pool = ResourcePool(dict, max_size=2, name='db')
        pool.attach(metrics)
        pool.release(pool.acquire())

        pool.close()

        assert metrics.get_stats('db')['destroyed'] == 1
        assert metrics.get_stats('db')['available'] == 0

    def test_prometheus_exposition(self):
        registry = CollectorRegistry()
        metrics = PoolMetrics(namespace='app', registry=registry)
        pool = ResourcePool(dict, max_size=1, name='db')
        pool.attach(metrics)

        pool.acquire()
        text = metrics.get_metrics()

        assert metrics.registry is registry
        assert 'app_pool_acquisitions_total{pool="db"} 1.0' in text
        assert 'app_pool_in_use{pool="db"} 1.0' in text

    def test_fallback_text_output(self):
        metrics = PoolMetrics(use_prometheus=False)
        pool = ResourcePool(dict, max_size=1, name='db')
        pool.attach(metrics)

        pool.acquire()
        text = metrics.get_metrics()

        assert 'db.acquisitions: 1.0' in text
        assert 'db.construction_count: 1' in text

    def test_ignores_payloads_without_counts(self):
        metrics = PoolMetrics(use_prometheus=False)
        metrics.update(None, 'acquired', None)
        assert metrics.get_stats('unknown')['acquisitions'] == 0


class TestTimer:
    """Tests for the timing helper."""

    def test_measures_duration(self):
        with Timer() as timer:
            sum(range(1000))
        assert timer.duration >= 0

    def test_does_not_swallow_errors(self):
        timer = Timer()
        with pytest.raises(ValueError):
            with timer:
                raise ValueError("boom")
        assert timer.duration is not None
