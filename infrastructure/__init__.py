from .observability import PoolMetrics, Timer

__all__ = [
    'PoolMetrics',
    'Timer'
]
