"""
Resource pooling for reusable, expensive-to-build objects.
"""
from .policies import (
    IdleEntry,
    ReusePolicyKind,
    ReusePolicy,
    LifoPolicy,
    FifoPolicy,
    create_policy
)
from .pool import ResourcePool
from .builder import PoolBuilder
from .app_state import AppState

__all__ = [
    'IdleEntry',
    'ReusePolicyKind',
    'ReusePolicy',
    'LifoPolicy',
    'FifoPolicy',
    'create_policy',
    'ResourcePool',
    'PoolBuilder',
    'AppState',
]
