"""
Reuse policies: which idle resource a pool hands out next.

Idle entries are always appended on the right in release order, so the
left end holds the resource that has been idle longest.
"""
from abc import abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Deque, Union
from patterns.factory import EnumFactory
from patterns.strategy import Strategy


@dataclass
class IdleEntry:
    """An available resource and the monotonic time it was returned."""
    resource: Any
    released_at: float


class ReusePolicyKind(Enum):
    LIFO = 'lifo'
    FIFO = 'fifo'


class ReusePolicy(Strategy):
    """Selects and removes the next idle entry to hand out."""

    kind: ReusePolicyKind

    @abstractmethod
    def execute(self, idle: Deque[IdleEntry]) -> IdleEntry:
        pass


class LifoPolicy(ReusePolicy):
    """Most recently released first; keeps warm resources in circulation."""

    name = 'lifo'
    kind = ReusePolicyKind.LIFO

    def execute(self, idle: Deque[IdleEntry]) -> IdleEntry:
        return idle.pop()


class FifoPolicy(ReusePolicy):
    """Longest idle first; spreads use evenly across resources."""

    name = 'fifo'
    kind = ReusePolicyKind.FIFO

    def execute(self, idle: Deque[IdleEntry]) -> IdleEntry:
        return idle.popleft()


POLICY_FACTORY: EnumFactory[ReusePolicyKind, ReusePolicy] = EnumFactory(
    ReusePolicyKind,
    {
        ReusePolicyKind.LIFO: LifoPolicy,
        ReusePolicyKind.FIFO: FifoPolicy,
    }
)


def create_policy(policy: Union[ReusePolicy, ReusePolicyKind, str]) -> ReusePolicy:
    """Return ``policy`` unchanged if it is already a policy, else build one by kind."""
    if isinstance(policy, ReusePolicy):
        return policy
    return POLICY_FACTORY.create(policy)

