"""Tests for the pattern building blocks used by the pools."""
import copy
from collections import deque
from enum import Enum

import pytest

from patterns import CallbackObserver, EnumFactory, EventRecorder, Prototype, Subject, prototype_factory
from resources import (
    FifoPolicy,
    IdleEntry,
    LifoPolicy,
    PoolBuilder,
    ReusePolicyKind,
    create_policy,
)
from utils.exceptions import ConfigurationError, PoolExhausted


class Shape(Enum):
    CIRCLE = 'circle'
    SQUARE = 'square'


class TestEnumFactory:
    """Tests for the closed-set factory."""

    def test_create_by_member_and_value(self):
        factory = EnumFactory(Shape, {Shape.CIRCLE: lambda r: ('circle', r), Shape.SQUARE: lambda s: ('square', s)})

        assert factory.create(Shape.CIRCLE, 2) == ('circle', 2)
        assert factory.create('SQUARE', 3) == ('square', 3)
        assert factory.list_available() == ['circle', 'square']

    def test_missing_variant_rejected_at_construction(self):
        with pytest.raises(ConfigurationError) as excinfo:
            EnumFactory(Shape, {Shape.CIRCLE: object})
        assert excinfo.value.details['missing'] == ['SQUARE']

    def test_foreign_key_rejected(self):
        with pytest.raises(ConfigurationError):
            EnumFactory(Shape, {Shape.CIRCLE: object, Shape.SQUARE: object, 'triangle': object})

    def test_unknown_value(self):
        factory = EnumFactory(Shape, {Shape.CIRCLE: object, Shape.SQUARE: object})
        with pytest.raises(ConfigurationError) as excinfo:
            factory.create('hexagon')
        assert excinfo.value.details['available_types'] == ['circle', 'square']


class TestPolicies:
    """Tests for reuse policies."""

    def _idle(self):
        return deque(IdleEntry(name, float(i)) for i, name in enumerate('abc'))

    def test_lifo_takes_newest(self):
        idle = self._idle()
        assert LifoPolicy().execute(idle).resource == 'c'
        assert [e.resource for e in idle] == ['a', 'b']

    def test_fifo_takes_oldest(self):
        idle = self._idle()
        assert FifoPolicy().execute(idle).resource == 'a'
        assert [e.resource for e in idle] == ['b', 'c']

    def test_every_kind_has_a_policy(self):
        for kind in ReusePolicyKind:
            assert create_policy(kind).kind is kind

    def test_instance_passes_through(self):
        policy = FifoPolicy()
        assert create_policy(policy) is policy


class Template(Prototype):
    """Clone shares ``registry`` and copies ``tags``."""

    def __init__(self, registry, tags):
        self.registry = registry
        self.tags = tags

    def clone(self):
        return Template(self.registry, copy.copy(self.tags))


class TestPrototype:
    """Tests for explicit cloning."""

    def test_factory_returns_independent_clones(self):
        template = Template(registry={'db': 'primary'}, tags=['base'])
        factory = prototype_factory(template)

        first, second = factory(), factory()
        first.tags.append('extra')

        assert first is not template and second is not first
        assert second.tags == ['base']
        assert first.registry is template.registry

    def test_rejects_non_prototype(self):
        with pytest.raises(TypeError):
            prototype_factory(object())

    def test_clone_is_abstract(self):
        with pytest.raises(TypeError):
            Prototype()


class TestObserver:
    """Tests for the subject/observer pair."""

    def test_event_filter(self):
        subject = Subject()
        recorder = EventRecorder()
        subject.attach(recorder, 'released')

        subject.notify('acquired', {})
        subject.notify('released', {'n': 1})

        assert recorder.events == [('released', {'n': 1})]

    def test_detach(self):
        subject = Subject()
        seen = []
        observer = CallbackObserver(lambda s, e, d: seen.append(e))
        subject.attach(observer)
        subject.notify('one')
        subject.detach(observer)
        subject.notify('two')

        assert seen == ['one']

    def test_attach_twice_notifies_once(self):
        subject = Subject()
        recorder = EventRecorder()
        subject.attach(recorder)
        subject.attach(recorder)

        subject.notify('ping')

        assert recorder.names() == ['ping']


class TestPoolBuilder:
    """Tests for fluent pool construction."""

    def test_build(self):
        recorder = EventRecorder()
        pool = (PoolBuilder()
                .named('workers')
                .with_factory(dict)
                .max_size(2)
                .reuse('fifo')
                .observe(recorder, 'created')
                .build())

        pool.acquire()

        assert pool.name == 'workers'
        assert pool.max_size == 2
        assert isinstance(pool.policy, FifoPolicy)
        assert recorder.names() == ['created']

    def test_factory_required(self):
        with pytest.raises(ConfigurationError):
            PoolBuilder().max_size(1).build()

    def test_blocking_defaults(self):
        pool = PoolBuilder().with_factory(dict).max_size(1).blocking(timeout=0.01).build()
        pool.acquire()
        with pytest.raises(PoolExhausted):
            pool.acquire()

    def test_reset_clears_state(self):
        builder = PoolBuilder().with_factory(dict).max_size(1).named('x')
        builder.reset()
        with pytest.raises(ConfigurationError):
            builder.build()
