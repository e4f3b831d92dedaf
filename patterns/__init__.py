"""
Creational and behavioral pattern building blocks.
"""
from .factory import EnumFactory
from .strategy import Strategy
from .observer import (
    Observer,
    Subject,
    CallbackObserver,
    EventRecorder
)
from .builder import Builder
from .prototype import Prototype, prototype_factory

__all__ = [
    'EnumFactory',
    'Strategy',
    'Observer',
    'Subject',
    'CallbackObserver',
    'EventRecorder',
    'Builder',
    'Prototype',
    'prototype_factory',
]
