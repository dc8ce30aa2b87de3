"""Infrastructure patterns package."""

from lazysingleton.infrastructure.patterns.enum_singleton import SingletonEnum
from lazysingleton.infrastructure.patterns.guarded_singleton import GuardedSingleton
from lazysingleton.infrastructure.patterns.singleton_access import get_singleton
from lazysingleton.infrastructure.patterns.singleton_holder import HolderState, SingletonHolder
from lazysingleton.infrastructure.patterns.singleton_registry import (
    LazySingletonRegistry,
    configure_registry,
    get_registry,
    reset_registry,
)

__all__ = [
    "SingletonHolder",
    "HolderState",
    "LazySingletonRegistry",
    "get_registry",
    "configure_registry",
    "reset_registry",
    "GuardedSingleton",
    "SingletonEnum",
    "get_singleton",
]
