"""Lazy Singleton Registry - Root Package.

Thread-safe, lazily constructed singletons with a construction guard, plus
the creational pattern demos they grew out of.

Key Components:
    - domain: Singleton error hierarchy
    - config: Configuration schemas and manager
    - infrastructure: Logging, error context and the singleton patterns
    - demo: Logging service, notification factory and GUI abstract factory
    - cli: Console demo runner

Usage:
    >>> from lazysingleton import GuardedSingleton
    >>> class ConnectionPool(GuardedSingleton):
    ...     pass
    >>> ConnectionPool.get_instance() is ConnectionPool.get_instance()
    True
"""

from ._version import __version__
from .domain.exceptions import (
    AlreadyInitializedError,
    ConstructionFailedError,
    SingletonError,
    SingletonPoisonedError,
)
from .infrastructure.patterns import (
    GuardedSingleton,
    LazySingletonRegistry,
    SingletonEnum,
    SingletonHolder,
    get_registry,
    get_singleton,
    reset_registry,
)

__all__ = [
    "__version__",
    "SingletonHolder",
    "LazySingletonRegistry",
    "GuardedSingleton",
    "SingletonEnum",
    "get_registry",
    "reset_registry",
    "get_singleton",
    "SingletonError",
    "AlreadyInitializedError",
    "ConstructionFailedError",
    "SingletonPoisonedError",
]
