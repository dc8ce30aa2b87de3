"""Standard singleton access functions."""

from typing import Any, Optional, Type, TypeVar, cast

from lazysingleton.infrastructure.logging import get_logger
from lazysingleton.infrastructure.patterns.enum_singleton import SingletonEnum
from lazysingleton.infrastructure.patterns.singleton_registry import (
    LazySingletonRegistry,
    get_registry,
)

T = TypeVar("T")


def get_singleton(
    singleton_class: Type[T],
    *args: Any,
    registry: Optional[LazySingletonRegistry] = None,
    **kwargs: Any,
) -> T:
    """
    Standard way to get singleton instances.

    This function provides a consistent way to access singleton instances
    throughout the application. Enumeration singletons resolve to their only
    member; every other class goes through the registry, which ensures that
    only one instance is created and reused.

    Args:
        singleton_class: The class to get an instance of
        *args: Arguments to pass to the constructor if creating a new instance
        registry: Registry to use instead of the process registry
        **kwargs: Keyword arguments to pass to the constructor if creating a new instance

    Returns:
        The singleton instance
    """
    if isinstance(singleton_class, type) and issubclass(singleton_class, SingletonEnum):
        get_logger(__name__).debug(
            "Resolving %s as an enumeration singleton", singleton_class.__name__
        )
        return cast(T, singleton_class.get_instance())

    registry = registry or get_registry()
    holder = registry.holder(
        singleton_class,
        failure_policy=getattr(singleton_class, "singleton_failure_policy", None),
    )
    return cast(T, holder.get_instance(*args, **kwargs))
