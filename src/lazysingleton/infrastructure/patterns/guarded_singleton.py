"""Singleton base class with a construction guard."""

import functools
from typing import Any, Optional, Type, TypeVar

from lazysingleton.config.schemas import FailurePolicy
from lazysingleton.infrastructure.patterns.singleton_registry import ensure_constructible, get_registry

G = TypeVar("G", bound="GuardedSingleton")


def _restore_singleton(cls: Type[G]) -> G:
    """Unpickling hook: resolve to the registered instance."""
    return cls.get_instance()


class GuardedSingleton:
    """
    Base class for lazily constructed singletons that refuse a second instance.

    Instances normally live in the process registry and are obtained with
    :meth:`get_instance`; an explicit registry may hold its own instance. Any
    construction that is not a registry populating its holder is checked
    against every open registry before an object is allocated:

    - calling the class directly raises :class:`AlreadyInitializedError`
      once the singleton exists;
    - ``copy.copy``/``copy.deepcopy`` return the existing instance;
    - unpickling resolves to :meth:`get_instance` instead of rebuilding state.

    The guard cannot see a direct construction that happens before the first
    :meth:`get_instance` call; such an object is simply not the singleton.
    Subclasses that must never have a stray instance should use
    :class:`~lazysingleton.infrastructure.patterns.enum_singleton.SingletonEnum`.
    """

    singleton_failure_policy: Optional[FailurePolicy] = None

    def __new__(cls, *args: Any, **kwargs: Any):
        ensure_constructible(cls)
        return super().__new__(cls)

    @classmethod
    def get_instance(cls: Type[G], *args: Any, **kwargs: Any) -> G:
        """
        Return the single instance, constructing it on first call.

        Arguments are passed to the constructor only by the call that
        constructs; later calls ignore them. Prefer :meth:`configure` for
        constructor arguments so that every caller sees the same ones.
        """
        holder = get_registry().holder(cls, failure_policy=cls.singleton_failure_policy)
        return holder.get_instance(*args, **kwargs)

    @classmethod
    def configure(cls, *args: Any, **kwargs: Any) -> None:
        """
        Fix constructor arguments before the first :meth:`get_instance` call.

        Raises:
            AlreadyInitializedError: If the singleton has already been constructed
        """
        get_registry().register(
            cls,
            functools.partial(cls, *args, **kwargs),
            failure_policy=cls.singleton_failure_policy,
        )

    @classmethod
    def is_initialized(cls) -> bool:
        return get_registry().is_populated(cls)

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return _restore_singleton, (type(self),)
