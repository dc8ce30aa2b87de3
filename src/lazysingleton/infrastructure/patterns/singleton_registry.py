"""Singleton Registry - lazily constructed, process-scoped singletons.

The registry owns one :class:`SingletonHolder` per key, where a key is either
a class or a string name. Its lifecycle is explicit: it is created empty,
hands out instances on demand, and is torn down with :meth:`close`. Code that
needs isolation (tests, embedded interpreters) builds its own registry
instead of sharing the process one.
"""

import atexit
import threading
import weakref
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union

from lazysingleton.config.schemas import FailurePolicy, RegistryConfig
from lazysingleton.domain.exceptions import (
    AlreadyInitializedError,
    RegistryClosedError,
    UnregisteredSingletonError,
)
from lazysingleton.infrastructure.logging import get_logger
from lazysingleton.infrastructure.patterns.singleton_holder import (
    HolderState,
    SingletonHolder,
    describe_factory,
)

T = TypeVar("T")
RegistryKey = Union[type, str]

# Open registries, consulted by the construction guard of guarded classes
_open_registries: "weakref.WeakSet[LazySingletonRegistry]" = weakref.WeakSet()
_open_registries_lock = threading.Lock()


class LazySingletonRegistry:
    """
    Registry of lazily constructed singletons.

    Lookups of an existing holder do not lock; the registry lock is only
    taken to add or replace a registration. Each holder guards its own first
    population, so unrelated singletons never contend with each other.
    """

    def __init__(self, config: Optional[RegistryConfig] = None):
        """Initialize singleton registry."""
        self._config = config or RegistryConfig()
        self._holders: Dict[RegistryKey, SingletonHolder] = {}
        self._registry_lock = threading.RLock()
        self._population_order: List[SingletonHolder] = []
        self._order_lock = threading.Lock()
        self._closed = False
        self.logger = get_logger(__name__)

        with _open_registries_lock:
            _open_registries.add(self)

        self.logger.debug(
            "Singleton registry initialized",
            failure_policy=self._config.failure_policy.value,
        )

    @property
    def config(self) -> RegistryConfig:
        return self._config

    @property
    def closed(self) -> bool:
        return self._closed

    def register(
        self,
        key: RegistryKey,
        factory: Optional[Callable[..., Any]] = None,
        *,
        name: Optional[str] = None,
        failure_policy: Optional[FailurePolicy] = None,
    ) -> SingletonHolder:
        """
        Register the factory used to build the singleton for ``key``.

        This is the one-time configuration step performed before callers
        race. Registering again replaces the factory as long as nothing has
        been constructed yet.

        Args:
            key: Class or string name identifying the singleton
            factory: Callable building the instance; defaults to ``key`` for classes
            name: Display name used in logs and errors
            failure_policy: Overrides the registry's failure policy for this singleton

        Returns:
            The holder for ``key``

        Raises:
            TypeError: If ``key`` is a string and no factory is given
            AlreadyInitializedError: If the singleton has already been constructed
            RegistryClosedError: If the registry is closed
        """
        if factory is None:
            if not isinstance(key, type):
                raise TypeError(f"A factory is required to register singleton '{key}'")
            factory = key

        with self._registry_lock:
            self._ensure_open("register singleton")
            holder = self._holders.get(key)
            if holder is None:
                holder = self._create_holder(key, factory, name, failure_policy)
                self._holders[key] = holder
                self.logger.info("Registered singleton", singleton=holder.name)
                return holder

        # Never wait on a holder's init guard while holding the registry lock:
        # a factory may itself register other singletons.
        holder.replace_factory(factory, failure_policy)
        self.logger.debug("Replaced singleton factory", singleton=holder.name)
        return holder

    def holder(
        self, key: RegistryKey, *, failure_policy: Optional[FailurePolicy] = None
    ) -> SingletonHolder:
        """
        Return the holder for ``key``, registering classes on first use.

        Args:
            key: Class or string name identifying the singleton
            failure_policy: Failure policy applied if the class gets auto-registered

        Raises:
            UnregisteredSingletonError: If ``key`` is an unknown string name
            RegistryClosedError: If the registry is closed
        """
        self._ensure_open("resolve singleton")
        holder = self._holders.get(key)
        if holder is not None:
            return holder

        with self._registry_lock:
            self._ensure_open("resolve singleton")
            holder = self._holders.get(key)
            if holder is None:
                if not isinstance(key, type):
                    raise UnregisteredSingletonError(str(key), self.registered_names())
                holder = self._create_holder(key, key, None, failure_policy)
                self._holders[key] = holder
                self.logger.debug("Auto-registered singleton", singleton=holder.name)
            return holder

    def get(self, key: RegistryKey, *args: Any, **kwargs: Any) -> Any:
        """
        Get the singleton for ``key``, constructing it on first access.

        Args:
            key: Class or string name identifying the singleton
            *args: Constructor arguments, used only if this call constructs
            **kwargs: Constructor keyword arguments, used only if this call constructs

        Returns:
            The singleton instance
        """
        return self.holder(key).get_instance(*args, **kwargs)

    def ensure_constructible(self, cls: type) -> None:
        """
        Construction guard for ``cls`` within this registry.

        The construction performed by the holder's own factory is allowed;
        any other construction is rejected once the holder is populated.

        Raises:
            AlreadyInitializedError: If the singleton for ``cls`` is already populated
        """
        holder = self._holders.get(cls)
        if holder is not None and not holder.is_constructing:
            holder.guard_construction()

    def is_constructing(self, key: RegistryKey) -> bool:
        """Whether the calling thread is running the factory for ``key``."""
        holder = self._holders.get(key)
        return holder is not None and holder.is_constructing

    def is_registered(self, key: RegistryKey) -> bool:
        with self._registry_lock:
            return key in self._holders

    def is_populated(self, key: RegistryKey) -> bool:
        holder = self._holders.get(key)
        return holder is not None and holder.is_populated

    def peek(self, key: RegistryKey) -> Optional[Any]:
        """Return the singleton for ``key`` if it exists, without constructing it."""
        holder = self._holders.get(key)
        return holder.peek() if holder is not None else None

    def registered_keys(self) -> List[RegistryKey]:
        with self._registry_lock:
            return list(self._holders.keys())

    def registered_names(self) -> List[str]:
        with self._registry_lock:
            return [holder.name for holder in self._holders.values()]

    def describe(self) -> List[Dict[str, Any]]:
        """Summarize every registration for diagnostics."""
        with self._registry_lock:
            holders = list(self._holders.values())
        return [
            {
                "name": holder.name,
                "state": holder.state.value,
                "failure_policy": holder.failure_policy.value,
            }
            for holder in holders
        ]

    def close(self) -> None:
        """
        Tear down the registry.

        Populated instances that expose ``close()`` are closed in reverse
        population order. A failing ``close()`` is logged and does not stop
        the remaining instances from being closed. Closing twice is a no-op.
        """
        with self._registry_lock:
            if self._closed:
                return
            self._closed = True

        with _open_registries_lock:
            _open_registries.discard(self)

        # Holders that finish populating after this snapshot see the closed
        # flag in _record_population and close their own instance.
        with self._order_lock:
            populated = list(reversed(self._population_order))

        closed_count = sum(1 for holder in populated if self._close_instance(holder))
        self.logger.info(
            "Singleton registry closed",
            closed_count=closed_count,
            populated_count=len(populated),
        )

    def _close_instance(self, holder: SingletonHolder) -> bool:
        closer = getattr(holder.peek(), "close", None)
        if not callable(closer):
            return False
        try:
            closer()
        except Exception as e:
            self.logger.error(
                "Failed to close singleton",
                singleton=holder.name,
                error=str(e),
                exc_info=True,
            )
            return False
        self.logger.debug("Closed singleton", singleton=holder.name)
        return True

    def __enter__(self) -> "LazySingletonRegistry":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _create_holder(
        self,
        key: RegistryKey,
        factory: Callable[..., Any],
        name: Optional[str],
        failure_policy: Optional[FailurePolicy],
    ) -> SingletonHolder:
        if name is None:
            name = describe_factory(key) if isinstance(key, type) else str(key)
        return SingletonHolder(
            factory,
            name=name,
            failure_policy=failure_policy or self._config.failure_policy,
            on_populated=self._record_population,
        )

    def _record_population(self, holder: SingletonHolder) -> None:
        with self._order_lock:
            closed = self._closed
            if not closed:
                self._population_order.append(holder)

        if closed:
            self.logger.warning("Singleton populated after registry close", singleton=holder.name)
            self._close_instance(holder)

    def _ensure_open(self, operation: str) -> None:
        if self._closed:
            raise RegistryClosedError(operation)

    def __repr__(self) -> str:
        populated = sum(1 for h in list(self._holders.values()) if h.state is HolderState.POPULATED)
        return f"LazySingletonRegistry(registered={len(self._holders)}, populated={populated})"


# Global registry instance
_process_registry: Optional[LazySingletonRegistry] = None
_process_registry_lock = threading.Lock()


def get_registry() -> LazySingletonRegistry:
    """
    Get the process-scoped singleton registry.

    The registry is created on first call with the registry section of the
    application configuration and, unless disabled there, closed at
    interpreter exit.

    Returns:
        Process singleton registry
    """
    global _process_registry

    registry = _process_registry
    if registry is None:
        with _process_registry_lock:
            if _process_registry is None:
                from lazysingleton.config.manager import ConfigurationManager

                _process_registry = _create_process_registry(ConfigurationManager().registry)
            registry = _process_registry
    return registry


def configure_registry(config: RegistryConfig) -> LazySingletonRegistry:
    """
    Create the process-scoped registry with explicit configuration.

    Call this once at startup, before any singleton is requested. Calling it
    again with the same configuration returns the existing registry.

    Raises:
        AlreadyInitializedError: If the process registry exists with a different configuration
    """
    global _process_registry

    with _process_registry_lock:
        if _process_registry is None:
            _process_registry = _create_process_registry(config)
        elif _process_registry.config != config:
            raise AlreadyInitializedError(
                "process registry",
                "The process singleton registry already exists with a different configuration",
            )
        return _process_registry


def _create_process_registry(config: RegistryConfig) -> LazySingletonRegistry:
    registry = LazySingletonRegistry(config)
    if config.close_on_exit:
        atexit.register(registry.close)
    return registry


def reset_registry() -> None:
    """
    Close and discard the process-scoped registry.

    The next :func:`get_registry` call builds a fresh one. This function is
    primarily for testing purposes.
    """
    global _process_registry

    with _process_registry_lock:
        registry = _process_registry
        _process_registry = None

    if registry is not None:
        atexit.unregister(registry.close)
        registry.close()


def ensure_constructible(cls: type) -> None:
    """
    Construction guard for ``cls`` across every open registry.

    Construction is allowed when the calling thread is running the factory of
    some registry's holder for ``cls``, so a fresh registry can always build
    its own instance. Otherwise it is rejected if any open registry already
    holds a populated instance of ``cls``.

    Raises:
        AlreadyInitializedError: If ``cls`` is populated in an open registry
    """
    with _open_registries_lock:
        registries = list(_open_registries)

    if any(registry.is_constructing(cls) for registry in registries):
        return
    for registry in registries:
        registry.ensure_constructible(cls)
