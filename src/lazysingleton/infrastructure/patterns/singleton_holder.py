"""Lazily populated, thread-safe holder for a single value."""

import threading
import time
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

from lazysingleton.config.schemas import FailurePolicy
from lazysingleton.domain.exceptions import (
    AlreadyInitializedError,
    CircularConstructionError,
    ConstructionFailedError,
    SingletonError,
    SingletonPoisonedError,
)
from lazysingleton.infrastructure.error import ExceptionContext
from lazysingleton.infrastructure.logging import get_logger

T = TypeVar("T")
logger = get_logger(__name__)


class HolderState(str, Enum):
    """Population state of a holder."""

    EMPTY = "empty"
    POPULATED = "populated"
    POISONED = "poisoned"


def describe_factory(factory: Callable[..., Any]) -> str:
    """Build a readable name for a factory or class."""
    module = getattr(factory, "__module__", None)
    qualname = getattr(factory, "__qualname__", None) or getattr(factory, "__name__", None)
    if qualname is None:
        return repr(factory)
    return f"{module}.{qualname}" if module else qualname


class SingletonHolder(Generic[T]):
    """
    Holds at most one value, built on first demand.

    Once populated, :meth:`get_instance` is a plain attribute read with no
    locking. Only callers that find the holder empty take the init guard;
    they re-check the state after acquiring it, so the factory runs exactly
    once no matter how many threads race the first access. The value is
    published only after the factory has returned.

    A failed construction leaves the holder EMPTY under
    ``FailurePolicy.RETRY`` so the next caller tries again. Under
    ``FailurePolicy.FAIL_FAST`` the holder becomes POISONED and every later
    call raises :class:`SingletonPoisonedError`.
    """

    def __init__(
        self,
        factory: Callable[..., T],
        name: Optional[str] = None,
        failure_policy: FailurePolicy = FailurePolicy.RETRY,
        on_populated: Optional[Callable[["SingletonHolder[T]"], None]] = None,
    ):
        self.name = name or describe_factory(factory)
        self.failure_policy = FailurePolicy(failure_policy)
        self._factory = factory
        self._on_populated = on_populated

        self._instance: Optional[T] = None
        self._populated = False
        self._state = HolderState.EMPTY
        self._failure: Optional[BaseException] = None

        self._init_guard = threading.Lock()
        self._constructing_thread: Optional[int] = None

    @property
    def state(self) -> HolderState:
        return self._state

    @property
    def is_populated(self) -> bool:
        return self._populated

    @property
    def failure(self) -> Optional[BaseException]:
        """Exception that poisoned the holder, if any."""
        return self._failure

    @property
    def is_constructing(self) -> bool:
        """True while the calling thread is running this holder's factory."""
        return self._constructing_thread == threading.get_ident()

    def peek(self) -> Optional[T]:
        """Return the instance without constructing it."""
        return self._instance if self._populated else None

    def get_instance(self, *args: Any, **kwargs: Any) -> T:
        """
        Return the single instance, constructing it on first call.

        Args:
            *args: Positional arguments for the factory, used only by the call that constructs
            **kwargs: Keyword arguments for the factory, used only by the call that constructs

        Raises:
            ConstructionFailedError: If the factory raises
            SingletonPoisonedError: If a fail-fast holder failed earlier
            CircularConstructionError: If the factory asks this holder for the instance
        """
        if self._populated:
            return self._instance  # type: ignore[return-value]
        return self._populate(args, kwargs)

    def guard_construction(self) -> None:
        """
        Reject construction once the holder is populated.

        Constructors call this before building a new value so that any path
        around :meth:`get_instance` fails after the first population. A bypass
        that runs before population is not detected.

        Raises:
            AlreadyInitializedError: If the holder is populated
        """
        if self._populated:
            raise AlreadyInitializedError(self.name)

    def replace_factory(
        self, factory: Callable[..., T], failure_policy: Optional[FailurePolicy] = None
    ) -> None:
        """
        Swap the factory of an empty holder.

        Raises:
            AlreadyInitializedError: If the holder is populated
            SingletonPoisonedError: If the holder is poisoned
            CircularConstructionError: If called from inside this holder's factory
        """
        self._check_reentry()
        with self._init_guard:
            if self._populated:
                raise AlreadyInitializedError(
                    self.name, f"Cannot re-register singleton '{self.name}' after it was initialized"
                )
            if self._state is HolderState.POISONED:
                raise SingletonPoisonedError(self.name, self._failure)
            self._factory = factory
            if failure_policy is not None:
                self.failure_policy = FailurePolicy(failure_policy)

    def _check_reentry(self) -> None:
        # The init guard is not reentrant; a factory reaching back into its own holder would block forever.
        if self.is_constructing:
            raise CircularConstructionError(self.name)

    def _populate(self, args: tuple, kwargs: dict) -> T:
        self._check_reentry()
        with self._init_guard:
            if self._populated:
                return self._instance  # type: ignore[return-value]
            if self._state is HolderState.POISONED:
                raise SingletonPoisonedError(self.name, self._failure) from self._failure

            self._constructing_thread = threading.get_ident()
            start_time = time.perf_counter()
            try:
                instance = self._factory(*args, **kwargs)
            except Exception as e:
                self._handle_failure(e)
                if isinstance(e, SingletonError):
                    raise
                raise ConstructionFailedError(self.name, e) from e
            finally:
                self._constructing_thread = None

            self._instance = instance
            self._state = HolderState.POPULATED
            self._populated = True

            logger.info(
                "Singleton initialized",
                singleton=self.name,
                elapsed_ms=round((time.perf_counter() - start_time) * 1000, 3),
            )

        if self._on_populated is not None:
            self._on_populated(self)
        return instance

    def _handle_failure(self, error: Exception) -> None:
        context = ExceptionContext(
            "construct_singleton",
            singleton=self.name,
            failure_policy=self.failure_policy.value,
        )
        if self.failure_policy is FailurePolicy.FAIL_FAST:
            self._state = HolderState.POISONED
            self._failure = error
        logger.error(
            "Singleton construction failed",
            error=str(error),
            error_type=type(error).__name__,
            state=self._state.value,
            **context.to_dict(),
        )

    def __repr__(self) -> str:
        return f"SingletonHolder(name='{self.name}', state='{self._state.value}')"
