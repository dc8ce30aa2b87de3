"""Singleton domain exceptions."""

from typing import Any, Dict, List, Optional


class SingletonError(Exception):
    """Base exception for all singleton registry errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging and CLI output."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class AlreadyInitializedError(SingletonError):
    """Raised when a second construction is attempted after population."""

    def __init__(self, name: str, reason: Optional[str] = None):
        message = reason or (
            f"Singleton '{name}' is already initialized; use get_instance() "
            "to obtain the single instance"
        )
        super().__init__(message, "ALREADY_INITIALIZED", {"name": name})
        self.name = name


class ConstructionFailedError(SingletonError):
    """Raised when the factory fails during the guarded first population."""

    def __init__(self, name: str, cause: Optional[BaseException] = None, error_code: str = "CONSTRUCTION_FAILED"):
        detail = f": {cause}" if cause is not None else ""
        super().__init__(
            f"Failed to construct singleton '{name}'{detail}",
            error_code,
            {
                "name": name,
                "cause_type": type(cause).__name__ if cause is not None else None,
            },
        )
        self.name = name
        self.cause = cause


class SingletonPoisonedError(ConstructionFailedError):
    """Raised when a fail-fast holder is accessed after a failed construction."""

    def __init__(self, name: str, cause: Optional[BaseException] = None):
        super().__init__(name, cause, "SINGLETON_POISONED")
        self.message = f"Singleton '{name}' is poisoned by an earlier construction failure"
        self.args = (self.message,)


class CircularConstructionError(SingletonError):
    """Raised when a factory asks its own holder for the instance."""

    def __init__(self, name: str):
        super().__init__(
            f"Circular construction detected for singleton '{name}'",
            "CIRCULAR_CONSTRUCTION",
            {"name": name},
        )
        self.name = name


class UnregisteredSingletonError(SingletonError):
    """Raised when a name that was never registered is requested."""

    def __init__(self, name: str, available: Optional[List[str]] = None):
        available = available or []
        super().__init__(
            f"Singleton '{name}' is not registered. Available singletons: {available}",
            "UNREGISTERED_SINGLETON",
            {"name": name, "available": available},
        )
        self.name = name


class RegistryClosedError(SingletonError):
    """Raised when a closed registry is used."""

    def __init__(self, operation: str):
        super().__init__(
            f"Cannot {operation}: singleton registry is closed",
            "REGISTRY_CLOSED",
            {"operation": operation},
        )
        self.operation = operation


class ConfigurationError(SingletonError):
    """Raised when there's an issue with configuration."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "CONFIGURATION_ERROR", details)
