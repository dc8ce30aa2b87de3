"""Domain layer: singleton error hierarchy."""

from .exceptions import (
    AlreadyInitializedError,
    CircularConstructionError,
    ConfigurationError,
    ConstructionFailedError,
    RegistryClosedError,
    SingletonError,
    SingletonPoisonedError,
    UnregisteredSingletonError,
)

__all__ = [
    "SingletonError",
    "AlreadyInitializedError",
    "ConstructionFailedError",
    "SingletonPoisonedError",
    "CircularConstructionError",
    "UnregisteredSingletonError",
    "RegistryClosedError",
    "ConfigurationError",
]
