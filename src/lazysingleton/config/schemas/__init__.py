"""Configuration schemas."""

from .app_schema import AppConfig
from .logging_schema import LoggingConfig
from .registry_schema import FailurePolicy, RegistryConfig

__all__ = [
    "AppConfig",
    "LoggingConfig",
    "RegistryConfig",
    "FailurePolicy",
]
