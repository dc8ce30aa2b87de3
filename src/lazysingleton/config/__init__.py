"""Configuration package with clean public API."""

from .manager import ConfigurationManager
from .schemas import AppConfig, FailurePolicy, LoggingConfig, RegistryConfig

__all__ = [
    "AppConfig",
    "LoggingConfig",
    "RegistryConfig",
    "FailurePolicy",
    "ConfigurationManager",
]
