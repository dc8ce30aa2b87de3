"""Main application configuration schema."""

from typing import Any, Dict

from pydantic import BaseModel, Field

from .logging_schema import LoggingConfig
from .registry_schema import RegistryConfig


class AppConfig(BaseModel):
    """Application configuration."""

    logging: LoggingConfig = Field(default_factory=lambda: LoggingConfig())
    registry: RegistryConfig = Field(default_factory=lambda: RegistryConfig())
    environment: str = Field("development", description="Environment")
    debug: bool = Field(False, description="Debug mode")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        """Create a validated configuration from a raw dictionary."""
        return cls.model_validate(data)
