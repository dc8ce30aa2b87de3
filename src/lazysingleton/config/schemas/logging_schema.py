"""Logging configuration schema."""
from pydantic import BaseModel, ConfigDict, Field, field_validator


class LoggingConfig(BaseModel):
    """Logging configuration."""
    model_config = ConfigDict(extra="forbid")

    level: str = Field("INFO", description="Root log level")
    destination: str = Field("stdout", description="Log destination (stdout, file, both)")
    file_path: str = Field("logs/lazysingleton.log", description="Log file path")
    max_size_mb: int = Field(10, ge=1, description="Maximum log file size before rotation")
    backup_count: int = Field(5, ge=0, description="Number of rotated log files to keep")
    renderer: str = Field("console", description="structlog renderer (console, json)")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        """Validate log destination."""
        if v not in ("stdout", "file", "both"):
            raise ValueError("Log destination must be one of ['stdout', 'file', 'both']")
        return v

    @field_validator("renderer")
    @classmethod
    def validate_renderer(cls, v: str) -> str:
        """Validate renderer."""
        if v not in ("console", "json"):
            raise ValueError("Renderer must be one of ['console', 'json']")
        return v
