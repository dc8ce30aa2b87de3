"""Singleton registry configuration schema."""
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FailurePolicy(str, Enum):
    """What a holder does after its factory raises."""

    RETRY = "retry"
    FAIL_FAST = "fail_fast"


class RegistryConfig(BaseModel):
    """Singleton registry configuration."""
    model_config = ConfigDict(extra="forbid")

    failure_policy: FailurePolicy = Field(
        FailurePolicy.RETRY,
        description="Leave a holder empty (retry) or poison it (fail_fast) after a failed construction",
    )
    close_on_exit: bool = Field(True, description="Close the process registry at interpreter exit")
