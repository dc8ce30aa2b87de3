"""Error handling infrastructure."""

from .context import ExceptionContext

__all__ = ["ExceptionContext"]
