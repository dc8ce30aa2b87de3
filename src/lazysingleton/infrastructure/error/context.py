"""Exception context management."""

import threading
from datetime import datetime, timezone
from typing import Any, Dict


class ExceptionContext:
    """Rich context information for exception handling."""

    def __init__(self, operation: str, layer: str = "infrastructure", **additional_context):
        self.operation = operation
        self.layer = layer
        self.timestamp = datetime.now(timezone.utc)
        self.thread_id = threading.get_ident()
        self.thread_name = threading.current_thread().name
        self.additional_context = additional_context

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary for logging."""
        return {
            "operation": self.operation,
            "layer": self.layer,
            "timestamp": self.timestamp.isoformat(),
            "thread_id": self.thread_id,
            "thread_name": self.thread_name,
            **self.additional_context,
        }
