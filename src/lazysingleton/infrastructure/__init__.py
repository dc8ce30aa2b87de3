"""Infrastructure layer: logging, error context and singleton patterns."""
