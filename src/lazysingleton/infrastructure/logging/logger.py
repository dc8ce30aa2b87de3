"""Structured logging built on structlog and the standard logging module."""
import logging
import os
import threading
from logging.handlers import RotatingFileHandler
from typing import Any, List, Optional

import structlog

from lazysingleton.config.schemas import LoggingConfig

_HANDLER_MARKER = "_lazysingleton_handler"
_setup_lock = threading.Lock()


class DetailedFormatter(structlog.stdlib.ProcessorFormatter):
    """ProcessorFormatter that adds caller information to the record."""

    def format(self, record: logging.LogRecord) -> str:
        record.caller_info = f"{record.module}.{record.funcName}:{record.lineno}"
        return super().format(record)


def _build_formatter(config: LoggingConfig) -> logging.Formatter:
    if config.renderer == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    return DetailedFormatter(
        processor=renderer,
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
        ],
    )


def setup_logging(config: Optional[LoggingConfig] = None) -> structlog.stdlib.BoundLogger:
    """
    Set up structured logging for the application using structlog.

    Handlers installed by an earlier call are replaced; handlers installed by
    anyone else (test harnesses, host applications) are left alone.

    Args:
        config: Logging configuration. Defaults are used when omitted.

    Returns:
        Configured structlog logger instance.
    """
    config = config or LoggingConfig()

    with _setup_lock:
        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, config.level))

        formatter = _build_formatter(config)
        handlers: List[logging.Handler] = []

        if config.destination in ("file", "both"):
            log_dir = os.path.dirname(os.path.expandvars(config.file_path))
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(
                os.path.expandvars(config.file_path),
                maxBytes=config.max_size_mb * 1024 * 1024,
                backupCount=config.backup_count,
            )
            handlers.append(file_handler)

        if config.destination in ("stdout", "both"):
            handlers.append(logging.StreamHandler())

        for handler in root_logger.handlers[:]:
            if getattr(handler, _HANDLER_MARKER, False):
                root_logger.removeHandler(handler)
                handler.close()

        for handler in handlers:
            handler.setFormatter(formatter)
            setattr(handler, _HANDLER_MARKER, True)
            root_logger.addHandler(handler)

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    logger = structlog.get_logger("lazysingleton")
    logger.debug(
        "Logging configured",
        log_level=config.level,
        log_destination=config.destination,
        renderer=config.renderer,
    )
    return logger


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger, configuring defaults on first use."""
    if not structlog.is_configured():
        setup_logging()
    return structlog.get_logger(name)
