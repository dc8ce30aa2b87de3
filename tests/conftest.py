import logging
import os
import sys

import pytest

# Add src and the shared test helpers to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))
sys.path.insert(0, os.path.dirname(__file__))

from lazysingleton.config import LoggingConfig  # noqa: E402
from lazysingleton.demo import AuditTrail  # noqa: E402
from lazysingleton.infrastructure.logging import setup_logging  # noqa: E402
from lazysingleton.infrastructure.patterns import reset_registry  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Route structlog through the standard logging module at DEBUG."""
    setup_logging(LoggingConfig(level="DEBUG", destination="stdout"))


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep LAZYSINGLETON_* variables from leaking into configuration."""
    for name in list(os.environ):
        if name.startswith("LAZYSINGLETON_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def fresh_process_registry(clean_environment):
    """Give every test its own process registry."""
    reset_registry()
    yield
    reset_registry()


@pytest.fixture(autouse=True)
def empty_audit_trail(monkeypatch):
    """Start every test with an empty audit trail."""
    monkeypatch.setattr(AuditTrail.INSTANCE, "_entries", [])


@pytest.fixture
def info_caplog(caplog):
    caplog.set_level(logging.INFO)
    return caplog
