"""Configuration management for the singleton registry."""
from __future__ import annotations

import json
import logging
import os
import threading
from typing import Any, Dict, Optional

from pydantic import ValidationError

from lazysingleton.config.schemas import AppConfig, LoggingConfig, RegistryConfig
from lazysingleton.domain.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "LAZYSINGLETON_"
CONFIG_FILE_ENV = "LAZYSINGLETON_CONFIG_FILE"


class ConfigurationManager:
    """
    Configuration manager that serves as the single source of truth.

    Configuration is assembled from three sources, lowest priority first:
    schema defaults, an optional JSON file and environment variables of the
    form ``LAZYSINGLETON_<SECTION>__<FIELD>`` (for example
    ``LAZYSINGLETON_LOGGING__LEVEL=DEBUG``). Loading is lazy and happens at
    most once per manager until :meth:`reload` is called.
    """

    def __init__(self, config_file: Optional[str] = None):
        """Initialize configuration manager with lazy loading."""
        self._config_file = config_file or os.environ.get(CONFIG_FILE_ENV)
        self._lock = threading.RLock()
        self._app_config: Optional[AppConfig] = None

    @property
    def app_config(self) -> AppConfig:
        """Lazy load application configuration."""
        if self._app_config is None:
            with self._lock:
                if self._app_config is None:
                    self._app_config = self._load_app_config()
        return self._app_config

    @property
    def logging(self) -> LoggingConfig:
        return self.app_config.logging

    @property
    def registry(self) -> RegistryConfig:
        return self.app_config.registry

    def reload(self) -> None:
        """Reload configuration from sources on next access."""
        with self._lock:
            self._app_config = None

    def _load_app_config(self) -> AppConfig:
        """Load application configuration from sources."""
        config_data: Dict[str, Any] = {}
        if self._config_file:
            config_data = self._load_config_file(self._config_file)

        config_data = self._apply_environment_overrides(config_data)

        try:
            app_config = AppConfig.from_dict(config_data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration: {e.error_count()} validation error(s)",
                {"errors": e.errors(include_url=False)},
            ) from e

        logger.debug("Configuration loaded from %s", self._config_file or "defaults")
        return app_config

    @staticmethod
    def _load_config_file(config_path: str) -> Dict[str, Any]:
        """Load configuration from a JSON file."""
        if not os.path.exists(config_path):
            raise ConfigurationError(
                f"Configuration file not found: {config_path}", {"path": config_path}
            )
        try:
            with open(config_path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Failed to load configuration: {str(e)}", {"path": config_path}
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                "Configuration file must contain a JSON object", {"path": config_path}
            )
        return data

    @staticmethod
    def _apply_environment_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply LAZYSINGLETON_SECTION__FIELD environment overrides."""
        result = json.loads(json.dumps(config))
        for env_var, value in os.environ.items():
            if not env_var.startswith(ENV_PREFIX) or env_var == CONFIG_FILE_ENV:
                continue
            path = [part.lower() for part in env_var[len(ENV_PREFIX):].split("__") if part]
            if not path:
                continue

            current = result
            for key in path[:-1]:
                node = current.setdefault(key, {})
                if not isinstance(node, dict):
                    raise ConfigurationError(
                        f"Environment override {env_var} conflicts with a scalar value",
                        {"variable": env_var},
                    )
                current = node
            current[path[-1]] = value
        return result
