"""
Logging Factory

Creates and caches logger instances from struct-based configuration.
Components call get_logger() and keep the result as self.logger.
"""

import os
from typing import Dict, Optional

from infrastructure.exceptions.system import ConfigurationError
from .interfaces import HFTLoggerInterface, LogLevel
from .hft_logger import HFTLogger
from .router import create_router
from .backends.console import ConsoleBackend, ColorConsoleBackend
from .backends.file import FileBackend
from .structs import LoggingConfig, RouterConfig


class LoggerFactory:
    """Simplified logging factory - trust config, fail fast."""

    _cached_loggers: Dict[str, HFTLoggerInterface] = {}
    _default_config: Optional[LoggingConfig] = None

    @classmethod
    def create_logger(cls, name: str, config: Optional[LoggingConfig] = None) -> HFTLoggerInterface:
        """Create logger instance, cached by name."""
        if name in cls._cached_loggers:
            return cls._cached_loggers[name]

        config = config or cls._get_default_config()

        backends = []
        if config.console and config.console.enabled:
            backend_class = ColorConsoleBackend if config.console.color else ConsoleBackend
            backends.append(backend_class(config.console, 'console'))

        if config.file and config.file.enabled:
            backends.append(FileBackend(config.file, 'file'))

        router = create_router({b.name: b for b in backends}, config.router or RouterConfig())

        logger = HFTLogger(
            name=name,
            backends=backends,
            router=router,
            default_context=config.default_context
        )

        cls._cached_loggers[name] = logger
        return logger

    @classmethod
    def get_default_config(cls) -> LoggingConfig:
        return cls._get_default_config()

    @classmethod
    def override_logger(cls, name: str, **overrides) -> bool:
        """
        Override logger configuration at runtime.

        Args:
            name: Logger name to override
            **overrides:
                - min_level: Change minimum log level (e.g., "ERROR")
                - enabled: Enable/disable all backends of the logger

        Returns:
            True if logger was found and modified, False otherwise

        Example:
            LoggerFactory.override_logger("coinex.ws.session", min_level="ERROR")
        """
        if name not in cls._cached_loggers:
            return False

        logger = cls._cached_loggers[name]

        if "min_level" in overrides:
            level = overrides["min_level"]
            level = LogLevel[level.upper()] if isinstance(level, str) else LogLevel(level)
            for backend in logger.backends:
                backend.min_level = level

        if "enabled" in overrides:
            for backend in logger.backends:
                backend.enabled = overrides["enabled"]

        return True

    @classmethod
    def clear_cache(cls) -> None:
        """Clear cached logger instances."""
        cls._cached_loggers.clear()
        cls._default_config = None

    @classmethod
    def _get_default_config(cls) -> LoggingConfig:
        if cls._default_config is None:
            try:
                cls._default_config = cls._load_default_config()
            except (ConfigurationError, ValueError) as e:
                print(f"Logging config not loaded ({e}), using environment defaults")
                cls._default_config = cls._environment_default()
        return cls._default_config

    @classmethod
    def _load_default_config(cls) -> LoggingConfig:
        """Read the logging section of config.yaml through the config manager."""
        # Delayed import to avoid circular dependency
        from config.config_manager import get_config
        return get_config().get_logging_config()

    @staticmethod
    def _environment_default() -> LoggingConfig:
        if os.getenv('ENVIRONMENT', 'dev') == 'prod':
            return LoggingConfig.default_production()
        return LoggingConfig.default_development()


def get_logger(name: str) -> HFTLoggerInterface:
    """Get logger instance. Simple, fast."""
    return LoggerFactory.create_logger(name)


def get_exchange_logger(exchange: str, component: str = None) -> HFTLoggerInterface:
    """Get exchange logger with optional component, e.g. coinex.ws.session."""
    name = f"{exchange}.{component}" if component else exchange
    return get_logger(name)


def configure_logging(config: LoggingConfig) -> None:
    """Install a new default config and drop cached loggers."""
    config.validate()
    LoggerFactory.clear_cache()
    LoggerFactory._default_config = config
