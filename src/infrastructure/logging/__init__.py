"""
Structured Logging System

Configured automatically from the logging section of config.yaml.

Usage:
    from infrastructure.logging import get_logger

    logger = get_logger('coinex.ws.session')
    logger.info("Connection state changed", previous_state="CONNECTING", new_state="CONNECTED")

    # Metrics logging
    logger.metric("ws_reconnect_attempts", 1, exchange="coinex")
"""

from .interfaces import (
    LogLevel,
    LogType,
    LogRecord,
    LogBackend,
    LogRouter,
    HFTLoggerInterface
)

from .hft_logger import HFTLogger, LoggingTimer

from .factory import (
    LoggerFactory,
    get_logger,
    get_exchange_logger,
    configure_logging,
)

from .structs import (
    LoggingConfig,
    ConsoleBackendConfig,
    FileBackendConfig,
    RouterConfig,
    BackendConfig
)

from .router import SimpleRouter, create_router

from .backends.console import ConsoleBackend, ColorConsoleBackend
from .backends.file import FileBackend

__all__ = [
    'LogLevel',
    'LogType',
    'LogRecord',
    'LogBackend',
    'LogRouter',
    'HFTLoggerInterface',
    'HFTLogger',
    'LoggingTimer',
    'LoggerFactory',
    'get_logger',
    'get_exchange_logger',
    'configure_logging',
    'LoggingConfig',
    'ConsoleBackendConfig',
    'FileBackendConfig',
    'RouterConfig',
    'BackendConfig',
    'SimpleRouter',
    'create_router',
    'ConsoleBackend',
    'ColorConsoleBackend',
    'FileBackend',
]
