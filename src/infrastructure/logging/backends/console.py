"""
Console Backend

Provides console output through Python's logging system so existing
handlers, formatters and pytest's caplog keep working.
"""

import logging
import os
import sys
from typing import Dict

from ..interfaces import LogBackend, LogRecord, LogLevel, LogType
from ..structs import ConsoleBackendConfig


_PY_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.CRITICAL
}


class ConsoleBackend(LogBackend):
    """
    Console logging backend.

    Accepts only ConsoleBackendConfig struct for configuration.
    """

    def __init__(self, config: ConsoleBackendConfig, name: str = "console"):
        if not isinstance(config, ConsoleBackendConfig):
            raise TypeError(f"Expected ConsoleBackendConfig, got {type(config)}")

        super().__init__(name)
        self.config = config
        self.min_level = LogLevel[config.min_level.upper()]
        self.color_enabled = config.color
        self.include_context = config.include_context
        self.max_message_length = config.max_message_length
        self.enabled = config.enabled

        # Cache for Python loggers (one per logger name)
        self._py_loggers: Dict[str, logging.Logger] = {}

        if self.enabled:
            self._ensure_python_logging_configured()

    def should_handle(self, record: LogRecord) -> bool:
        if not self.enabled or record.level < self.min_level:
            return False
        return record.log_type in (LogType.TEXT, LogType.AUDIT)

    def write(self, record: LogRecord) -> None:
        """Write to console using Python logging system."""
        try:
            py_logger = self._get_python_logger(record.logger_name)
            py_logger.log(_PY_LEVELS.get(record.level, logging.INFO), self._format_message(record))
        except Exception as e:
            self._handle_error(e)

    def _ensure_python_logging_configured(self) -> None:
        """Attach a stream handler to the root logger if nothing else did."""
        root_logger = logging.getLogger()
        if root_logger.handlers:
            return

        console_handler = logging.StreamHandler()
        if self.color_enabled:
            formatter = logging.Formatter('%(levelname)-8s %(name)-20s %(message)s')
        else:
            formatter = logging.Formatter('%(asctime)s %(levelname)s - %(name)s - %(message)s')
        console_handler.setFormatter(formatter)

        py_level = _PY_LEVELS[self.min_level]
        console_handler.setLevel(py_level)
        root_logger.setLevel(py_level)
        root_logger.addHandler(console_handler)

    def _get_python_logger(self, name: str) -> logging.Logger:
        if name not in self._py_loggers:
            self._py_loggers[name] = logging.getLogger(name)
        return self._py_loggers[name]

    def _format_message(self, record: LogRecord) -> str:
        """Format message as 'message | key=value, ...'."""
        message = record.message

        if len(message) > self.max_message_length:
            message = message[:self.max_message_length] + "..."

        parts = []
        if self.include_context and record.context:
            for key, value in record.context.items():
                value_str = str(value)
                if len(value_str) > 100:
                    value_str = value_str[:100] + "..."
                parts.append(f"{key}={value_str}")

        if record.correlation_id:
            parts.append(f"correlation_id={record.correlation_id}")
        if record.exchange:
            parts.append(f"exchange={record.exchange}")
        if record.symbol:
            parts.append(f"symbol={record.symbol}")

        if parts:
            message += f" | {', '.join(parts)}"

        if record.log_type != LogType.TEXT:
            message = f"[{record.log_type.name}] {message}"

        return message


class ColorConsoleBackend(ConsoleBackend):
    """Console backend that adds ANSI color codes based on log level."""

    COLORS = {
        LogLevel.DEBUG: '\033[36m',    # Cyan
        LogLevel.INFO: '\033[37m',     # White
        LogLevel.WARNING: '\033[33m',  # Yellow
        LogLevel.ERROR: '\033[31m',    # Red
        LogLevel.CRITICAL: '\033[35m', # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, config: ConsoleBackendConfig, name: str = "console"):
        super().__init__(config, name)
        self.use_colors = (
            self.color_enabled
            and os.getenv('TERM') != 'dumb'
            and hasattr(sys.stdout, 'isatty')
            and sys.stdout.isatty()
        )

    def _format_message(self, record: LogRecord) -> str:
        message = super()._format_message(record)
        if self.use_colors and record.level in self.COLORS:
            message = f"{self.COLORS[record.level]}{message}{self.RESET}"
        return message
