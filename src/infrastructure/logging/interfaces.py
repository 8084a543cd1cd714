"""
Core Logging Interfaces

Lightweight interfaces for structured logging with pluggable backends.
Log calls build a LogRecord and hand it to the router; formatting happens
in backends.
"""

import time
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field


class LogLevel(IntEnum):
    """Log levels with numeric values for fast comparison."""
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


class LogType(IntEnum):
    """Log types for routing decisions."""
    TEXT = 1      # Regular log messages
    METRIC = 2    # Numeric metrics (latency, counters)
    AUDIT = 3     # Audit trail messages


@dataclass
class LogRecord:
    """
    Log record passed from logger to backends.

    Context is kept as a plain dict; backends decide how to render it.
    """
    timestamp: float
    level: LogLevel
    log_type: LogType
    logger_name: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)

    # Only used when log_type == METRIC
    metric_name: Optional[str] = None
    metric_value: Optional[float] = None

    # Correlation fields lifted out of context
    correlation_id: Optional[str] = None
    exchange: Optional[str] = None
    symbol: Optional[str] = None

    @classmethod
    def create_text(cls, level: LogLevel, logger_name: str, message: str, **context) -> 'LogRecord':
        """Factory method for text log records."""
        return cls(
            timestamp=time.time(),
            level=level,
            log_type=LogType.TEXT,
            logger_name=logger_name,
            message=message,
            context=context
        )

    @classmethod
    def create_metric(cls, logger_name: str, metric_name: str, value: float, **tags) -> 'LogRecord':
        """Factory method for metric log records."""
        return cls(
            timestamp=time.time(),
            level=LogLevel.INFO,
            log_type=LogType.METRIC,
            logger_name=logger_name,
            message=metric_name,
            context=tags,
            metric_name=metric_name,
            metric_value=value,
        )


class LogBackend(ABC):
    """
    Abstract base for all logging backends.

    Each backend handles its own formatting and output logic.
    """

    def __init__(self, name: str):
        self.name = name
        self.enabled = True
        self.min_level = LogLevel.DEBUG
        self._error_count = 0
        self._max_errors = 10  # Disable after too many failures

    @abstractmethod
    def should_handle(self, record: LogRecord) -> bool:
        """Fast check if this backend should process the record."""
        pass

    @abstractmethod
    def write(self, record: LogRecord) -> None:
        """
        Write log record to backend destination.

        Must not raise; failures go through _handle_error.
        """
        pass

    async def flush(self) -> None:
        """Flush any buffered data."""
        pass

    def _handle_error(self, error: Exception) -> None:
        """Handle backend errors gracefully."""
        self._error_count += 1
        if self._error_count >= self._max_errors:
            self.enabled = False
            print(f"Backend {self.name} disabled after {self._max_errors} errors: {error}")


class LogRouter(ABC):
    """Routes log records to appropriate backends."""

    @abstractmethod
    def get_backends(self, record: LogRecord) -> List[LogBackend]:
        """Get list of backends that should handle this record."""
        pass


class HFTLoggerInterface(ABC):
    """
    Interface for the structured logger injected into components as self.logger.

    All methods accept keyword context that ends up in the record.
    """

    @abstractmethod
    def debug(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def info(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def warning(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def error(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def critical(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def metric(self, name: str, value: float, **tags) -> None:
        """Log metric value."""
        pass

    @abstractmethod
    def latency(self, operation: str, duration_ms: float, **tags) -> None:
        """Log latency metric. Convenience method for timing."""
        pass

    @abstractmethod
    def counter(self, name: str, value: int = 1, **tags) -> None:
        """Log counter metric. Increment by value."""
        pass

    @abstractmethod
    def audit(self, event: str, **context) -> None:
        """Log audit event (trades, auth outcomes)."""
        pass

    @abstractmethod
    def set_context(self, **context) -> None:
        """Set persistent context for all logs from this logger."""
        pass

    @abstractmethod
    async def flush(self) -> None:
        """Flush all backends."""
        pass
