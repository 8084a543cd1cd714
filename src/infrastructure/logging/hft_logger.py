"""
Structured Logger Implementation

Main logger used as self.logger across the client. Records are built
with merged persistent context and dispatched synchronously to the
routed backends, which keeps ordering identical to call order inside
the single event loop.
"""

import asyncio
import time
from typing import Dict, List, Any

from .interfaces import (
    HFTLoggerInterface, LogBackend, LogRouter, LogRecord,
    LogLevel, LogType
)


class HFTLogger(HFTLoggerInterface):
    """
    Logger with multiple backends and persistent context.

    Key features:
    - Structured keyword context on every call
    - Correlation fields (exchange, symbol, correlation_id) lifted out of context
    - Metrics, latency and counters routed separately from text
    """

    def __init__(self, name: str, backends: List[LogBackend], router: LogRouter,
                 default_context: Dict[str, Any] = None):
        self.name = name
        self.backends = backends
        self.router = router

        # Persistent context for all log messages
        self.context: Dict[str, Any] = dict(default_context or {})

        self._call_count = 0

    def _build_record(self, level: LogLevel, msg: str, log_type: LogType, context: Dict[str, Any]) -> LogRecord:
        full_context = {**self.context, **context}

        correlation_id = full_context.pop('correlation_id', None)
        exchange = full_context.pop('exchange', None)
        symbol = full_context.pop('symbol', None)

        return LogRecord(
            timestamp=time.time(),
            level=level,
            log_type=log_type,
            logger_name=self.name,
            message=str(msg),
            context=full_context,
            correlation_id=correlation_id,
            exchange=exchange,
            symbol=symbol
        )

    def _dispatch(self, record: LogRecord) -> None:
        self._call_count += 1
        for backend in self.router.get_backends(record):
            if backend.enabled:
                backend.write(record)

    def _log(self, level: LogLevel, msg: str, log_type: LogType = LogType.TEXT, **context) -> None:
        self._dispatch(self._build_record(level, msg, log_type, context))

    def debug(self, msg: str, **context) -> None:
        self._log(LogLevel.DEBUG, msg, **context)

    def info(self, msg: str, **context) -> None:
        self._log(LogLevel.INFO, msg, **context)

    def warning(self, msg: str, **context) -> None:
        self._log(LogLevel.WARNING, msg, **context)

    def error(self, msg: str, **context) -> None:
        self._log(LogLevel.ERROR, msg, **context)

    def critical(self, msg: str, **context) -> None:
        self._log(LogLevel.CRITICAL, msg, **context)

    def metric(self, name: str, value: float, **tags) -> None:
        record = self._build_record(LogLevel.INFO, name, LogType.METRIC, tags)
        record.metric_name = name
        record.metric_value = float(value)
        self._dispatch(record)

    def latency(self, operation: str, duration_ms: float, **tags) -> None:
        self.metric(f"{operation}_latency_ms", duration_ms, **tags)

    def counter(self, name: str, value: int = 1, **tags) -> None:
        self.metric(f"{name}_count", float(value), **tags)

    def audit(self, event: str, **context) -> None:
        self._log(LogLevel.INFO, event, LogType.AUDIT, **context)

    def set_context(self, **context) -> None:
        self.context.update(context)

    async def flush(self) -> None:
        for backend in self.backends:
            try:
                await backend.flush()
            except Exception as e:
                print(f"Backend {backend.name} flush error: {e}")

    def get_performance_stats(self) -> Dict[str, Any]:
        return {
            "calls": self._call_count,
            "backends_enabled": sum(1 for b in self.backends if b.enabled),
            "backends_total": len(self.backends)
        }


class LoggingTimer:
    """Context manager for timing operations with automatic logging."""

    def __init__(self, logger: HFTLoggerInterface, operation: str, **tags):
        self.logger = logger
        self.operation = operation
        self.tags = tags
        self.start_time = None
        self.end_time = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is not None:
            self.end_time = time.perf_counter()
            duration_ms = (self.end_time - self.start_time) * 1000
            self.logger.latency(self.operation, duration_ms, **self.tags)

        if exc_type is not None and not issubclass(exc_type, asyncio.CancelledError):
            self.logger.error(f"{self.operation} failed",
                              error_type=exc_type.__name__,
                              **self.tags)

    @property
    def elapsed_ms(self) -> float:
        """Get elapsed time in milliseconds."""
        if self.start_time is None:
            return 0.0
        end_time = self.end_time or time.perf_counter()
        return (end_time - self.start_time) * 1000
