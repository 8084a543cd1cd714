"""
File Backend for Persistent Logging

Buffers text or JSON lines and appends them to a log file with aiofiles,
rotating by size. Handles warnings, errors, audit records and optionally
metrics.

The logger calls write() synchronously. Inside a running event loop the
buffer is flushed by a task once it holds buffer_size lines, or after
flush_interval seconds otherwise. Outside a loop every write is flushed
before returning.
"""

import asyncio
import json
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Set

import aiofiles
import aiofiles.os

from ..interfaces import LogBackend, LogRecord, LogLevel, LogType
from ..structs import FileBackendConfig


class FileBackend(LogBackend):
    """
    File logging backend.

    Accepts only FileBackendConfig struct for configuration.
    """

    def __init__(self, config: FileBackendConfig, name: str = "file"):
        if not isinstance(config, FileBackendConfig):
            raise TypeError(f"Expected FileBackendConfig, got {type(config)}")

        super().__init__(name)
        self.config = config
        self.file_path = Path(config.path)
        self.format_type = config.format
        self.min_level = LogLevel[config.min_level.upper()]
        self.max_file_size = config.max_size_mb * 1024 * 1024
        self.backup_count = config.backup_count
        self.buffer_size = config.buffer_size
        self.flush_interval = config.flush_interval
        self.include_types = {LogType.TEXT, LogType.AUDIT}
        if config.include_metrics:
            self.include_types.add(LogType.METRIC)
        self.enabled = config.enabled

        self._write_buffer: List[str] = []
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None
        self._flush_handle: Optional[asyncio.TimerHandle] = None
        self._flush_loop: Optional[asyncio.AbstractEventLoop] = None
        self._flush_tasks: Set[asyncio.Task] = set()

        if self.enabled:
            self._ensure_directory()

    @property
    def pending(self) -> int:
        """Lines buffered but not yet written."""
        return len(self._write_buffer)

    def should_handle(self, record: LogRecord) -> bool:
        if not self.enabled or record.level < self.min_level:
            return False
        return record.log_type in self.include_types

    def write(self, record: LogRecord) -> None:
        if not self.enabled:
            return
        try:
            line = self._format_json(record) if self.format_type == 'json' else self._format_text(record)
        except Exception as e:
            self._handle_error(e)
            return
        self._write_buffer.append(line)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self.flush())
            return

        if len(self._write_buffer) >= self.buffer_size:
            self._cancel_flush_timer()
            self._start_flush(loop)
        elif self._flush_handle is None or self._flush_loop is not loop:
            self._flush_handle = loop.call_later(self.flush_interval, self._on_flush_timer, loop)
            self._flush_loop = loop

    async def flush(self) -> None:
        """Write every buffered line to disk."""
        if not self.enabled:
            return
        async with self._get_lock():
            await self._flush_buffer()

    def _on_flush_timer(self, loop: asyncio.AbstractEventLoop) -> None:
        self._flush_handle = None
        self._start_flush(loop)

    def _start_flush(self, loop: asyncio.AbstractEventLoop) -> None:
        task = loop.create_task(self.flush())
        self._flush_tasks.add(task)
        task.add_done_callback(self._flush_tasks.discard)

    def _cancel_flush_timer(self) -> None:
        if self._flush_handle is not None:
            self._flush_handle.cancel()
            self._flush_handle = None

    def _get_lock(self) -> asyncio.Lock:
        # asyncio.Lock binds to the loop that first waits on it
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    async def _flush_buffer(self) -> None:
        if not self._write_buffer:
            return
        lines = self._write_buffer
        self._write_buffer = []
        try:
            await self._check_rotation()
            async with aiofiles.open(self.file_path, 'a', encoding='utf-8') as f:
                await f.write(''.join(line + '\n' for line in lines))
        except Exception as e:
            self._handle_error(e)
            if self.enabled:
                self._write_buffer[:0] = lines

    def _ensure_directory(self) -> None:
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self._handle_error(e)

    async def _check_rotation(self) -> None:
        if not await aiofiles.os.path.exists(self.file_path):
            return
        if await aiofiles.os.path.getsize(self.file_path) >= self.max_file_size:
            await self._rotate_file()

    async def _rotate_file(self) -> None:
        """Shift app.log.N -> app.log.N+1 and move the live file to .1."""
        for i in range(self.backup_count - 1, 0, -1):
            old_file = self.file_path.with_suffix(f'.{i}')
            new_file = self.file_path.with_suffix(f'.{i + 1}')
            if await aiofiles.os.path.exists(old_file):
                await aiofiles.os.replace(old_file, new_file)

        if self.backup_count == 0:
            await aiofiles.os.remove(self.file_path)
            return

        await aiofiles.os.replace(self.file_path, self.file_path.with_suffix('.1'))

    def _format_text(self, record: LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.timestamp).isoformat()
        message = f"[{timestamp}] {record.level.name} {record.logger_name}: {record.message}"

        if record.log_type == LogType.METRIC:
            message += f" = {record.metric_value}"

        parts = [f"{k}={v}" for k, v in record.context.items()]
        if record.correlation_id:
            parts.append(f"correlation_id={record.correlation_id}")
        if record.exchange:
            parts.append(f"exchange={record.exchange}")
        if record.symbol:
            parts.append(f"symbol={record.symbol}")
        if parts:
            message += f" | {', '.join(parts)}"

        return message

    def _format_json(self, record: LogRecord) -> str:
        data = {
            'timestamp': record.timestamp,
            'level': record.level.name,
            'type': record.log_type.name,
            'logger': record.logger_name,
            'message': record.message
        }
        if record.context:
            data['context'] = record.context
        if record.correlation_id:
            data['correlation_id'] = record.correlation_id
        if record.exchange:
            data['exchange'] = record.exchange
        if record.symbol:
            data['symbol'] = record.symbol
        if record.log_type == LogType.METRIC:
            data['metric'] = {'name': record.metric_name, 'value': record.metric_value}

        return json.dumps(data, separators=(',', ':'), default=str)
