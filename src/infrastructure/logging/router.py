"""
Message Routing

Simple routing: metrics and audit go to the file backend, text goes to
the configured default backends. Each backend still applies its own
level filter.
"""

import os
from typing import Dict, List

from .interfaces import LogBackend, LogRecord, LogType, LogRouter
from .structs import RouterConfig


class SimpleRouter(LogRouter):
    """Router with predefined routing logic."""

    def __init__(self, backends: Dict[str, LogBackend], config: RouterConfig):
        if not isinstance(config, RouterConfig):
            raise TypeError(f"Expected RouterConfig, got {type(config)}")

        self.backends = backends
        self.config = config
        self.environment = config.environment or os.getenv('ENVIRONMENT', 'dev')
        self.default_backends = config.get_default_backends()

    def get_backends(self, record: LogRecord) -> List[LogBackend]:
        if record.log_type == LogType.METRIC:
            backend_names = ['file']
        elif record.log_type == LogType.AUDIT:
            backend_names = ['file', 'console']
        else:
            backend_names = self.default_backends

        return [
            backend
            for name in backend_names
            if (backend := self.backends.get(name)) and backend.should_handle(record)
        ]


def create_router(backends: Dict[str, LogBackend], config: RouterConfig) -> LogRouter:
    """Create a router instance (SimpleRouter is the only router type)."""
    return SimpleRouter(backends, config)
