"""
Logging Configuration Structures

Structured configuration for the logging system using msgspec.Struct
for type safety.
"""

from typing import Optional, Dict, Any, List
from msgspec import Struct
import msgspec


class BackendConfig(Struct, frozen=True):
    """
    Base configuration for all logging backends.

    Attributes:
        enabled: Whether this backend is active
        min_level: Minimum log level to process (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    enabled: bool = True
    min_level: str = "INFO"

    def validate(self) -> None:
        """Validate backend configuration."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.min_level.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {self.min_level}")


class ConsoleBackendConfig(BackendConfig):
    """
    Console backend configuration.

    Attributes:
        color: Enable colored output
        include_context: Include context information
        max_message_length: Maximum message length before truncation
    """
    color: bool = True
    include_context: bool = True
    max_message_length: int = 1000


class FileBackendConfig(BackendConfig):
    """
    File backend configuration.

    Attributes:
        path: Log file path
        format: Output format (text or json)
        max_size_mb: Maximum file size in MB before rotation
        backup_count: Number of backup files to keep
        include_metrics: Also write METRIC records
        buffer_size: Records buffered before a flush
        flush_interval: Seconds before a partial buffer is flushed
    """
    path: str = "logs/coinex.log"
    format: str = "text"
    max_size_mb: int = 50
    backup_count: int = 5
    include_metrics: bool = False
    buffer_size: int = 100
    flush_interval: float = 1.0

    def validate(self) -> None:
        """Validate file backend configuration."""
        super().validate()
        if self.format not in {"text", "json"}:
            raise ValueError(f"Invalid format: {self.format}")
        if self.max_size_mb <= 0:
            raise ValueError("max_size_mb must be positive")
        if self.backup_count < 0:
            raise ValueError("backup_count cannot be negative")
        if self.buffer_size < 1:
            raise ValueError("buffer_size must be at least 1")
        if self.flush_interval <= 0:
            raise ValueError("flush_interval must be positive")


class RouterConfig(Struct, frozen=True):
    """
    Router configuration.

    Attributes:
        environment: Environment name (dev, prod, test)
        default_backends: Backends that receive text records
    """
    environment: Optional[str] = None
    default_backends: Optional[List[str]] = None

    def get_default_backends(self) -> List[str]:
        """Get default backends with fallback."""
        if self.default_backends is not None:
            return self.default_backends
        return ["console", "file"]


class LoggingConfig(Struct, frozen=True):
    """
    Complete logging configuration.

    Attributes:
        environment: Environment name (dev, prod, test)
        console: Console backend configuration
        file: File backend configuration
        router: Router configuration
        default_context: Default context for all log messages
    """
    environment: str = "dev"
    console: Optional[ConsoleBackendConfig] = None
    file: Optional[FileBackendConfig] = None
    router: Optional[RouterConfig] = None
    default_context: Optional[Dict[str, Any]] = None

    def validate(self) -> None:
        """Validate complete configuration."""
        if self.environment not in {"dev", "prod", "test", "staging"}:
            raise ValueError(f"Invalid environment: {self.environment}")
        if self.console:
            self.console.validate()
        if self.file:
            self.file.validate()

    def get_enabled_backends(self) -> List[str]:
        """Get list of enabled backend names."""
        enabled = []
        if self.console and self.console.enabled:
            enabled.append("console")
        if self.file and self.file.enabled:
            enabled.append("file")
        return enabled

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingConfig":
        """Create from a plain dict, e.g. the logging section of config.yaml."""
        return msgspec.convert(data, type=cls)

    @classmethod
    def default_development(cls) -> "LoggingConfig":
        """Get default development configuration."""
        return cls(
            environment="dev",
            console=ConsoleBackendConfig(
                enabled=True,
                min_level="DEBUG",
                color=True,
                include_context=True
            ),
            file=FileBackendConfig(
                enabled=False,
                min_level="INFO",
                path="logs/dev.log",
                format="text"
            ),
            router=RouterConfig(
                default_backends=["console", "file"]
            )
        )

    @classmethod
    def default_production(cls) -> "LoggingConfig":
        """Get default production configuration."""
        return cls(
            environment="prod",
            console=ConsoleBackendConfig(
                enabled=True,
                min_level="WARNING",
                color=False
            ),
            file=FileBackendConfig(
                enabled=True,
                min_level="INFO",
                path="logs/production.log",
                format="json",
                max_size_mb=200,
                backup_count=10,
                include_metrics=True
            ),
            router=RouterConfig(
                default_backends=["file", "console"]
            )
        )
