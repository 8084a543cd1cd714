from typing import Optional


class BaseSystemError(Exception):
    """Default exception."""
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidStrategyConfigError(BaseSystemError):
    """Auto-trade or strategy configuration failed validation."""

    def __init__(self, message: str, field_name: Optional[str] = None):
        self.field_name = field_name
        super().__init__(message)


class ConfigurationError(Exception):
    """Configuration-specific exception for setup errors."""

    def __init__(self, message: str, setting_name: Optional[str] = None):
        self.setting_name = setting_name
        super().__init__(message)
