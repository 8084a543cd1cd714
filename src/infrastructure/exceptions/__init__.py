from .exchange import (
    BaseExchangeError,
    ExchangeConnectionError,
    ConnectionTimeoutError,
    ReconnectExhaustedError,
    SubscriptionError,
    FrameDecodeError,
)
from .system import (
    BaseSystemError,
    InvalidStrategyConfigError,
    ConfigurationError,
)

__all__ = [
    'BaseExchangeError',
    'ExchangeConnectionError',
    'ConnectionTimeoutError',
    'ReconnectExhaustedError',
    'SubscriptionError',
    'FrameDecodeError',
    'BaseSystemError',
    'InvalidStrategyConfigError',
    'ConfigurationError',
]
