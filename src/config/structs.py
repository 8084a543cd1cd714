from typing import Optional
from msgspec import Struct


class WebSocketConfig(Struct, frozen=True):
    """
    WebSocket session configuration.

    Attributes:
        url: WebSocket URL (injected from exchange config)
        connect_timeout: Seconds to wait for the socket to open
        close_timeout: Seconds to wait for a graceful close
        ping_interval: Keepalive ping interval in seconds
        ping_timeout: Keepalive ping timeout in seconds

        max_reconnect_attempts: Reconnect attempts before giving up
        reconnect_delay: Base delay before the first reconnect in seconds
        reconnect_backoff: Multiplier applied per further attempt
        max_reconnect_delay: Cap for the reconnect delay in seconds

        auth_timeout: Default wait for the server.sign response in seconds
        replay_subscriptions: Resend active subscriptions after reconnect

        max_message_size: Largest accepted WebSocket message in bytes
        max_decompressed_size: Largest accepted inflated frame in bytes
    """
    url: str = "wss://socket.coinex.com/v2/futures"
    connect_timeout: float = 30.0
    close_timeout: float = 5.0
    ping_interval: Optional[float] = 20.0
    ping_timeout: Optional[float] = 10.0

    max_reconnect_attempts: int = 10
    reconnect_delay: float = 5.0
    reconnect_backoff: float = 1.5
    max_reconnect_delay: float = 30.0

    auth_timeout: float = 15.0
    replay_subscriptions: bool = True

    max_message_size: int = 4 * 1024 * 1024
    max_decompressed_size: int = 16 * 1024 * 1024

    def validate(self) -> None:
        """Validate WebSocket configuration."""
        if not (self.url.startswith('ws://') or self.url.startswith('wss://')):
            raise ValueError(f"WebSocket URL must start with ws:// or wss://, got: {self.url}")
        if self.connect_timeout <= 0:
            raise ValueError("connect_timeout must be positive")
        if self.max_reconnect_attempts < 0:
            raise ValueError("max_reconnect_attempts cannot be negative")
        if self.reconnect_delay < 0:
            raise ValueError("reconnect_delay cannot be negative")
        if self.reconnect_backoff < 1.0:
            raise ValueError("reconnect_backoff must be >= 1.0")
        if self.max_reconnect_delay < self.reconnect_delay:
            raise ValueError("max_reconnect_delay must be >= reconnect_delay")
        if self.auth_timeout <= 0:
            raise ValueError("auth_timeout must be positive")
        if self.max_message_size <= 0:
            raise ValueError("max_message_size must be positive")
        if self.max_decompressed_size < self.max_message_size:
            raise ValueError("max_decompressed_size must be >= max_message_size")

    def reconnect_delay_for(self, attempt: int) -> float:
        """Backoff delay for a 1-based reconnect attempt, capped at max_reconnect_delay."""
        return min(
            self.reconnect_delay * (self.reconnect_backoff ** max(attempt - 1, 0)),
            self.max_reconnect_delay
        )


class ExchangeCredentials(Struct, frozen=True):
    """Exchange API credentials."""
    api_key: str = ""
    secret_key: str = ""

    @property
    def has_private_api(self) -> bool:
        """Check if both credentials are provided."""
        return bool(self.api_key) and bool(self.secret_key)

    def get_preview(self) -> str:
        """Get safe preview of credentials for logging."""
        if not self.api_key:
            return "Not configured"
        if len(self.api_key) > 8:
            return f"{self.api_key[:4]}...{self.api_key[-4:]}"
        return "***"

    def validate(self) -> None:
        """Validate credentials (allows empty for public-only mode)."""
        if not self.api_key and not self.secret_key:
            return
        if bool(self.api_key) != bool(self.secret_key):
            raise ValueError("Both api_key and secret_key must be provided together or both empty")


class AutoTradeSettings(Struct, frozen=True):
    """
    Auto-trade engine tuning.

    Attributes:
        max_candle_buffer: Candles kept for strategy evaluation
        status_interval: Seconds between statusUpdate events
        stale_signal_tolerance_ms: Signals older than start time by more than this are ignored
        max_signal_logs: Signal log entries kept, oldest dropped first
    """
    max_candle_buffer: int = 100
    status_interval: float = 5.0
    stale_signal_tolerance_ms: int = 5000
    max_signal_logs: int = 500

    def validate(self) -> None:
        if self.max_candle_buffer < 2:
            raise ValueError("max_candle_buffer must be at least 2")
        if self.status_interval <= 0:
            raise ValueError("status_interval must be positive")
        if self.stale_signal_tolerance_ms < 0:
            raise ValueError("stale_signal_tolerance_ms cannot be negative")
        if self.max_signal_logs < 1:
            raise ValueError("max_signal_logs must be at least 1")
