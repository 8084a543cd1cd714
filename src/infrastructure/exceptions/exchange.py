class BaseExchangeError(Exception):
    """Base exception for all CoinEx client errors."""
    def __init__(self, code: int, message: str, api_code: int | None = None) -> None:
        self.api_code = api_code
        self.message = message
        self.status_code = code
        super().__init__(f"{code}: {message}")


# Transport Errors (Retryable)
class ExchangeConnectionError(BaseExchangeError):
    """WebSocket transport errors that may be temporary."""
    pass


class ConnectionTimeoutError(ExchangeConnectionError):
    """Socket did not open before the connect timeout fired."""
    pass


class ReconnectExhaustedError(ExchangeConnectionError):
    """Terminal error raised once the reconnect policy gives up."""
    def __init__(self, attempts: int, close_code: int | None = None) -> None:
        super().__init__(503, f"Reconnect attempts exhausted after {attempts} tries")
        self.attempts = attempts
        self.close_code = close_code


# Subscription Errors (Non-fatal)
class SubscriptionError(BaseExchangeError):
    """Server rejected a subscribe/unsubscribe request."""
    def __init__(self, topic: str, code: int, message: str, request_id: int | None = None) -> None:
        super().__init__(400, message, api_code=code)
        self.topic = topic
        self.request_id = request_id

    def __str__(self):
        return f"SubscriptionError: {self.topic} (id={self.request_id}) - {self.api_code} - {self.message}"


class FrameDecodeError(BaseExchangeError):
    """Inbound frame could not be decompressed or parsed."""
    def __init__(self, message: str) -> None:
        super().__init__(422, message)
