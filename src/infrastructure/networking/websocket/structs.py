from enum import Enum, IntEnum


class ConnectionState(Enum):
    """WebSocket connection states"""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"


class AuthState(Enum):
    """Authentication handshake states. Reset to UNAUTHENTICATED whenever the socket leaves CONNECTED."""
    UNAUTHENTICATED = "unauthenticated"
    PENDING = "pending"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


class EventName(str, Enum):
    """Events emitted by the session manager."""
    OPEN = "open"
    CLOSE = "close"
    ERROR = "error"
    AUTHENTICATED = "authenticated"
    AUTHENTICATION_FAILED = "authentication_failed"
    MESSAGE = "message"
    STATE_UPDATE = "stateUpdate"
    POSITION_UPDATE = "positionUpdate"
    POSITION_SNAPSHOT = "positionSnapshot"
    RECONNECTING = "reconnecting"


class TimerPurpose(Enum):
    """Keys of the session's timer registry."""
    RECONNECT = "reconnect"
    CONNECT_TIMEOUT = "connect_timeout"


class CloseCode(IntEnum):
    """WebSocket close codes the session cares about."""
    NORMAL = 1000
    GOING_AWAY = 1001
    ABNORMAL = 1006


class SubscriptionAction(IntEnum):
    """WebSocket subscription actions."""
    SUBSCRIBE = 1
    UNSUBSCRIBE = 2
