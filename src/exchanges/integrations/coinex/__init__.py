"""
CoinEx Futures Integration

WebSocket session manager for wss://socket.coinex.com/v2/futures plus the
credential providers and timeframe mapping it depends on.

Architecture:
- credentials: key/secret providers, placeholder detection
- timeframes: UI timeframe <-> CoinEx period mapping
- ws.auth: server.sign request construction
- ws.subscriptions: topics, fixed request ids, active subscription registry
- ws.coinex_ws_session: CoinexWebSocketSession
"""

from .credentials import (
    CredentialProvider,
    ApiCredentialStore,
    EnvCredentialProvider,
    is_usable,
)
from .timeframes import to_coinex_period, to_ui_timeframe, timeframe_seconds, align_timestamp
from .ws import CoinexWebSocketSession, Topic

__all__ = [
    'CredentialProvider',
    'ApiCredentialStore',
    'EnvCredentialProvider',
    'is_usable',
    'to_coinex_period',
    'to_ui_timeframe',
    'timeframe_seconds',
    'align_timestamp',
    'CoinexWebSocketSession',
    'Topic',
]
