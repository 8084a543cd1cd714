from .auth import AUTH_REQUEST_ID, AUTH_METHOD, build_auth_message, generate_signature
from .subscriptions import (
    Topic,
    Subscription,
    SubscriptionRegistry,
    ALL_MARKETS,
    build_subscription_message,
    lookup_request_id,
    request_id,
    requires_auth,
)
from .coinex_ws_session import CoinexWebSocketSession

__all__ = [
    'AUTH_REQUEST_ID',
    'AUTH_METHOD',
    'build_auth_message',
    'generate_signature',
    'Topic',
    'Subscription',
    'SubscriptionRegistry',
    'ALL_MARKETS',
    'build_subscription_message',
    'lookup_request_id',
    'request_id',
    'requires_auth',
    'CoinexWebSocketSession',
]
