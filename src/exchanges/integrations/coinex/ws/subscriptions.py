"""
CoinEx futures WebSocket topics and subscription bookkeeping.

Each topic uses a fixed request id for subscribe and that id + 100 for
unsubscribe, so acknowledgements are correlated per topic rather than per
call. Concurrent requests for the same topic cannot be told apart, which
is fine because subscription state is a per-symbol boolean.
"""

from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from msgspec import Struct

from infrastructure.networking.websocket.structs import SubscriptionAction


class Topic(str, Enum):
    """Topic kinds; the value is the method prefix used on the wire."""
    DEPTH = "depth"
    KLINE = "kline"
    TRADES = "deals"
    MARKET_OVERVIEW = "bbo"
    POSITIONS = "position"
    STATE = "state"


UNSUBSCRIBE_ID_OFFSET = 100

SUBSCRIBE_IDS: Dict[Topic, int] = {
    Topic.DEPTH: 1,
    Topic.KLINE: 2,
    Topic.TRADES: 3,
    Topic.MARKET_OVERVIEW: 4,
    Topic.POSITIONS: 5,
    Topic.STATE: 7,
}

AUTH_REQUIRED_TOPICS = frozenset({Topic.POSITIONS})

# market_list [] means every market
ALL_MARKETS: Optional[str] = None


def request_id(topic: Topic, action: SubscriptionAction) -> int:
    base = SUBSCRIBE_IDS[topic]
    return base if action == SubscriptionAction.SUBSCRIBE else base + UNSUBSCRIBE_ID_OFFSET


_REQUEST_IDS: Dict[int, Tuple[Topic, SubscriptionAction]] = {
    request_id(topic, action): (topic, action)
    for topic in SUBSCRIBE_IDS
    for action in SubscriptionAction
}


def lookup_request_id(req_id: Any) -> Optional[Tuple[Topic, SubscriptionAction]]:
    """Topic and direction for a fixed request id, None for unknown ids."""
    if isinstance(req_id, bool) or not isinstance(req_id, int):
        return None
    return _REQUEST_IDS.get(req_id)


def requires_auth(topic: Topic) -> bool:
    return topic in AUTH_REQUIRED_TOPICS


def build_subscription_message(topic: Topic, action: SubscriptionAction,
                               symbol: Optional[str] = ALL_MARKETS,
                               extra_params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    verb = "subscribe" if action == SubscriptionAction.SUBSCRIBE else "unsubscribe"
    params: Dict[str, Any] = {"market_list": [symbol] if symbol else []}
    if extra_params:
        params.update(extra_params)
    return {
        "method": f"{topic.value}.{verb}",
        "params": params,
        "id": request_id(topic, action),
    }


class Subscription(Struct, frozen=True):
    topic: Topic
    symbol: Optional[str] = ALL_MARKETS
    extra_params: Optional[Dict[str, Any]] = None

    @property
    def key(self) -> Tuple[Topic, Optional[str]]:
        return self.topic, self.symbol

    def to_message(self, action: SubscriptionAction = SubscriptionAction.SUBSCRIBE) -> Dict[str, Any]:
        return build_subscription_message(self.topic, action, self.symbol, self.extra_params)


class SubscriptionRegistry:
    """
    Active (topic, symbol) interests owned by one session.

    Used only to replay subscriptions after a reconnect. Re-adding an
    existing key replaces its extra params and keeps insertion order.
    """

    def __init__(self):
        self._active: Dict[Tuple[Topic, Optional[str]], Subscription] = {}

    def add(self, subscription: Subscription) -> bool:
        """Track subscription. Returns False when the key was already active."""
        is_new = subscription.key not in self._active
        self._active[subscription.key] = subscription
        return is_new

    def remove(self, topic: Topic, symbol: Optional[str] = ALL_MARKETS) -> bool:
        return self._active.pop((topic, symbol), None) is not None

    def clear(self) -> None:
        self._active.clear()

    def contains(self, topic: Topic, symbol: Optional[str] = ALL_MARKETS) -> bool:
        return (topic, symbol) in self._active

    def requires_auth(self) -> bool:
        return any(requires_auth(sub.topic) for sub in self._active.values())

    def snapshot(self) -> List[Subscription]:
        return list(self._active.values())

    def __len__(self) -> int:
        return len(self._active)

    def __iter__(self) -> Iterator[Subscription]:
        return iter(self.snapshot())
