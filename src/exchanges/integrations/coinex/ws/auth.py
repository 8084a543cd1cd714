"""
CoinEx WebSocket authentication (server.sign).

CoinEx signs the millisecond timestamp alone:
    signed_str = hex(HMAC-SHA256(secret_key, str(timestamp_ms)))
"""

import hashlib
import hmac
import time
from typing import Any, Dict, Optional

AUTH_REQUEST_ID = 999
AUTH_METHOD = "server.sign"


def generate_signature(secret_key: str, timestamp: str) -> str:
    """Lowercase hex HMAC-SHA256 of the timestamp string keyed by the secret."""
    return hmac.new(
        secret_key.encode('utf-8'),
        timestamp.encode('utf-8'),
        hashlib.sha256
    ).hexdigest()


def build_auth_message(api_key: str, secret_key: str, timestamp_ms: Optional[int] = None) -> Dict[str, Any]:
    timestamp_ms = int(time.time() * 1000) if timestamp_ms is None else int(timestamp_ms)
    return {
        "method": AUTH_METHOD,
        "params": {
            "access_id": api_key,
            "signed_str": generate_signature(secret_key, str(timestamp_ms)),
            "timestamp": timestamp_ms,
        },
        "id": AUTH_REQUEST_ID,
    }
