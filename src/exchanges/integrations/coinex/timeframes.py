"""CoinEx kline periods and their UI aliases."""

from typing import Dict

DEFAULT_PERIOD = '5min'
DEFAULT_UI_TIMEFRAME = '5m'

UI_TO_COINEX: Dict[str, str] = {
    '1m': '1min',
    '3m': '3min',
    '5m': '5min',
    '15m': '15min',
    '30m': '30min',
    '1h': '1hour',
    '2h': '2hour',
    '4h': '4hour',
    '6h': '6hour',
    '12h': '12hour',
    '1d': '1day',
    '3d': '3day',
    '1w': '1week',
}

COINEX_TO_UI: Dict[str, str] = {period: ui for ui, period in UI_TO_COINEX.items()}

PERIOD_SECONDS: Dict[str, int] = {
    '1min': 60,
    '3min': 180,
    '5min': 300,
    '15min': 900,
    '30min': 1800,
    '1hour': 3600,
    '2hour': 7200,
    '4hour': 14400,
    '6hour': 21600,
    '12hour': 43200,
    '1day': 86400,
    '3day': 259200,
    '1week': 604800,
}


def to_coinex_period(timeframe: str) -> str:
    """Map '1m' style (or an already valid CoinEx period) to the CoinEx period, default 5min."""
    if timeframe in PERIOD_SECONDS:
        return timeframe
    return UI_TO_COINEX.get(timeframe, DEFAULT_PERIOD)


def to_ui_timeframe(period: str) -> str:
    if period in UI_TO_COINEX:
        return period
    return COINEX_TO_UI.get(period, DEFAULT_UI_TIMEFRAME)


def timeframe_seconds(timeframe: str) -> int:
    """Seconds per candle for either notation."""
    return PERIOD_SECONDS[to_coinex_period(timeframe)]


def align_timestamp(timestamp_ms: int, timeframe: str) -> int:
    """Floor a millisecond timestamp to the start of its candle."""
    period_ms = timeframe_seconds(timeframe) * 1000
    return (int(timestamp_ms) // period_ms) * period_ms


def is_valid_timeframe(timeframe: str) -> bool:
    return timeframe in UI_TO_COINEX or timeframe in PERIOD_SECONDS
