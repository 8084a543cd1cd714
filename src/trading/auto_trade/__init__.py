from .structs import (
    AutoTradeEvent,
    AutoTradeConfig,
    AutoTradeStatus,
    AmountUnit,
    MarginMode,
    TradeRequest,
    TradeResult,
    SignalLog,
)
from .engine import AutoTradeEngine, TradeExecutor

__all__ = [
    'AutoTradeEvent',
    'AutoTradeConfig',
    'AutoTradeStatus',
    'AmountUnit',
    'MarginMode',
    'TradeRequest',
    'TradeResult',
    'SignalLog',
    'AutoTradeEngine',
    'TradeExecutor',
]
