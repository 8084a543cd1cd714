"""
Base Strategy Components

Candle/signal structs and the abstract strategy every implementation extends.
"""

from .structs import Candle, SignalType, StrategySignal, StrategyResult, ParamSpec, candles_to_frame
from .base_strategy import BaseStrategy

__all__ = [
    'Candle',
    'SignalType',
    'StrategySignal',
    'StrategyResult',
    'ParamSpec',
    'candles_to_frame',
    'BaseStrategy',
]
