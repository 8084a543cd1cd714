"""
Trading Strategies Package

Candle-driven signal strategies and the manager that selects the active one.
"""

from trading.strategies.base import (
    BaseStrategy,
    Candle,
    ParamSpec,
    SignalType,
    StrategyResult,
    StrategySignal,
)
from trading.strategies.implementations import RangeFilterStrategy
from trading.strategies.strategy_manager import StrategyManager, RANGE_FILTER

__all__ = [
    'BaseStrategy',
    'Candle',
    'ParamSpec',
    'SignalType',
    'StrategyResult',
    'StrategySignal',
    'RangeFilterStrategy',
    'StrategyManager',
    'RANGE_FILTER',
]
