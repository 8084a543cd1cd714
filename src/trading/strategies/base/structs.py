"""Candle and signal types shared by strategies and the auto-trade engine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
from msgspec import Struct


class SignalType(str, Enum):
    BUY = "buy"
    SELL = "sell"


class Candle(Struct, frozen=True):
    """OHLCV candle; timestamp is the period open in epoch milliseconds."""
    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


class StrategySignal(Struct, frozen=True):
    timestamp: int
    type: SignalType
    price: float
    strength: float = 1.0

    @property
    def signal_id(self) -> str:
        return f"{self.timestamp}_{self.type.value}"


class ParamSpec(Struct, frozen=True):
    """UI description of one tunable strategy parameter."""
    name: str
    label: str
    type: str  # 'number' | 'boolean' | 'select'
    default: Any
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    options: Optional[List[Dict[str, Any]]] = None


@dataclass
class StrategyResult:
    signals: List[StrategySignal]
    timestamp: int
    indicators: pd.DataFrame = field(default_factory=pd.DataFrame)

    @property
    def latest_signal(self) -> Optional[StrategySignal]:
        return self.signals[-1] if self.signals else None


def candles_to_frame(candles: Sequence[Candle]) -> pd.DataFrame:
    """OHLCV DataFrame indexed by candle timestamp (ms)."""
    df = pd.DataFrame(
        {
            'open': [c.open for c in candles],
            'high': [c.high for c in candles],
            'low': [c.low for c in candles],
            'close': [c.close for c in candles],
            'volume': [c.volume for c in candles],
        },
        index=pd.Index([c.timestamp for c in candles], name='timestamp'),
        dtype=float,
    )
    return df
