"""
Range Filter Strategy

Trend filter built on a smoothed average range:

    ac      = cond_ema(|close - close[-1]|, rng_per)
    range   = cond_ema(ac * rng_qty, smooth_per)      (when smooth_range)
    filt    = close - range if that is above filt[-1],
              close + range if that is below filt[-1], else filt[-1]
    fdir    = +1 / -1 while filt rises / falls, unchanged on flat

Long condition: close > filt and fdir == +1; short condition mirrors it.
A buy fires on a long condition only when the previous state was short,
and vice versa, so emitted signals alternate.
"""

import time
from typing import List, Sequence

import numpy as np
import pandas as pd

from trading.strategies.base import (
    BaseStrategy, Candle, ParamSpec, SignalType, StrategyResult, StrategySignal, candles_to_frame
)


def cond_ema(values: np.ndarray, period: int) -> np.ndarray:
    """
    EMA with alpha = 2 / (period + 1) that skips NaN inputs.

    Output is NaN where the input is NaN; the first valid value after a
    NaN gap restarts the average from that value.
    """
    if period <= 0:
        raise ValueError("period must be > 0")

    out = np.full(len(values), np.nan)
    valid = np.flatnonzero(~np.isnan(values))
    if valid.size == 0:
        return out

    alpha = 2.0 / (period + 1)
    first = valid[0]
    out[first] = values[first]
    for i in range(first + 1, len(values)):
        value = values[i]
        if np.isnan(value):
            continue
        prev = out[i - 1]
        out[i] = value if np.isnan(prev) else (value - prev) * alpha + prev
    return out


def range_filter(close: np.ndarray, rng: np.ndarray) -> np.ndarray:
    filt = np.full(len(close), np.nan)
    prev = close[0] if len(close) else np.nan
    for i in range(len(close)):
        current = prev
        r = rng[i]
        if not np.isnan(r):
            if close[i] - r > prev:
                current = close[i] - r
            if close[i] + r < prev:
                current = close[i] + r
        filt[i] = current
        prev = current
    return filt


def filter_direction(filt: np.ndarray) -> np.ndarray:
    """+1 after a rise, -1 after a fall, previous value on flat steps, 0 before any move."""
    steps = pd.Series(np.sign(np.diff(filt, prepend=np.nan)))
    return steps.replace(0.0, np.nan).ffill().fillna(0.0).to_numpy()


class RangeFilterStrategy(BaseStrategy):

    def __init__(self, params=None):
        super().__init__('Range Filter', params)

    def get_param_config(self) -> List[ParamSpec]:
        return [
            ParamSpec(name='rng_qty', label='Range Quantity', type='number',
                      min=0.1, max=10, step=0.001, default=2.618),
            ParamSpec(name='rng_per', label='Range Period', type='number',
                      min=1, max=100, step=1, default=14),
            ParamSpec(name='smooth_range', label='Smooth Range', type='boolean', default=True),
            ParamSpec(name='smooth_per', label='Smooth Period', type='number',
                      min=1, max=100, step=1, default=27),
        ]

    def calculate(self, candles: Sequence[Candle]) -> StrategyResult:
        now_ms = int(time.time() * 1000)
        if len(candles) < 2:
            return StrategyResult(signals=[], timestamp=now_ms)

        df = candles_to_frame(candles)
        close = df['close'].to_numpy()

        ac = cond_ema(np.abs(np.diff(close, prepend=np.nan)), int(self.params['rng_per']))
        raw_range = ac * float(self.params['rng_qty'])
        rng = cond_ema(raw_range, int(self.params['smooth_per'])) if self.params['smooth_range'] else raw_range

        filt = range_filter(close, rng)
        fdir = filter_direction(filt)

        long_cond = (close > filt) & (fdir == 1.0)
        short_cond = (close < filt) & (fdir == -1.0)

        buy = np.zeros(len(close), dtype=bool)
        sell = np.zeros(len(close), dtype=bool)
        cond_ini = 0
        for i in range(len(close)):
            if long_cond[i] and cond_ini == -1:
                buy[i] = True
            if short_cond[i] and cond_ini == 1:
                sell[i] = True
            if long_cond[i]:
                cond_ini = 1
            elif short_cond[i]:
                cond_ini = -1

        indicators = df.assign(
            range=rng,
            filt=filt,
            hi_band=filt + rng,
            lo_band=filt - rng,
            fdir=fdir,
            buy=buy,
            sell=sell,
        )

        signals: List[StrategySignal] = []
        for i, candle in enumerate(candles):
            if buy[i]:
                signals.append(StrategySignal(timestamp=candle.timestamp, type=SignalType.BUY, price=candle.close))
            if sell[i]:
                signals.append(StrategySignal(timestamp=candle.timestamp, type=SignalType.SELL, price=candle.close))

        return StrategyResult(signals=signals, timestamp=now_ms, indicators=indicators)
