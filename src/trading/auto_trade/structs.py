from enum import Enum
from typing import Any, Dict, Optional

from msgspec import Struct

from exchanges.integrations.coinex.timeframes import is_valid_timeframe
from infrastructure.exceptions.system import InvalidStrategyConfigError
from trading.strategies.base import SignalType


class AutoTradeEvent(str, Enum):
    STARTED = "started"
    STOPPED = "stopped"
    SIGNAL = "signal"
    TRADE_EXECUTED = "tradeExecuted"
    TRADE_ERROR = "tradeError"
    STATUS_UPDATE = "statusUpdate"
    ERROR = "error"


class AmountUnit(str, Enum):
    USDT = "usdt"
    COIN = "coin"


class MarginMode(str, Enum):
    CROSS = "cross"
    ISOLATED = "isolated"


class AutoTradeConfig(Struct, frozen=True):
    """
    Auto-trade session configuration.

    Attributes:
        symbol: CoinEx market, e.g. 'XRPUSDT'
        timeframe: Candle timeframe in UI ('5m') or CoinEx ('5min') notation
        amount: Order size in amount_unit
        strategy: Name registered in StrategyManager
        strategy_params: Overrides merged into the strategy's parameters
        take_profit_percent / stop_loss_percent: Only sent when enabled and percentage based
    """
    symbol: str
    timeframe: str
    amount: float
    leverage: int = 1
    margin_mode: MarginMode = MarginMode.CROSS
    amount_unit: AmountUnit = AmountUnit.USDT

    take_profit_percent: float = 0.0
    stop_loss_percent: float = 0.0
    enable_take_profit: bool = False
    enable_stop_loss: bool = False
    use_percentage_for_tp: bool = True
    use_percentage_for_sl: bool = True
    enable_trailing_tp: bool = False
    enable_trailing_sl: bool = False
    trailing_distance: float = 0.0

    strategy: str = "range-filter"
    strategy_params: Dict[str, Any] = {}

    def validate(self) -> None:
        """Raises InvalidStrategyConfigError naming the first invalid field."""
        if not self.symbol:
            raise InvalidStrategyConfigError("symbol is required", "symbol")
        if not self.timeframe or not is_valid_timeframe(self.timeframe):
            raise InvalidStrategyConfigError(f"Unsupported timeframe: {self.timeframe!r}", "timeframe")
        if self.amount <= 0:
            raise InvalidStrategyConfigError("amount must be positive", "amount")
        if self.leverage <= 0:
            raise InvalidStrategyConfigError("leverage must be positive", "leverage")
        if self.take_profit_percent < 0:
            raise InvalidStrategyConfigError("take_profit_percent cannot be negative", "take_profit_percent")
        if self.stop_loss_percent < 0:
            raise InvalidStrategyConfigError("stop_loss_percent cannot be negative", "stop_loss_percent")
        if self.trailing_distance < 0:
            raise InvalidStrategyConfigError("trailing_distance cannot be negative", "trailing_distance")
        if not self.strategy:
            raise InvalidStrategyConfigError("strategy is required", "strategy")


class TradeRequest(Struct, frozen=True):
    """Market order handed to the trade executor."""
    symbol: str
    side: SignalType
    amount: float
    amount_unit: AmountUnit
    leverage: int
    margin_mode: MarginMode
    type: str = "market"
    enable_take_profit: bool = False
    enable_stop_loss: bool = False
    enable_trailing_tp: bool = False
    enable_trailing_sl: bool = False
    trailing_distance: float = 0.0
    take_profit_percent: Optional[float] = None
    stop_loss_percent: Optional[float] = None

    @classmethod
    def from_signal(cls, config: AutoTradeConfig, side: SignalType) -> 'TradeRequest':
        return cls(
            symbol=config.symbol,
            side=side,
            amount=config.amount,
            amount_unit=config.amount_unit,
            leverage=config.leverage,
            margin_mode=config.margin_mode,
            enable_take_profit=config.enable_take_profit,
            enable_stop_loss=config.enable_stop_loss,
            enable_trailing_tp=config.enable_trailing_tp,
            enable_trailing_sl=config.enable_trailing_sl,
            trailing_distance=config.trailing_distance,
            take_profit_percent=(config.take_profit_percent
                                 if config.enable_take_profit and config.use_percentage_for_tp else None),
            stop_loss_percent=(config.stop_loss_percent
                               if config.enable_stop_loss and config.use_percentage_for_sl else None),
        )


class TradeResult(Struct, frozen=True):
    success: bool
    order_id: Optional[str] = None
    error: Optional[str] = None


class SignalLog(Struct):
    """Accepted signal and the outcome of its trade; mutated once the trade completes."""
    id: str
    timestamp: int
    strategy: str
    signal_type: SignalType
    price: float
    executed: bool = False
    order_id: Optional[str] = None
    error: Optional[str] = None


class AutoTradeStatus(Struct, frozen=True):
    is_active: bool
    config: Optional[AutoTradeConfig]
    buffer_size: int
    last_signal_time: Optional[int]
