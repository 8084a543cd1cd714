"""Strategy registry with a single active strategy."""

from typing import Any, Dict, List, Optional, Sequence

from infrastructure.exceptions.system import InvalidStrategyConfigError
from infrastructure.logging import HFTLoggerInterface, get_logger
from trading.strategies.base import BaseStrategy, Candle, StrategyResult
from trading.strategies.implementations import RangeFilterStrategy

RANGE_FILTER = 'range-filter'


class StrategyManager:
    """
    Keeps named strategies and tracks which one is active.

    'range-filter' is registered on construction. Activating a strategy
    deactivates the previous one.
    """

    def __init__(self, logger: Optional[HFTLoggerInterface] = None):
        self.logger = logger or get_logger('strategies.manager')
        self._strategies: Dict[str, BaseStrategy] = {}
        self._active: Optional[BaseStrategy] = None

        self.register_strategy(RANGE_FILTER, RangeFilterStrategy())

    def register_strategy(self, name: str, strategy: BaseStrategy) -> None:
        if name in self._strategies:
            self.logger.warning("Overriding existing strategy", strategy=name)
        self._strategies[name] = strategy

    def get_strategy_names(self) -> List[str]:
        return list(self._strategies.keys())

    def get_strategy(self, name: str) -> Optional[BaseStrategy]:
        return self._strategies.get(name)

    @property
    def active_strategy(self) -> Optional[BaseStrategy]:
        return self._active

    def activate_strategy(self, name: str, params: Optional[Dict[str, Any]] = None) -> bool:
        strategy = self.get_strategy(name)
        if strategy is None:
            self.logger.error("Strategy not found", strategy=name, available=self.get_strategy_names())
            return False

        if params:
            try:
                strategy.update_params(params)
            except InvalidStrategyConfigError as e:
                self.logger.error("Invalid strategy parameters",
                                  strategy=name, field=e.field_name, error_message=e.message)
                return False

        if self._active is not None and self._active is not strategy:
            self.logger.info("Deactivating strategy", strategy=self._active.name)
            self._active.set_active(False)

        self._active = strategy
        strategy.set_active(True)
        self.logger.info("Strategy activated", strategy=name, **strategy.get_params())
        return True

    def deactivate_strategy(self) -> None:
        if self._active is not None:
            self._active.set_active(False)
            self._active = None

    def update_params(self, name: str, params: Dict[str, Any]) -> None:
        """Raises InvalidStrategyConfigError for unknown strategies or bad values."""
        strategy = self.get_strategy(name)
        if strategy is None:
            raise InvalidStrategyConfigError(f"Unknown strategy: {name}", 'strategy')
        strategy.update_params(params)

    def calculate_signals(self, candles: Sequence[Candle]) -> Optional[StrategyResult]:
        """Run the active strategy. Returns None when nothing is active or the strategy fails."""
        if self._active is None:
            self.logger.debug("No active strategy for signal calculation")
            return None

        try:
            result = self._active.calculate(candles)
        except (ValueError, KeyError, ArithmeticError) as e:
            self.logger.error("Error calculating strategy signals",
                              strategy=self._active.name,
                              error_type=type(e).__name__,
                              error_message=str(e))
            return None

        latest = result.latest_signal
        self.logger.debug("Strategy signals calculated",
                          strategy=self._active.name,
                          candles=len(candles),
                          signals=len(result.signals),
                          latest_type=latest.type.value if latest else None,
                          latest_price=latest.price if latest else None)
        return result

    def reset_active_strategy(self) -> None:
        if self._active is not None:
            self._active.reset()

    def get_all_strategy_configs(self) -> List[Dict[str, Any]]:
        return [
            {
                'name': name,
                'display_name': strategy.name,
                'params': strategy.get_param_config(),
            }
            for name, strategy in self._strategies.items()
        ]
