"""
Auto-Trade Engine

Feeds live candles to the active strategy and turns fresh signals into
market orders.

Flow per candle:
1. Buffer the candle (bounded by AutoTradeSettings.max_candle_buffer)
2. When a new candle period starts and at least 2 candles are buffered,
   run the strategy over the buffer
3. Take the latest signal; skip it if its id ("{timestamp}_{type}") was
   already logged or it predates start() by more than the stale tolerance
4. Log it, emit 'signal', submit a TradeRequest through the executor and
   emit 'tradeExecuted' or 'tradeError'

Events: started, stopped, signal, tradeExecuted, tradeError, statusUpdate, error.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Callable, Deque, Iterable, List, Optional, Set, Union

from config.structs import AutoTradeSettings
from exchanges.integrations.coinex.timeframes import align_timestamp
from infrastructure.exceptions.system import InvalidStrategyConfigError
from infrastructure.logging import HFTLoggerInterface, LoggingTimer, get_logger
from infrastructure.networking.websocket import EventEmitter
from trading.strategies.base import Candle
from trading.strategies.strategy_manager import StrategyManager
from utils.task_utils import cancel_tasks_with_timeout
from .structs import AutoTradeConfig, AutoTradeEvent, AutoTradeStatus, SignalLog, TradeRequest, TradeResult


class TradeExecutor(ABC):
    """Places orders for the engine; implemented by the trading layer."""

    @abstractmethod
    async def execute_trade(self, request: TradeRequest) -> TradeResult:
        pass


class AutoTradeEngine:

    def __init__(self, executor: TradeExecutor,
                 strategy_manager: Optional[StrategyManager] = None,
                 settings: Optional[AutoTradeSettings] = None,
                 logger: Optional[HFTLoggerInterface] = None):
        self.settings = settings or AutoTradeSettings()
        self.settings.validate()

        self.executor = executor
        self.strategy_manager = strategy_manager or StrategyManager()
        self.logger = logger or get_logger('trading.auto_trade')
        self._events: EventEmitter[AutoTradeEvent] = EventEmitter('auto_trade', self.logger)

        self.config: Optional[AutoTradeConfig] = None
        self._active = False
        self._candles: Deque[Candle] = deque(maxlen=self.settings.max_candle_buffer)
        self._signal_logs: Deque[SignalLog] = deque(maxlen=self.settings.max_signal_logs)
        self._signal_ids: Set[str] = set()
        self._last_candle_time = 0
        self._start_time_ms = 0
        self._status_task: Optional[asyncio.Task] = None

    @property
    def is_active(self) -> bool:
        return self._active

    def on(self, event: Union[AutoTradeEvent, str], handler: Callable[..., Any]) -> Callable[..., Any]:
        return self._events.on(AutoTradeEvent(event), handler)

    def off(self, event: Union[AutoTradeEvent, str], handler: Callable[..., Any]) -> bool:
        return self._events.off(AutoTradeEvent(event), handler)

    async def start(self, config: AutoTradeConfig) -> bool:
        if self._active:
            await self._events.emit(AutoTradeEvent.ERROR, InvalidStrategyConfigError("Auto trade is already active"))
            return False

        try:
            config.validate()
            if self.strategy_manager.get_strategy(config.strategy) is None:
                raise InvalidStrategyConfigError(f"Unknown strategy: {config.strategy}", "strategy")
        except InvalidStrategyConfigError as e:
            self.logger.error("Invalid auto trade configuration", field=e.field_name, error_message=e.message)
            await self._events.emit(AutoTradeEvent.ERROR, e)
            return False

        if not self.strategy_manager.activate_strategy(config.strategy, config.strategy_params or None):
            error = InvalidStrategyConfigError(f"Failed to activate strategy: {config.strategy}", "strategy_params")
            await self._events.emit(AutoTradeEvent.ERROR, error)
            return False

        self.config = config
        self._active = True
        self._candles.clear()
        self.clear_signal_logs()
        self._last_candle_time = 0
        self._start_time_ms = int(time.time() * 1000)
        self._status_task = asyncio.create_task(self._status_loop())

        self.logger.info("Auto trade started",
                         symbol=config.symbol,
                         timeframe=config.timeframe,
                         strategy=config.strategy,
                         amount=config.amount,
                         leverage=config.leverage)
        await self._events.emit(AutoTradeEvent.STARTED, config)
        return True

    async def stop(self) -> None:
        if not self._active:
            return

        self._active = False
        self.config = None
        task, self._status_task = self._status_task, None
        if task is not asyncio.current_task():
            await cancel_tasks_with_timeout([task], logger=self.logger)
        self.strategy_manager.deactivate_strategy()

        self.logger.info("Auto trade stopped", signals=len(self._signal_logs))
        await self._events.emit(AutoTradeEvent.STOPPED)

    async def update_candle(self, candle: Candle) -> None:
        """Buffer a live candle and run the strategy when a new candle period begins."""
        if not self._active or self.config is None:
            self.logger.debug("Candle update skipped: auto trade inactive")
            return

        self._candles.append(candle)

        candle_time = align_timestamp(candle.timestamp, self.config.timeframe)
        if candle_time != self._last_candle_time and len(self._candles) >= 2:
            self._last_candle_time = candle_time
            await self._execute_strategy()

    def update_candle_batch(self, candles: Iterable[Candle]) -> None:
        """Seed history without evaluating the strategy."""
        if not self._active or self.config is None:
            self.logger.debug("Batch candle update skipped: auto trade inactive")
            return

        self._candles.extend(candles)
        if self._candles:
            self._last_candle_time = align_timestamp(self._candles[-1].timestamp, self.config.timeframe)
        self.logger.debug("Candle buffer seeded", buffer_size=len(self._candles))

    def get_signal_logs(self) -> List[SignalLog]:
        return list(self._signal_logs)

    def clear_signal_logs(self) -> None:
        self._signal_logs.clear()
        self._signal_ids.clear()

    def get_status(self) -> AutoTradeStatus:
        last = self._signal_logs[-1] if self._signal_logs else None
        return AutoTradeStatus(
            is_active=self._active,
            config=self.config,
            buffer_size=len(self._candles),
            last_signal_time=last.timestamp if last else None,
        )

    async def _status_loop(self) -> None:
        while self._active:
            await asyncio.sleep(self.settings.status_interval)
            if self._active:
                await self._events.emit(AutoTradeEvent.STATUS_UPDATE, self.get_status())

    async def _execute_strategy(self) -> None:
        config = self.config
        with LoggingTimer(self.logger, "strategy_calculate", strategy=config.strategy):
            result = self.strategy_manager.calculate_signals(list(self._candles))
        if result is None or not result.signals:
            self.logger.debug("No signals generated", symbol=config.symbol, buffer_size=len(self._candles))
            return

        signal = result.latest_signal
        signal_id = signal.signal_id
        if signal_id in self._signal_ids:
            self.logger.debug("Signal already processed", signal_id=signal_id)
            return

        age_ms = signal.timestamp - self._start_time_ms
        if age_ms < -self.settings.stale_signal_tolerance_ms:
            self.logger.info("Ignoring signal from before start", signal_id=signal_id, age_ms=age_ms)
            return

        signal_log = SignalLog(
            id=signal_id,
            timestamp=signal.timestamp,
            strategy=config.strategy,
            signal_type=signal.type,
            price=signal.price,
        )
        self._remember_signal(signal_log)
        self.logger.info("Signal accepted",
                         signal_id=signal_id,
                         side=signal.type.value,
                         price=signal.price,
                         symbol=config.symbol)
        await self._events.emit(AutoTradeEvent.SIGNAL, signal_log)

        await self._execute_trade(signal_log, TradeRequest.from_signal(config, signal.type))

    def _remember_signal(self, signal_log: SignalLog) -> None:
        if len(self._signal_logs) == self._signal_logs.maxlen:
            self._signal_ids.discard(self._signal_logs[0].id)
        self._signal_logs.append(signal_log)
        self._signal_ids.add(signal_log.id)

    async def _execute_trade(self, signal_log: SignalLog, request: TradeRequest) -> None:
        try:
            result = await self.executor.execute_trade(request)
        except Exception as e:
            signal_log.error = str(e) or type(e).__name__
            self.logger.error("Trade execution raised",
                              signal_id=signal_log.id, error_type=type(e).__name__, error_message=str(e))
            await self._events.emit(AutoTradeEvent.TRADE_ERROR, {"signal_log": signal_log, "error": e})
            return

        if result.success:
            signal_log.executed = True
            signal_log.order_id = result.order_id
            self.logger.audit("auto_trade_executed",
                              signal_id=signal_log.id,
                              side=request.side.value,
                              symbol=request.symbol,
                              order_id=result.order_id)
            await self._events.emit(AutoTradeEvent.TRADE_EXECUTED, {"signal_log": signal_log, "result": result})
        else:
            signal_log.error = result.error
            self.logger.warning("Trade execution failed", signal_id=signal_log.id, error_message=result.error)
            await self._events.emit(AutoTradeEvent.TRADE_ERROR, {"signal_log": signal_log, "error": result.error})
