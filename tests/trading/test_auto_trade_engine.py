import time
from unittest.mock import AsyncMock, MagicMock

import pytest

from config.structs import AutoTradeSettings
from exchanges.integrations.coinex.timeframes import align_timestamp
from infrastructure.exceptions.system import InvalidStrategyConfigError
from trading.auto_trade import (
    AutoTradeConfig, AutoTradeEngine, AutoTradeEvent, SignalLog, TradeRequest, TradeResult
)
from trading.strategies import Candle, SignalType
from trading.strategies.base import StrategyResult, StrategySignal

MINUTE_MS = 60_000
BUY_INDEX = 65


def zigzag_candles(last_buy_ts: int):
    """Up, down, up series whose only buy signal lands on index BUY_INDEX at last_buy_ts."""
    closes = ([100.0 + i for i in range(30)]
              + [129.0 - i for i in range(1, 31)]
              + [99.0 + i for i in range(1, 31)])
    start = last_buy_ts - BUY_INDEX * MINUTE_MS
    return [
        Candle(timestamp=start + i * MINUTE_MS, open=c, high=c + 0.5, low=c - 0.5, close=c, volume=1.0)
        for i, c in enumerate(closes)
    ]


def fresh_candles():
    return zigzag_candles(align_timestamp(int(time.time() * 1000), '1m') + MINUTE_MS)


def stale_candles():
    return zigzag_candles(align_timestamp(int(time.time() * 1000), '1m') - 30 * MINUTE_MS)


def record(engine, event):
    events = []
    engine.on(event, lambda *args: events.append(args[0] if args else None))
    return events


@pytest.fixture
def executor():
    mock = AsyncMock()
    mock.execute_trade.return_value = TradeResult(success=True, order_id="order-1")
    return mock


@pytest.fixture
async def engine(executor):
    engine = AutoTradeEngine(executor, settings=AutoTradeSettings(status_interval=0.01))
    yield engine
    await engine.stop()


@pytest.fixture
def trade_config():
    return AutoTradeConfig(symbol="XRPUSDT", timeframe="1m", amount=10.0, leverage=3)


async def feed_until_buy(engine, candles):
    engine.update_candle_batch(candles[:BUY_INDEX])
    await engine.update_candle(candles[BUY_INDEX])


class TestAutoTradeLifecycle:

    @pytest.mark.asyncio
    async def test_start_and_stop(self, engine, trade_config):
        started = record(engine, AutoTradeEvent.STARTED)
        stopped = record(engine, AutoTradeEvent.STOPPED)

        assert await engine.start(trade_config)
        assert engine.is_active
        assert started == [trade_config]
        assert engine.strategy_manager.active_strategy is not None

        await engine.stop()
        await engine.stop()

        assert not engine.is_active
        assert stopped == [None]
        assert engine.strategy_manager.active_strategy is None
        assert engine.get_status().config is None

    @pytest.mark.asyncio
    async def test_invalid_config_emits_error(self, engine):
        errors = record(engine, AutoTradeEvent.ERROR)

        assert not await engine.start(AutoTradeConfig(symbol="XRPUSDT", timeframe="7m", amount=10.0))
        assert not engine.is_active
        assert isinstance(errors[0], InvalidStrategyConfigError)
        assert errors[0].field_name == "timeframe"

    @pytest.mark.asyncio
    async def test_unknown_strategy_rejected(self, engine, trade_config):
        errors = record(engine, AutoTradeEvent.ERROR)
        config = AutoTradeConfig(symbol="XRPUSDT", timeframe="1m", amount=1.0, strategy="missing")

        assert not await engine.start(config)
        assert errors[0].field_name == "strategy"

    @pytest.mark.asyncio
    async def test_invalid_strategy_params_rejected(self, engine):
        config = AutoTradeConfig(symbol="XRPUSDT", timeframe="1m", amount=1.0,
                                 strategy_params={'rng_per': 500})
        assert not await engine.start(config)
        assert engine.strategy_manager.active_strategy is None

    @pytest.mark.asyncio
    async def test_second_start_rejected(self, engine, trade_config):
        assert await engine.start(trade_config)
        assert not await engine.start(trade_config)
        assert engine.config is trade_config

    @pytest.mark.asyncio
    async def test_status_updates(self, engine, trade_config, until):
        statuses = record(engine, AutoTradeEvent.STATUS_UPDATE)
        await engine.start(trade_config)

        await until(lambda: len(statuses) >= 2)
        assert statuses[0].is_active
        assert statuses[0].config is trade_config
        assert statuses[0].buffer_size == 0


class TestCandleProcessing:

    @pytest.mark.asyncio
    async def test_candles_ignored_while_inactive(self, engine, executor):
        candles = fresh_candles()
        engine.update_candle_batch(candles[:10])
        await engine.update_candle(candles[10])

        assert engine.get_status().buffer_size == 0
        executor.execute_trade.assert_not_called()

    @pytest.mark.asyncio
    async def test_fresh_signal_executes_trade(self, engine, executor, trade_config):
        signals = record(engine, AutoTradeEvent.SIGNAL)
        executed = record(engine, AutoTradeEvent.TRADE_EXECUTED)
        candles = fresh_candles()
        await engine.start(trade_config)

        await feed_until_buy(engine, candles)

        executor.execute_trade.assert_awaited_once()
        request = executor.execute_trade.call_args.args[0]
        assert isinstance(request, TradeRequest)
        assert request.side is SignalType.BUY
        assert request.symbol == "XRPUSDT"
        assert request.amount == 10.0
        assert request.leverage == 3
        assert request.type == "market"
        assert request.take_profit_percent is None

        assert len(signals) == 1
        log = executed[0]["signal_log"]
        assert isinstance(log, SignalLog)
        assert log.id == f"{candles[BUY_INDEX].timestamp}_buy"
        assert log.executed and log.order_id == "order-1"
        assert executed[0]["result"].order_id == "order-1"
        assert engine.get_status().last_signal_time == candles[BUY_INDEX].timestamp

    @pytest.mark.asyncio
    async def test_signal_is_not_repeated(self, engine, executor, trade_config):
        candles = fresh_candles()
        await engine.start(trade_config)

        await feed_until_buy(engine, candles)
        await engine.update_candle(candles[BUY_INDEX + 1])
        await engine.update_candle(candles[BUY_INDEX + 2])

        assert executor.execute_trade.await_count == 1
        assert len(engine.get_signal_logs()) == 1

    @pytest.mark.asyncio
    async def test_same_period_does_not_rerun(self, engine, executor, trade_config):
        candles = fresh_candles()
        await engine.start(trade_config)
        engine.update_candle_batch(candles[:BUY_INDEX + 1])

        await engine.update_candle(candles[BUY_INDEX])

        executor.execute_trade.assert_not_called()

    @pytest.mark.asyncio
    async def test_stale_signal_ignored(self, engine, executor, trade_config):
        await engine.start(trade_config)

        await feed_until_buy(engine, stale_candles())

        executor.execute_trade.assert_not_called()
        assert engine.get_signal_logs() == []

    @pytest.mark.asyncio
    async def test_take_profit_forwarded(self, engine, executor):
        config = AutoTradeConfig(symbol="XRPUSDT", timeframe="1m", amount=5.0,
                                 enable_take_profit=True, take_profit_percent=2.5,
                                 stop_loss_percent=1.0)
        await engine.start(config)

        await feed_until_buy(engine, fresh_candles())

        request = executor.execute_trade.call_args.args[0]
        assert request.take_profit_percent == 2.5
        assert request.stop_loss_percent is None

    @pytest.mark.asyncio
    async def test_failed_trade_result(self, engine, executor, trade_config):
        executor.execute_trade.return_value = TradeResult(success=False, error="insufficient margin")
        trade_errors = record(engine, AutoTradeEvent.TRADE_ERROR)
        await engine.start(trade_config)

        await feed_until_buy(engine, fresh_candles())

        log = trade_errors[0]["signal_log"]
        assert trade_errors[0]["error"] == "insufficient margin"
        assert not log.executed
        assert log.error == "insufficient margin"

    @pytest.mark.asyncio
    async def test_executor_exception(self, engine, executor, trade_config):
        executor.execute_trade.side_effect = RuntimeError("rejected")
        trade_errors = record(engine, AutoTradeEvent.TRADE_ERROR)
        await engine.start(trade_config)

        await feed_until_buy(engine, fresh_candles())

        assert isinstance(trade_errors[0]["error"], RuntimeError)
        assert engine.get_signal_logs()[0].error == "rejected"

    @pytest.mark.asyncio
    async def test_buffer_is_bounded(self, executor, trade_config):
        engine = AutoTradeEngine(executor, settings=AutoTradeSettings(max_candle_buffer=20))
        await engine.start(trade_config)
        try:
            engine.update_candle_batch(fresh_candles()[:50])
            assert engine.get_status().buffer_size == 20
        finally:
            await engine.stop()

    @pytest.mark.asyncio
    async def test_clear_signal_logs(self, engine, trade_config):
        await engine.start(trade_config)
        await feed_until_buy(engine, fresh_candles())

        engine.clear_signal_logs()
        assert engine.get_signal_logs() == []


def scripted_manager(*signal_times):
    """Strategy manager stand-in whose latest buy signal follows signal_times, one per evaluation."""
    manager = MagicMock()
    manager.activate_strategy.return_value = True
    manager.calculate_signals.side_effect = [
        StrategyResult(signals=[StrategySignal(timestamp=ts, type=SignalType.BUY, price=1.0)], timestamp=ts)
        for ts in signal_times
    ]
    return manager


def minute_candles(count: int):
    start = align_timestamp(int(time.time() * 1000), '1m')
    return [Candle(timestamp=start + i * MINUTE_MS, open=1.0, high=1.0, low=1.0, close=1.0) for i in range(count)]


class TestSignalLogBounds:

    @pytest.mark.asyncio
    async def test_signal_logs_keep_most_recent(self, executor, trade_config):
        candles = minute_candles(5)
        times = [c.timestamp for c in candles[1:4]]
        engine = AutoTradeEngine(executor, strategy_manager=scripted_manager(*times, times[-1]),
                                 settings=AutoTradeSettings(max_signal_logs=2))
        await engine.start(trade_config)
        try:
            engine.update_candle_batch(candles[:1])
            for candle in candles[1:]:
                await engine.update_candle(candle)

            assert [log.timestamp for log in engine.get_signal_logs()] == times[1:]
            assert executor.execute_trade.await_count == 3
            assert engine._signal_ids == {f"{ts}_buy" for ts in times[1:]}
        finally:
            await engine.stop()

    @pytest.mark.asyncio
    async def test_strategy_run_latency_is_recorded(self, executor, trade_config):
        candles = minute_candles(2)
        logger = MagicMock()
        engine = AutoTradeEngine(executor, strategy_manager=scripted_manager(candles[1].timestamp), logger=logger)
        await engine.start(trade_config)
        try:
            engine.update_candle_batch(candles[:1])
            await engine.update_candle(candles[1])

            logger.latency.assert_called_once()
            assert logger.latency.call_args.args[0] == "strategy_calculate"
        finally:
            await engine.stop()
