import pytest

from infrastructure.exceptions.system import InvalidStrategyConfigError
from trading.strategies import RANGE_FILTER, Candle, RangeFilterStrategy, StrategyManager


class TestStrategyManager:

    @pytest.fixture
    def manager(self):
        return StrategyManager()

    def test_range_filter_registered(self, manager):
        assert manager.get_strategy_names() == [RANGE_FILTER]
        assert isinstance(manager.get_strategy(RANGE_FILTER), RangeFilterStrategy)
        assert manager.get_strategy('missing') is None

    def test_activate_and_deactivate(self, manager):
        assert manager.activate_strategy(RANGE_FILTER, {'rng_per': 10})
        strategy = manager.active_strategy
        assert strategy.active
        assert strategy.get_params()['rng_per'] == 10

        manager.deactivate_strategy()
        assert manager.active_strategy is None
        assert not strategy.active

    def test_activating_replaces_previous(self, manager):
        other = RangeFilterStrategy()
        manager.register_strategy('other', other)

        manager.activate_strategy(RANGE_FILTER)
        manager.activate_strategy('other')

        assert manager.active_strategy is other
        assert not manager.get_strategy(RANGE_FILTER).active

    def test_activate_unknown_or_invalid(self, manager):
        assert not manager.activate_strategy('missing')
        assert not manager.activate_strategy(RANGE_FILTER, {'rng_qty': -1})
        assert manager.active_strategy is None

    def test_update_params(self, manager):
        manager.update_params(RANGE_FILTER, {'smooth_per': 30})
        assert manager.get_strategy(RANGE_FILTER).get_params()['smooth_per'] == 30

        with pytest.raises(InvalidStrategyConfigError):
            manager.update_params('missing', {})

    def test_calculate_without_active_strategy(self, manager):
        assert manager.calculate_signals([]) is None

    def test_calculate_signals(self, manager):
        manager.activate_strategy(RANGE_FILTER)
        candles = [Candle(timestamp=i * 60_000, open=100.0, high=101.0, low=99.0, close=100.0 + i)
                   for i in range(5)]
        result = manager.calculate_signals(candles)
        assert result is not None
        assert len(result.indicators) == 5

    def test_strategy_configs(self, manager):
        configs = manager.get_all_strategy_configs()
        assert configs[0]['name'] == RANGE_FILTER
        assert configs[0]['display_name'] == 'Range Filter'
        assert [p.name for p in configs[0]['params']] == ['rng_qty', 'rng_per', 'smooth_range', 'smooth_per']
