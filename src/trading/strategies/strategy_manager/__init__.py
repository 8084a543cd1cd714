from .strategy_manager import StrategyManager, RANGE_FILTER

__all__ = ['StrategyManager', 'RANGE_FILTER']
