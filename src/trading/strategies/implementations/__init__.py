from .range_filter_strategy import RangeFilterStrategy, cond_ema, range_filter, filter_direction

__all__ = ['RangeFilterStrategy', 'cond_ema', 'range_filter', 'filter_direction']
