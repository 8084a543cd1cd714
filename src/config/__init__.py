from .structs import WebSocketConfig, ExchangeCredentials, AutoTradeSettings
from .config_manager import CoinexConfig, get_config, reset_config

__all__ = [
    'WebSocketConfig',
    'ExchangeCredentials',
    'AutoTradeSettings',
    'CoinexConfig',
    'get_config',
    'reset_config',
]
