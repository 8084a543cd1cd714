"""
Configuration Management Module

YAML-based configuration for the CoinEx futures client.

Key Features:
- YAML configuration with ${VAR} / ${VAR:default} environment substitution
- .env loading through python-dotenv (existing environment wins)
- Typed msgspec structs for WebSocket, credentials, logging and auto-trade
- Clear ConfigurationError messages naming the failing setting

Usage:
    from config import get_config

    ws_config = get_config().get_websocket_config()
    credentials = get_config().get_credentials()
"""

import os
import re
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Type, TypeVar

import msgspec
import yaml
from dotenv import load_dotenv

from infrastructure.exceptions.system import ConfigurationError
from infrastructure.logging.structs import LoggingConfig
from config.structs import WebSocketConfig, ExchangeCredentials, AutoTradeSettings

T = TypeVar('T')

ENV_VAR_PATTERN = re.compile(r'\$\{([^}]+)\}')
ENV_VAR_DEFAULT_PATTERN = re.compile(r'^([^:]+):(.*)$')

DEFAULT_WS_URL = "wss://socket.coinex.com/v2/futures"


def guess_file_paths(file_name: str) -> list[Path]:
    """Possible locations of config.yaml / .env, most specific first."""
    return [
        Path.cwd() / file_name,                           # Current working directory
        Path(__file__).parent.parent.parent / file_name,  # Project root
        Path(__file__).parent.parent / file_name,         # src directory
    ]


def substitute_env_vars(content: str) -> str:
    """
    Substitute environment variables in configuration content.

    Supports:
    - ${VAR_NAME} - environment variable, empty when unset
    - ${VAR_NAME:default} - with default value
    """
    def replace_var(match):
        var_expr = match.group(1)
        default_match = ENV_VAR_DEFAULT_PATTERN.match(var_expr)
        if default_match:
            var_name, default_value = default_match.groups()
            env_value = os.getenv(var_name.strip())
            return default_value if env_value is None else env_value
        return os.getenv(var_expr.strip(), "")

    return ENV_VAR_PATTERN.sub(replace_var, content)


def safe_get_config_value(config: Dict[str, Any], key: str, default: T, value_type: Type[T], config_name: str) -> T:
    """Extract a value and cast it, raising ConfigurationError on bad input."""
    value = config.get(key, default)
    if value is None:
        return default
    try:
        if value_type == bool and isinstance(value, str):
            return value.strip().lower() in ('1', 'true', 'yes', 'on')
        return value_type(value)
    except (ValueError, TypeError) as e:
        raise ConfigurationError(
            f"Invalid value for {config_name}.{key}: {value} (expected {value_type.__name__})",
            f"{config_name}.{key}"
        ) from e


def parse_websocket_config(part_config: Dict[str, Any], websocket_url: str) -> WebSocketConfig:
    """
    Parse WebSocket configuration with URL injection and validation.

    Raises:
        ConfigurationError: If configuration values are invalid
    """
    if not websocket_url or not isinstance(websocket_url, str):
        raise ConfigurationError(f"Invalid WebSocket URL: {websocket_url}", "websocket_url")

    ws_config = WebSocketConfig(
        url=websocket_url,
        connect_timeout=safe_get_config_value(part_config, 'connect_timeout', 30.0, float, 'websocket'),
        close_timeout=safe_get_config_value(part_config, 'close_timeout', 5.0, float, 'websocket'),
        ping_interval=safe_get_config_value(part_config, 'ping_interval', 20.0, float, 'websocket'),
        ping_timeout=safe_get_config_value(part_config, 'ping_timeout', 10.0, float, 'websocket'),
        max_reconnect_attempts=safe_get_config_value(part_config, 'max_reconnect_attempts', 10, int, 'websocket'),
        reconnect_delay=safe_get_config_value(part_config, 'reconnect_delay', 5.0, float, 'websocket'),
        reconnect_backoff=safe_get_config_value(part_config, 'reconnect_backoff', 1.5, float, 'websocket'),
        max_reconnect_delay=safe_get_config_value(part_config, 'max_reconnect_delay', 30.0, float, 'websocket'),
        auth_timeout=safe_get_config_value(part_config, 'auth_timeout', 15.0, float, 'websocket'),
        replay_subscriptions=safe_get_config_value(part_config, 'replay_subscriptions', True, bool, 'websocket'),
        max_message_size=safe_get_config_value(part_config, 'max_message_size', 4 * 1024 * 1024, int, 'websocket'),
        max_decompressed_size=safe_get_config_value(part_config, 'max_decompressed_size', 16 * 1024 * 1024, int, 'websocket'),
    )
    try:
        ws_config.validate()
    except ValueError as e:
        raise ConfigurationError(f"Invalid WebSocket configuration: {e}", "websocket") from e
    return ws_config


class CoinexConfig:
    """
    Loads .env and config.yaml once and hands out typed config structs.

    A missing config.yaml is not an error: every section falls back to
    struct defaults and credentials come from the environment.
    """

    def __init__(self, config_path: Optional[Path] = None, load_env: bool = True):
        self._logger = logging.getLogger(__name__)
        self.config_path: Optional[Path] = None
        self._data: Dict[str, Any] = {}

        if load_env:
            self._load_env_file()
        self._load_yaml_config(config_path)

        self.environment = str(self._data.get('environment') or os.getenv('ENVIRONMENT', 'dev'))

    def _load_env_file(self) -> None:
        for env_path in guess_file_paths('.env'):
            if env_path.exists():
                load_dotenv(dotenv_path=env_path, override=False)
                self._logger.info(f"Loaded environment variables from: {env_path}")
                return
        self._logger.debug("No .env file found - using system environment variables only")

    def _load_yaml_config(self, config_path: Optional[Path]) -> None:
        candidates = [Path(config_path)] if config_path else guess_file_paths('config.yaml')

        for path in candidates:
            if not path.exists():
                continue
            try:
                raw_content = path.read_text(encoding='utf-8')
                data = yaml.safe_load(substitute_env_vars(raw_content)) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML syntax in {path}: {e}", str(path)) from e

            if not isinstance(data, dict):
                raise ConfigurationError(f"Top level of {path} must be a mapping", str(path))

            self._data = data
            self.config_path = path
            self._logger.info(f"Configuration loaded from: {path}")
            return

        if config_path:
            raise ConfigurationError(f"Config file not found: {config_path}", "config_file")
        self._logger.debug("No config.yaml found - using defaults")

    def _section(self, *keys: str) -> Dict[str, Any]:
        node: Any = self._data
        for key in keys:
            node = node.get(key) if isinstance(node, dict) else None
        return node if isinstance(node, dict) else {}

    def get_websocket_config(self) -> WebSocketConfig:
        coinex = self._section('coinex')
        url = coinex.get('websocket_url') or DEFAULT_WS_URL
        return parse_websocket_config(self._section('coinex', 'websocket'), url)

    def get_credentials(self) -> ExchangeCredentials:
        section = self._section('coinex', 'credentials')
        credentials = ExchangeCredentials(
            api_key=str(section.get('api_key') or os.getenv('COINEX_API_KEY', '')).strip(),
            secret_key=str(section.get('secret_key') or os.getenv('COINEX_API_SECRET', '')).strip(),
        )
        try:
            credentials.validate()
        except ValueError as e:
            raise ConfigurationError(str(e), "coinex.credentials") from e
        return credentials

    def get_auto_trade_settings(self) -> AutoTradeSettings:
        try:
            settings = msgspec.convert(self._section('auto_trade'), type=AutoTradeSettings)
            settings.validate()
        except (msgspec.ValidationError, ValueError) as e:
            raise ConfigurationError(f"Invalid auto_trade configuration: {e}", "auto_trade") from e
        return settings

    def get_logging_config(self) -> LoggingConfig:
        section = self._section('logging')
        if not section:
            if self.environment == 'prod':
                return LoggingConfig.default_production()
            return LoggingConfig.default_development()
        try:
            logging_config = LoggingConfig.from_dict({'environment': self.environment, **section})
            logging_config.validate()
        except (msgspec.ValidationError, ValueError) as e:
            raise ConfigurationError(f"Invalid logging configuration: {e}", "logging") from e
        return logging_config

    def get_config_summary(self) -> str:
        ws = self.get_websocket_config()
        return (
            f"environment={self.environment} source={self.config_path or 'defaults'} "
            f"url={ws.url} credentials={self.get_credentials().get_preview()}"
        )


_config_instance: Optional[CoinexConfig] = None


def get_config() -> CoinexConfig:
    """Get the process-wide configuration instance, loading it on first use."""
    global _config_instance
    if _config_instance is None:
        _config_instance = CoinexConfig()
    return _config_instance


def reset_config() -> None:
    """Drop the cached configuration (used by tests)."""
    global _config_instance
    _config_instance = None
