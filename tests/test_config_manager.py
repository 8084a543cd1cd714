import pytest

from config.config_manager import CoinexConfig, get_config, reset_config, substitute_env_vars
from config.structs import AutoTradeSettings, WebSocketConfig
from infrastructure.exceptions.system import ConfigurationError


def write_config(tmp_path, content):
    path = tmp_path / "config.yaml"
    path.write_text(content)
    return path


class TestEnvSubstitution:

    def test_plain_and_default(self, monkeypatch):
        monkeypatch.setenv("COINEX_TEST_KEY", "abc")
        monkeypatch.delenv("COINEX_TEST_MISSING", raising=False)

        assert substitute_env_vars("key: ${COINEX_TEST_KEY}") == "key: abc"
        assert substitute_env_vars("key: ${COINEX_TEST_MISSING:fallback}") == "key: fallback"
        assert substitute_env_vars("key: ${COINEX_TEST_MISSING}") == "key: "


class TestCoinexConfig:

    def test_websocket_section(self, tmp_path):
        path = write_config(tmp_path, """
coinex:
  websocket_url: wss://socket.coinex.com/v2/futures
  websocket:
    connect_timeout: 10
    max_reconnect_attempts: 3
    reconnect_delay: 2
    replay_subscriptions: "false"
""")
        ws = CoinexConfig(config_path=path, load_env=False).get_websocket_config()

        assert ws.connect_timeout == 10.0
        assert ws.max_reconnect_attempts == 3
        assert ws.reconnect_delay == 2.0
        assert ws.max_reconnect_delay == 30.0
        assert ws.replay_subscriptions is False

    def test_defaults_without_sections(self, tmp_path):
        config = CoinexConfig(config_path=write_config(tmp_path, "environment: test\n"), load_env=False)
        assert config.get_websocket_config() == WebSocketConfig()
        assert config.get_auto_trade_settings() == AutoTradeSettings()
        assert config.environment == "test"

    def test_invalid_websocket_value(self, tmp_path):
        path = write_config(tmp_path, "coinex:\n  websocket:\n    connect_timeout: soon\n")
        with pytest.raises(ConfigurationError) as exc_info:
            CoinexConfig(config_path=path, load_env=False).get_websocket_config()
        assert exc_info.value.setting_name == "websocket.connect_timeout"

    def test_invalid_websocket_url(self, tmp_path):
        path = write_config(tmp_path, "coinex:\n  websocket_url: http://socket.coinex.com\n")
        with pytest.raises(ConfigurationError):
            CoinexConfig(config_path=path, load_env=False).get_websocket_config()

    def test_credentials_from_yaml_with_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("COINEX_TEST_SECRET", "yaml-secret")
        path = write_config(tmp_path, """
coinex:
  credentials:
    api_key: yaml-key
    secret_key: ${COINEX_TEST_SECRET}
""")
        credentials = CoinexConfig(config_path=path, load_env=False).get_credentials()
        assert credentials.api_key == "yaml-key"
        assert credentials.secret_key == "yaml-secret"

    def test_credentials_fall_back_to_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("COINEX_API_KEY", "env-key")
        monkeypatch.setenv("COINEX_API_SECRET", "env-secret")
        credentials = CoinexConfig(config_path=write_config(tmp_path, "{}\n"), load_env=False).get_credentials()
        assert credentials.get_preview() == "***"
        assert credentials.has_private_api

    def test_half_configured_credentials_rejected(self, tmp_path, monkeypatch):
        monkeypatch.delenv("COINEX_API_SECRET", raising=False)
        path = write_config(tmp_path, "coinex:\n  credentials:\n    api_key: only-key\n")
        with pytest.raises(ConfigurationError):
            CoinexConfig(config_path=path, load_env=False).get_credentials()

    def test_auto_trade_section(self, tmp_path):
        path = write_config(tmp_path, "auto_trade:\n  max_candle_buffer: 50\n  status_interval: 1.5\n")
        settings = CoinexConfig(config_path=path, load_env=False).get_auto_trade_settings()
        assert settings.max_candle_buffer == 50
        assert settings.status_interval == 1.5

        bad = write_config(tmp_path, "auto_trade:\n  max_candle_buffer: 1\n")
        with pytest.raises(ConfigurationError):
            CoinexConfig(config_path=bad, load_env=False).get_auto_trade_settings()

    def test_logging_section(self, tmp_path):
        path = write_config(tmp_path, """
environment: prod
logging:
  console:
    min_level: ERROR
  file:
    enabled: true
    path: logs/test.log
    format: json
""")
        logging_config = CoinexConfig(config_path=path, load_env=False).get_logging_config()
        assert logging_config.environment == "prod"
        assert logging_config.console.min_level == "ERROR"
        assert logging_config.file.format == "json"

    def test_invalid_yaml(self, tmp_path):
        path = write_config(tmp_path, "coinex: [unclosed\n")
        with pytest.raises(ConfigurationError):
            CoinexConfig(config_path=path, load_env=False)

    def test_missing_explicit_path(self, tmp_path):
        with pytest.raises(ConfigurationError):
            CoinexConfig(config_path=tmp_path / "missing.yaml", load_env=False)

    def test_singleton(self):
        reset_config()
        try:
            assert get_config() is get_config()
        finally:
            reset_config()


class TestStructValidation:

    def test_websocket_config_rejects_bad_values(self):
        with pytest.raises(ValueError):
            WebSocketConfig(url="http://x").validate()
        with pytest.raises(ValueError):
            WebSocketConfig(reconnect_backoff=0.5).validate()
        with pytest.raises(ValueError):
            WebSocketConfig(reconnect_delay=10, max_reconnect_delay=5).validate()
        with pytest.raises(ValueError):
            WebSocketConfig(max_message_size=0).validate()
        with pytest.raises(ValueError):
            WebSocketConfig(max_message_size=1024, max_decompressed_size=512).validate()

    def test_default_backoff_schedule(self):
        config = WebSocketConfig()
        assert [config.reconnect_delay_for(n) for n in (1, 2, 3, 4, 5, 6)] == \
            pytest.approx([5.0, 7.5, 11.25, 16.875, 25.3125, 30.0])
