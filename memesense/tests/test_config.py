"""Tests for configuration, the CLI entry point and the health check."""

from unittest.mock import Mock, patch

import requests

from memesense.config import API_KEY_DESCRIPTIONS, MemesenseConfig
from memesense.main import parse_args
from memesense.tools import health_check


class TestMemesenseConfig:

    def test_defaults(self):
        assert MemesenseConfig.get_port() == 8000
        assert MemesenseConfig.get_cache_ttl() == 300
        assert MemesenseConfig.get_http_timeout() == 10
        assert MemesenseConfig.get_tx_history_limit() == 50
        assert MemesenseConfig.get_chat_model() == "gpt-4o"
        assert MemesenseConfig.get_redis_enabled() is False
        assert MemesenseConfig.get_metrics_enabled() is False

    def test_solscan_hosts_trailing_slash_stripped(self, monkeypatch):
        monkeypatch.setenv("SOLSCAN_PRIMARY_URL", "https://solscan.example/")
        assert MemesenseConfig.get_solscan_primary_url() == "https://solscan.example"

    def test_oauth_credentials_need_all_four(self, monkeypatch):
        monkeypatch.setenv("TWITTER_CONSUMER_KEY", "ck")
        monkeypatch.setenv("TWITTER_CONSUMER_SECRET", "cs")
        monkeypatch.setenv("TWITTER_ACCESS_TOKEN", "at")
        assert MemesenseConfig.get_twitter_oauth_credentials() is None

        monkeypatch.setenv("TWITTER_ACCESS_TOKEN_SECRET", "ats")
        assert MemesenseConfig.get_twitter_oauth_credentials() == {
            "consumer_key": "ck",
            "consumer_secret": "cs",
            "access_token": "at",
            "access_token_secret": "ats",
        }

    def test_check_api_keys_none_set(self):
        result = MemesenseConfig.check_api_keys()

        assert result["configuredKeys"] == []
        assert result["missingKeys"] == [description for _, description in API_KEY_DESCRIPTIONS]
        assert result["allConfigured"] is False

    def test_check_api_keys_all_set(self, monkeypatch):
        for name, _ in API_KEY_DESCRIPTIONS:
            monkeypatch.setenv(name, "value")

        result = MemesenseConfig.check_api_keys()

        assert result["missingKeys"] == []
        assert result["allConfigured"] is True

    def test_validate_config_warns_without_keys(self):
        is_valid, warnings = MemesenseConfig.validate_config()

        assert is_valid is True
        assert any("OPENAI_API_KEY" in w for w in warnings)
        assert any("Twitter" in w for w in warnings)

    def test_validate_config_rejects_bad_numbers(self, monkeypatch):
        monkeypatch.setenv("MEMESENSE_CACHE_TTL_SECONDS", "0")
        monkeypatch.setenv("MEMESENSE_HTTP_TIMEOUT_SECONDS", "soon")

        is_valid, warnings = MemesenseConfig.validate_config()

        assert is_valid is False
        assert any("must be positive" in w for w in warnings)
        assert any("is not a number" in w for w in warnings)

    def test_print_config_summary_hides_values(self, monkeypatch, capsys):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-secret-value")

        MemesenseConfig.print_config_summary()

        out = capsys.readouterr().out
        assert "OpenAI API Key: Set" in out
        assert "sk-secret-value" not in out


def test_parse_args_overrides():
    args = parse_args(["--port", "9001", "--host", "127.0.0.1", "--log-level", "DEBUG"])

    assert args.port == 9001
    assert args.host == "127.0.0.1"
    assert args.log_level == "DEBUG"
    assert args.check_config is False


class TestHealthCheck:

    def test_coingecko_ok(self, capsys):
        response = Mock()
        response.json.return_value = {"solana": {"usd": 151.2}}

        with patch("memesense.tools.health_check.requests.get", return_value=response):
            assert health_check.check_coingecko() is True

        assert "151.2" in capsys.readouterr().out

    def test_service_unreachable(self):
        with patch("memesense.tools.health_check.requests.get",
                   side_effect=requests.exceptions.ConnectionError("refused")):
            assert health_check.check_service("http://localhost:8000") is False

    def test_birdeye_without_key_is_not_fatal(self):
        with patch("memesense.tools.health_check.requests.get") as get:
            assert health_check.check_birdeye() is True
        get.assert_not_called()

    def test_solscan_falls_through_hosts(self):
        failed = Mock(status_code=503)
        ok = Mock(status_code=200)

        with patch("memesense.tools.health_check.requests.get", side_effect=[failed, ok]) as get:
            assert health_check.check_solscan() is True

        assert get.call_count == 2
