"""
Pytest configuration and fixtures for Memesense tests.
"""

from random import Random
from unittest.mock import AsyncMock, Mock

import pytest

from memesense.config import API_KEY_DESCRIPTIONS
from memesense.core.cache import ResponseCache
from memesense.core.errors import UpstreamUnavailable
from memesense.core.solscan_client import SolscanClient, SolscanHost


ENV_VARS = [name for name, _ in API_KEY_DESCRIPTIONS] + [
    "COINGECKO_API_KEY",
    "REDIS_ENABLED",
    "MEMESENSE_METRICS_ENABLED",
    "MEMESENSE_CACHE_TTL_SECONDS",
    "MEMESENSE_HTTP_TIMEOUT_SECONDS",
    "MEMESENSE_PORT",
    "MEMESENSE_TX_HISTORY_LIMIT",
    "MEMESENSE_CHAT_MODEL",
    "MEMESENSE_ANALYSIS_MODEL",
    "SOLSCAN_PRIMARY_URL",
    "SOLSCAN_SECONDARY_URL",
]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Tests never see real API keys or a real Redis."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sample_wallet_address():
    """Sample Solana wallet address for testing."""
    return "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"


@pytest.fixture
def wrapped_sol_address():
    return "So11111111111111111111111111111111111111112"


@pytest.fixture
def rng():
    return Random(42)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def memory_cache(fake_clock):
    """In-memory cache with a 300 s TTL on a fake clock."""
    return ResponseCache(ttl_seconds=300, enabled=False, clock=fake_clock)


def failing_host(base_url: str) -> SolscanHost:
    host = SolscanHost(base_url, api_key="test-key", timeout_seconds=1)
    host._get_json = AsyncMock(side_effect=UpstreamUnavailable(f"{base_url}/account", status=503))
    return host


@pytest.fixture
def failing_solscan():
    """Solscan client whose primary and secondary hosts both return 503."""
    return SolscanClient(
        api_key="test-key",
        hosts=[failing_host("https://primary.test"), failing_host("https://secondary.test")],
    )


@pytest.fixture
def failing_birdeye():
    birdeye = Mock()
    down = UpstreamUnavailable("https://public-api.birdeye.so", status=503)
    birdeye.get_trending_tokens = AsyncMock(side_effect=down)
    birdeye.get_top_gainers = AsyncMock(side_effect=down)
    birdeye.get_new_listings = AsyncMock(side_effect=down)
    birdeye.close = AsyncMock()
    return birdeye


@pytest.fixture
def failing_coingecko():
    coingecko = Mock()
    down = UpstreamUnavailable("https://api.coingecko.com/api/v3", status=429)
    coingecko.get_meme_markets = AsyncMock(side_effect=down)
    coingecko.get_trending = AsyncMock(side_effect=down)
    coingecko.get_sol_price = AsyncMock(side_effect=down)
    coingecko.close = AsyncMock()
    return coingecko


@pytest.fixture
def unconfigured_openai():
    openai_client = Mock(configured=False)
    openai_client.complete = AsyncMock()
    openai_client.close = AsyncMock()
    return openai_client
