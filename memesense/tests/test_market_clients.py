"""Tests for the Birdeye and CoinGecko clients."""

import asyncio
from random import Random
from unittest.mock import AsyncMock

import pytest

from memesense.core.birdeye_client import BirdeyeClient
from memesense.core.coingecko_client import CoinGeckoClient
from memesense.core.errors import UpstreamUnavailable
from memesense.core.market import MarketAnalyzer


def birdeye_returning(**kwargs):
    client = BirdeyeClient(api_key="test-key")
    client._get_json = AsyncMock(**kwargs)
    return client


def coingecko_returning(**kwargs):
    client = CoinGeckoClient()
    client._get_json = AsyncMock(**kwargs)
    return client


class TestBirdeyeClient:

    def test_no_key_skips_request(self):
        client = BirdeyeClient(api_key="")
        client._get_json = AsyncMock()

        with pytest.raises(UpstreamUnavailable):
            asyncio.run(client.get_trending_tokens())

        client._get_json.assert_not_awaited()

    def test_trending_parsed_and_junk_entries_skipped(self):
        client = birdeye_returning(return_value={"success": True, "data": {"tokens": [
            {"name": "Bonk", "symbol": "BONK", "address": "DezX", "price": "0.00002",
             "price24hChangePercent": 12.5, "volume24hUSD": 1_000_000, "rank": 1},
            "not-a-token",
        ]}})

        tokens = asyncio.run(client.get_trending_tokens())

        assert len(tokens) == 1
        assert tokens[0]["symbol"] == "BONK"
        assert tokens[0]["price_change_24h"] == 12.5

    @pytest.mark.parametrize("payload", [
        {"success": True, "data": ["unexpected"]},
        {"success": False, "data": {"tokens": []}},
        ["unexpected"],
    ])
    def test_unexpected_payload_is_unavailable(self, payload):
        client = birdeye_returning(return_value=payload)

        with pytest.raises(UpstreamUnavailable):
            asyncio.run(client.get_trending_tokens())

    def test_new_listings_tolerate_missing_items(self):
        client = birdeye_returning(return_value={"success": True, "data": {"items": None}})

        assert asyncio.run(client.get_new_listings()) == []


class TestCoinGeckoClient:

    def test_sol_price(self):
        client = coingecko_returning(return_value={"solana": {"usd": 151.25}})

        assert asyncio.run(client.get_sol_price()) == 151.25
        _, kwargs = client._get_json.call_args
        assert kwargs["params"] == {"ids": "solana", "vs_currencies": "usd"}

    @pytest.mark.parametrize("payload", [{}, {"solana": {}}, {"solana": {"usd": "soon"}}, {"solana": []}])
    def test_sol_price_missing_is_none(self, payload):
        client = coingecko_returning(return_value=payload)

        assert asyncio.run(client.get_sol_price()) is None

    def test_sol_price_list_payload_is_unavailable(self):
        client = coingecko_returning(return_value=[{"usd": 150}])

        with pytest.raises(UpstreamUnavailable):
            asyncio.run(client.get_sol_price())

    def test_trending_list_payload_is_unavailable(self):
        client = coingecko_returning(return_value=["unexpected"])

        with pytest.raises(UpstreamUnavailable):
            asyncio.run(client.get_trending())

    def test_trending_parsed(self):
        client = coingecko_returning(return_value={"coins": [
            {"item": {"id": "dogwifcoin", "name": "dogwifhat", "symbol": "wif", "score": 0,
                      "data": {"price": 2.1, "price_change_percentage_24h": {"usd": -4.0}}}},
            {"item": "junk"},
            "junk",
        ]})

        trending = asyncio.run(client.get_trending())

        assert trending == [{
            "name": "dogwifhat",
            "symbol": "WIF",
            "address": "dogwifcoin",
            "price": 2.1,
            "price_change_24h": -4.0,
            "score": 0,
        }]

    def test_meme_markets_skip_non_object_entries(self):
        client = coingecko_returning(return_value=[
            {"symbol": "bonk", "name": "Bonk", "current_price": 0.00002, "market_cap": 1_500_000_000},
            None,
        ])

        markets = asyncio.run(client.get_meme_markets())

        assert [m["symbol"] for m in markets] == ["BONK"]


def test_trending_falls_through_malformed_birdeye_to_coingecko(unconfigured_openai, failing_solscan, memory_cache):
    birdeye = birdeye_returning(return_value={"success": True, "data": ["unexpected"]})
    coingecko = coingecko_returning(return_value={"coins": [
        {"item": {"id": "bonk", "name": "Bonk", "symbol": "bonk",
                  "data": {"price": 0.00002, "price_change_percentage_24h": {"usd": 3.0}}}},
    ]})
    market = MarketAnalyzer(birdeye, coingecko, unconfigured_openai, failing_solscan, memory_cache, rng=Random(1))

    result = asyncio.run(market.analyze(query_type="trendingTokens"))

    assert result["source"] == "live"
    assert result["trendingTokens"][0]["ticker"] == "$BONK"
