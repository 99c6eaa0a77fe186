"""CoinGecko API client for meme-coin markets and trending searches."""

import logging
from typing import Any, Dict, List, Optional

import aiohttp

from ..config import MemesenseConfig
from .errors import UpstreamUnavailable
from .http_client import AsyncHTTPClient

logger = logging.getLogger(__name__)


class CoinGeckoClient(AsyncHTTPClient):
    """Client for CoinGecko API (public API doesn't require key)."""

    name = "coingecko"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        super().__init__("https://api.coingecko.com/api/v3", timeout_seconds=timeout_seconds, session=session)
        self.api_key = api_key or MemesenseConfig.get_coingecko_api_key() or ""

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        if self.api_key:
            headers["x-cg-demo-api-key"] = self.api_key
        return headers

    async def get_meme_markets(self, limit: int = 50) -> List[Dict[str, Any]]:
        """
        Get Solana meme-coin markets.

        Returns:
            List of dicts with symbol, name, price, market_cap and
            price_change_24h / 7d / 30d (percent, may be None)
        """
        data = await self._get_json(
            "/coins/markets",
            params={
                "vs_currency": "usd",
                "category": "solana-meme-coins",
                "order": "market_cap_desc",
                "per_page": limit,
                "page": 1,
                "price_change_percentage": "24h,7d,30d",
            },
        )
        if not isinstance(data, list):
            raise UpstreamUnavailable(f"{self.base_url}/coins/markets", reason="unexpected payload")

        return [
            {
                "symbol": (c.get("symbol") or "").upper(),
                "name": c.get("name") or "",
                "price": c.get("current_price"),
                "market_cap": float(c.get("market_cap") or 0),
                "price_change_24h": c.get("price_change_percentage_24h_in_currency"),
                "price_change_7d": c.get("price_change_percentage_7d_in_currency"),
                "price_change_30d": c.get("price_change_percentage_30d_in_currency"),
            }
            for c in data
            if isinstance(c, dict)
        ]

    async def get_trending(self) -> List[Dict[str, Any]]:
        """Get trending coins from CoinGecko search."""
        data = await self._get_json("/search/trending")
        if not isinstance(data, dict):
            raise UpstreamUnavailable(f"{self.base_url}/search/trending", reason="unexpected payload")
        coins = data.get("coins")
        if not isinstance(coins, list):
            coins = []
        trending = []
        for entry in coins:
            item = entry.get("item") if isinstance(entry, dict) else None
            if not isinstance(item, dict):
                continue
            details = item.get("data") if isinstance(item.get("data"), dict) else {}
            changes = details.get("price_change_percentage_24h")
            change = changes.get("usd") if isinstance(changes, dict) else None
            trending.append({
                "name": item.get("name") or "",
                "symbol": (item.get("symbol") or "").upper(),
                "address": item.get("id") or "",
                "price": details.get("price"),
                "price_change_24h": float(change) if change is not None else 0.0,
                "score": item.get("score", 0),
            })
        return trending

    async def get_sol_price(self) -> Optional[float]:
        """
        Get current SOL price in USD.

        Returns:
            The price, or None when CoinGecko did not quote one

        Raises:
            UpstreamUnavailable: If the request failed or the payload is not a JSON object
        """
        data = await self._get_json("/simple/price", params={"ids": "solana", "vs_currencies": "usd"})
        if not isinstance(data, dict):
            raise UpstreamUnavailable(f"{self.base_url}/simple/price", reason="unexpected payload")
        quote = data.get("solana")
        price = quote.get("usd") if isinstance(quote, dict) else None
        if isinstance(price, bool) or not isinstance(price, (int, float)):
            return None
        return float(price)
