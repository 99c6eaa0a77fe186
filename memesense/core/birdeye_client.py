"""Birdeye API client for trending tokens, top traders and new listings."""

import logging
from typing import Any, Dict, List, Optional

import aiohttp

from ..config import MemesenseConfig
from .errors import UpstreamUnavailable
from .http_client import AsyncHTTPClient

logger = logging.getLogger(__name__)


def _records(data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    """The object entries of a list member, skipping anything else."""
    records = data.get(key)
    if not isinstance(records, list):
        return []
    return [r for r in records if isinstance(r, dict)]


class BirdeyeClient(AsyncHTTPClient):
    """Client for Birdeye API market data on Solana."""

    name = "birdeye"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize Birdeye client.

        Args:
            api_key: Birdeye API key (from BIRDEYE_API_KEY env var if not provided)
        """
        super().__init__("https://public-api.birdeye.so", timeout_seconds=timeout_seconds, session=session)
        self.api_key = api_key or MemesenseConfig.get_birdeye_api_key() or ""

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        headers["X-API-KEY"] = self.api_key
        headers["x-chain"] = "solana"
        return headers

    async def _request(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Make a request to Birdeye API.

        Returns:
            The "data" member of the response

        Raises:
            UpstreamUnavailable: If no API key is set, the request failed or
                the payload is not a JSON object
        """
        if not self.api_key:
            raise UpstreamUnavailable(f"{self.base_url}{endpoint}", reason="BIRDEYE_API_KEY not set")

        payload = await self._get_json(endpoint, params=params)
        if not isinstance(payload, dict) or payload.get("success") is False:
            raise UpstreamUnavailable(f"{self.base_url}{endpoint}", reason="unsuccessful response")
        data = payload.get("data")
        if not isinstance(data, dict):
            raise UpstreamUnavailable(f"{self.base_url}{endpoint}", reason="unexpected payload")
        return data

    async def get_trending_tokens(self, limit: int = 10) -> List[Dict[str, Any]]:
        """
        Get trending tokens ranked by Birdeye.

        Returns:
            List of dicts with name, symbol, address, price, price_change_24h, volume_24h
        """
        data = await self._request(
            "/defi/token_trending",
            {"sort_by": "rank", "sort_type": "asc", "offset": 0, "limit": limit},
        )
        tokens = _records(data, "tokens")
        return [
            {
                "name": t.get("name") or t.get("symbol") or "Unknown",
                "symbol": t.get("symbol") or "",
                "address": t.get("address") or "",
                "price": float(t.get("price") or 0),
                "price_change_24h": float(t.get("price24hChangePercent") or 0),
                "volume_24h": float(t.get("volume24hUSD") or 0),
                "rank": t.get("rank"),
            }
            for t in tokens
        ]

    async def get_top_gainers(self, timeframe: str = "today", limit: int = 10) -> List[Dict[str, Any]]:
        """
        Get top traders by PnL.

        Args:
            timeframe: "yesterday", "today" or "1W"
            limit: Maximum entries (Birdeye caps this at 10)
        """
        data = await self._request(
            "/trader/gainers-losers",
            {"type": timeframe, "sort_by": "PnL", "sort_type": "desc", "offset": 0, "limit": limit},
        )
        items = _records(data, "items")
        return [
            {
                "address": i.get("address") or "",
                "pnl": float(i.get("pnl") or 0),
                "volume": float(i.get("volume") or 0),
                "trade_count": int(i.get("trade_count") or 0),
            }
            for i in items
        ]

    async def get_new_listings(self, limit: int = 20) -> List[Dict[str, Any]]:
        """
        Get newly listed tokens, including meme launchpad tokens.

        Returns:
            List of dicts with address, symbol, name, liquidity, listed_at (epoch seconds)
        """
        data = await self._request(
            "/defi/v2/tokens/new_listing",
            {"limit": limit, "meme_platform_enabled": "true"},
        )
        items = _records(data, "items")
        listings = []
        for i in items:
            listed_at = i.get("liquidityAddedAt")
            listings.append({
                "address": i.get("address") or "",
                "symbol": i.get("symbol") or "",
                "name": i.get("name") or "",
                "liquidity": float(i.get("liquidity") or 0),
                "listed_at": listed_at,
            })
        return listings
