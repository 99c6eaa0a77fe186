"""
Solscan API client for wallet resources and token metadata.

Each resource is requested from the primary host first and the secondary
(public) host second. A host failure is logged and the next host is tried;
when both fail the caller receives AllProvidersFailed.
"""

import logging
from typing import Any, Dict, List, Optional

import aiohttp

from ..config import MemesenseConfig
from .http_client import AsyncHTTPClient
from .models import RawTransaction
from .providers import Provider, try_in_order

logger = logging.getLogger(__name__)


def _unwrap(payload: Any) -> Any:
    """Strip the {"success": ..., "data": ...} envelope some hosts add."""
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


class SolscanHost(AsyncHTTPClient):
    """A single Solscan host."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        super().__init__(base_url, timeout_seconds=timeout_seconds, session=session)
        self.api_key = api_key
        self.name = f"solscan:{self.base_url.split('//')[-1]}"

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def get_account(self, address: str) -> Any:
        return _unwrap(await self._get_json(f"/account/{address}"))

    async def get_transactions(self, address: str, limit: int) -> Any:
        return _unwrap(await self._get_json(
            "/account/transactions",
            params={"account": address, "limit": limit},
        ))

    async def get_tokens(self, address: str) -> Any:
        return _unwrap(await self._get_json("/account/tokens", params={"account": address}))

    async def get_token_meta(self, token_address: str) -> Any:
        return _unwrap(await self._get_json("/token/meta", params={"tokenAddress": token_address}))


class SolscanClient:
    """
    Client for Solscan wallet data with host fallback.

    Usage:
        client = SolscanClient()
        account = await client.get_account(address)
        txs = await client.get_transactions(address)
        await client.close()
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        primary_url: Optional[str] = None,
        secondary_url: Optional[str] = None,
        tx_limit: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
        hosts: Optional[List[SolscanHost]] = None,
    ):
        """
        Initialize Solscan client.

        Args:
            api_key: Solscan API key (from SOLSCAN_API_KEY env var if not provided)
            primary_url: Primary host (from SOLSCAN_PRIMARY_URL)
            secondary_url: Secondary host (from SOLSCAN_SECONDARY_URL)
            tx_limit: Transactions requested per wallet (from MEMESENSE_TX_HISTORY_LIMIT)
            timeout_seconds: Per-request timeout
            hosts: Explicit host list, overrides the URLs above
        """
        self.api_key = api_key or MemesenseConfig.get_solscan_api_key()
        self.tx_limit = tx_limit or MemesenseConfig.get_tx_history_limit()

        if hosts is None:
            hosts = [
                SolscanHost(primary_url or MemesenseConfig.get_solscan_primary_url(),
                            self.api_key, timeout_seconds),
                SolscanHost(secondary_url or MemesenseConfig.get_solscan_secondary_url(),
                            self.api_key, timeout_seconds),
            ]
        self.hosts = hosts

    async def close(self):
        for host in self.hosts:
            await host.close()

    async def get_account(self, address: str) -> Dict[str, Any]:
        """
        Fetch account info.

        Raises:
            AllProvidersFailed: If no host returned data
        """
        async def fetch(host: SolscanHost):
            payload = await host.get_account(address)
            if not isinstance(payload, dict):
                return None
            return payload

        providers = [
            Provider(host.name, lambda host=host: fetch(host))
            for host in self.hosts
        ]
        return await try_in_order(providers, "account")

    async def get_transactions(self, address: str) -> List[RawTransaction]:
        """
        Fetch recent transactions, newest first as returned by Solscan.

        Raises:
            AllProvidersFailed: If no host returned a transaction list
        """
        async def fetch(host: SolscanHost):
            payload = await host.get_transactions(address, self.tx_limit)
            if not isinstance(payload, list):
                return None
            return payload

        providers = [
            Provider(host.name, lambda host=host: fetch(host))
            for host in self.hosts
        ]
        records = await try_in_order(providers, "transactions")
        return [RawTransaction.from_api(r) for r in records if isinstance(r, dict)]

    async def get_tokens(self, address: str) -> List[Dict[str, Any]]:
        """
        Fetch SPL token balances.

        Raises:
            AllProvidersFailed: If no host returned a token list
        """
        async def fetch(host: SolscanHost):
            payload = await host.get_tokens(address)
            if not isinstance(payload, list):
                return None
            return payload

        providers = [
            Provider(host.name, lambda host=host: fetch(host))
            for host in self.hosts
        ]
        return await try_in_order(providers, "tokens")

    async def get_token_meta(self, token_address: str) -> Dict[str, Any]:
        """Fetch token metadata (name, symbol, supply, holders)."""
        providers = [
            Provider(host.name, lambda host=host: host.get_token_meta(token_address))
            for host in self.hosts
        ]
        return await try_in_order(providers, "token meta")
