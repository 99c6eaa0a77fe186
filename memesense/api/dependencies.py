"""
Service wiring for the HTTP layer.

ServiceContainer owns every upstream client, the response cache and the four
services built on them. One container is created per app and closed on
shutdown.
"""

import logging
from random import Random
from typing import List, Optional

from fastapi import Request

from ..config import MemesenseConfig
from ..core.analyzer import WalletAnalyzer
from ..core.birdeye_client import BirdeyeClient
from ..core.cache import ResponseCache
from ..core.chat import ChatService
from ..core.coingecko_client import CoinGeckoClient
from ..core.market import MarketAnalyzer
from ..core.openai_client import OpenAIClient
from ..core.social import SocialFeed
from ..core.solscan_client import SolscanClient
from ..core.twitter_client import BearerAuth, OAuth1Auth, TwitterClient

logger = logging.getLogger(__name__)


def build_twitter_clients() -> List[TwitterClient]:
    """Configured Twitter clients in priority order: bearer token, then OAuth1."""
    clients = []

    bearer = MemesenseConfig.get_twitter_bearer_token()
    if bearer:
        clients.append(TwitterClient(BearerAuth(bearer.strip())))

    oauth = MemesenseConfig.get_twitter_oauth_credentials()
    if oauth:
        clients.append(TwitterClient(OAuth1Auth(**oauth)))

    if not clients:
        logger.warning("No Twitter credentials configured - social feed will use generated tweets")
    return clients


class ServiceContainer:
    """Clients and services shared by all requests of one app instance."""

    def __init__(
        self,
        solscan: Optional[SolscanClient] = None,
        birdeye: Optional[BirdeyeClient] = None,
        coingecko: Optional[CoinGeckoClient] = None,
        openai_client: Optional[OpenAIClient] = None,
        twitter_clients: Optional[List[TwitterClient]] = None,
        cache: Optional[ResponseCache] = None,
        rng: Optional[Random] = None,
    ):
        self.rng = rng or Random()
        self.solscan = solscan or SolscanClient()
        self.birdeye = birdeye or BirdeyeClient()
        self.coingecko = coingecko or CoinGeckoClient()
        self.openai = openai_client or OpenAIClient()
        self.twitter_clients = build_twitter_clients() if twitter_clients is None else twitter_clients
        self.cache = cache or ResponseCache()

        self.wallet_analyzer = WalletAnalyzer(self.solscan, rng=self.rng)
        self.market = MarketAnalyzer(
            self.birdeye, self.coingecko, self.openai, self.solscan, self.cache, rng=self.rng,
        )
        self.social = SocialFeed(self.twitter_clients, rng=self.rng)
        self.chat = ChatService(self.openai, self.market, self.social, self.cache)

    async def close(self):
        """Close all upstream sessions."""
        await self.solscan.close()
        await self.birdeye.close()
        await self.coingecko.close()
        await self.openai.close()
        for client in self.twitter_clients:
            await client.close()


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container
