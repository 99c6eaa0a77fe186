"""
Social feed behind POST /twitter-api.

Twitter clients are tried in order (bearer token first, then OAuth1 user
context). Any failure, including an unknown action or a missing query,
yields generated tweets with usingFallbackData set.
"""

import asyncio
import logging
import math
from random import Random
from typing import Any, Dict, List, Optional

from .errors import AllProvidersFailed, UpstreamUnavailable
from .models import Tweet
from .providers import Provider, try_in_order
from .service_metrics import get_metrics
from .twitter_client import TwitterClient, generate_fallback_tweets

logger = logging.getLogger(__name__)


DEFAULT_COUNT = 10
MAX_COUNT = 25
DEFAULT_QUERY = "crypto OR solana OR bitcoin OR ethereum"


class SocialFeedError(Exception):
    """Request could not be served from the Twitter API (bad input)."""


def _normalize_count(count: Any) -> int:
    try:
        value = int(count)
    except (TypeError, ValueError):
        value = DEFAULT_COUNT
    return max(1, min(value, MAX_COUNT))


class SocialFeed:
    """
    Serves the twitter-api actions: searchTweets, getUserTweets, getRecentTweets.

    Usage:
        feed = SocialFeed([TwitterClient(BearerAuth(token))])
        result = await feed.handle("getRecentTweets", usernames=["solana"])
    """

    def __init__(self, clients: List[TwitterClient], rng: Optional[Random] = None):
        """
        Args:
            clients: Configured Twitter clients in priority order (may be empty)
            rng: Random source for generated tweets
        """
        self.clients = clients
        self.rng = rng or Random()

    async def handle(
        self,
        action: Optional[str],
        query: Optional[str] = None,
        count: Any = DEFAULT_COUNT,
        max_id: Optional[str] = None,
        usernames: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """
        Run one action.

        Returns:
            {"tweets": [...], "usingFallbackData": bool}
        """
        request_count = _normalize_count(count)

        try:
            tweets = await self._dispatch(action, query, request_count, max_id, usernames)
            using_fallback = False
        except (SocialFeedError, UpstreamUnavailable) as e:
            logger.warning(f"Twitter API unavailable for {action}, using generated tweets: {e}")
            get_metrics().record_fallback("twitter-api")
            tweets = generate_fallback_tweets(request_count, self.rng)
            using_fallback = True

        return {
            "tweets": [t.to_dict() for t in tweets],
            "usingFallbackData": using_fallback,
        }

    def fallback(self, count: int = DEFAULT_COUNT) -> List[Dict[str, Any]]:
        """Generated tweets as JSON-ready dicts."""
        return [t.to_dict() for t in generate_fallback_tweets(count, self.rng)]

    async def _dispatch(self, action, query, count, max_id, usernames) -> List[Tweet]:
        if action == "searchTweets":
            if not query:
                raise SocialFeedError("Query parameter is required for searching tweets")
            return await self.search(query, count, max_id)

        if action == "getUserTweets":
            if not query:
                raise SocialFeedError("Twitter username is required")
            return await self.user_tweets(query, count)

        if action == "getRecentTweets":
            if isinstance(usernames, list) and usernames:
                return await self.multi_user_tweets(usernames, math.ceil(count / len(usernames)))
            return await self.search(query or DEFAULT_QUERY, count, max_id)

        raise SocialFeedError(f"Unknown action: {action}")

    async def search(self, query: str, count: int, max_id: Optional[str] = None) -> List[Tweet]:
        providers = [
            Provider(c.name, lambda c=c: c.search_recent(query, count, max_id))
            for c in self.clients
        ]
        return await try_in_order(providers, "tweet search")

    async def user_tweets(self, username: str, count: int) -> List[Tweet]:
        providers = [
            Provider(c.name, lambda c=c: c.get_user_tweets(username, count))
            for c in self.clients
        ]
        return await try_in_order(providers, f"tweets of {username}")

    async def multi_user_tweets(self, usernames: List[str], per_user: int) -> List[Tweet]:
        """
        Fetch several timelines concurrently and merge them newest first.

        Users whose fetch failed are dropped. At most 2 * per_user tweets are
        returned.
        """
        results = await asyncio.gather(
            *(self.user_tweets(u, per_user) for u in usernames),
            return_exceptions=True,
        )

        tweets: List[Tweet] = []
        failed = []
        for username, result in zip(usernames, results):
            if isinstance(result, AllProvidersFailed):
                logger.warning(f"Failed to fetch tweets for {username}: {result}")
                failed.append(username)
                continue
            if isinstance(result, BaseException):
                raise result
            tweets.extend(result)

        if len(failed) == len(usernames):
            raise AllProvidersFailed("recent tweets", [f"{u}: failed" for u in failed])

        tweets.sort(key=lambda t: t.created_at, reverse=True)
        return tweets[:per_user * 2]
