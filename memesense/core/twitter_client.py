"""
Twitter API v2 client.

Two authentication modes are supported: app-only bearer token and OAuth1
user context (HMAC-SHA1 signed). When the API is unavailable the social
feed falls back to generate_fallback_tweets().
"""

import base64
import hashlib
import hmac
import logging
import secrets
import time
from datetime import datetime, timedelta, timezone
from random import Random
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import aiohttp

from .errors import UpstreamUnavailable
from .http_client import AsyncHTTPClient
from .models import Tweet

logger = logging.getLogger(__name__)


TWITTER_API_BASE = "https://api.twitter.com/2"


def _percent_encode(value: str) -> str:
    return quote(str(value), safe="~")


class BearerAuth:
    """App-only authentication."""

    name = "bearer"

    def __init__(self, token: str):
        self.token = token

    def header(self, method: str, url: str, params: Dict[str, Any]) -> str:
        return f"Bearer {self.token}"


class OAuth1Auth:
    """OAuth 1.0a user-context authentication (HMAC-SHA1)."""

    name = "oauth1"

    def __init__(self, consumer_key: str, consumer_secret: str, access_token: str, access_token_secret: str):
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.access_token = access_token
        self.access_token_secret = access_token_secret

    def signature(self, method: str, url: str, params: Dict[str, Any]) -> str:
        """
        Compute the OAuth1 signature over method, URL and all parameters.

        Args:
            method: HTTP method
            url: Request URL without query string
            params: Query parameters plus oauth_* parameters
        """
        encoded = sorted((_percent_encode(k), _percent_encode(v)) for k, v in params.items())
        param_string = "&".join(f"{k}={v}" for k, v in encoded)
        base_string = "&".join([method.upper(), _percent_encode(url), _percent_encode(param_string)])
        signing_key = f"{_percent_encode(self.consumer_secret)}&{_percent_encode(self.access_token_secret)}"
        digest = hmac.new(signing_key.encode(), base_string.encode(), hashlib.sha1).digest()
        return base64.b64encode(digest).decode()

    def header(
        self,
        method: str,
        url: str,
        params: Dict[str, Any],
        nonce: Optional[str] = None,
        timestamp: Optional[int] = None,
    ) -> str:
        oauth_params = {
            "oauth_consumer_key": self.consumer_key,
            "oauth_nonce": nonce or secrets.token_hex(16),
            "oauth_signature_method": "HMAC-SHA1",
            "oauth_timestamp": str(timestamp or int(time.time())),
            "oauth_token": self.access_token,
            "oauth_version": "1.0",
        }
        all_params = dict(params)
        all_params.update(oauth_params)
        oauth_params["oauth_signature"] = self.signature(method, url, all_params)
        return "OAuth " + ", ".join(
            f'{_percent_encode(k)}="{_percent_encode(v)}"' for k, v in sorted(oauth_params.items())
        )


class TwitterClient(AsyncHTTPClient):
    """Client for Twitter API v2 search and user timelines."""

    def __init__(
        self,
        auth,
        timeout_seconds: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        super().__init__(TWITTER_API_BASE, timeout_seconds=timeout_seconds, session=session)
        self.auth = auth
        self.name = f"twitter:{auth.name}"

    async def _request(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        params = {k: str(v) for k, v in params.items()}
        url = f"{self.base_url}{path}"
        headers = {"Authorization": self.auth.header("GET", url, params)}
        return await self._get_json(path, params=params, headers=headers)

    async def search_recent(self, query: str, count: int = 10, max_id: Optional[str] = None) -> List[Tweet]:
        """
        Search tweets from the last seven days.

        Args:
            query: Twitter search query
            count: Tweets wanted (the API minimum of 10 is requested, then trimmed)
            max_id: Only return tweets older than this id
        """
        params = {
            "query": query,
            "max_results": max(10, min(count, 100)),
            "tweet.fields": "created_at,public_metrics",
            "expansions": "author_id",
            "user.fields": "username",
        }
        if max_id:
            params["until_id"] = max_id

        data = await self._request("/tweets/search/recent", params)
        if not isinstance(data.get("data"), list):
            raise UpstreamUnavailable(f"{self.base_url}/tweets/search/recent", reason="invalid response")

        users = {u.get("id"): u.get("username") for u in (data.get("includes") or {}).get("users", [])}
        return [
            _tweet_from_api(t, users.get(t.get("author_id")))
            for t in data["data"]
        ][:count]

    async def get_user_tweets(self, username: str, count: int = 10) -> List[Tweet]:
        """Get the most recent original tweets of a user."""
        user = await self._request(f"/users/by/username/{username}", {"user.fields": "description"})
        user_id = (user.get("data") or {}).get("id")
        if not user_id:
            raise UpstreamUnavailable(f"{self.base_url}/users/by/username/{username}", reason="user not found")

        data = await self._request(f"/users/{user_id}/tweets", {
            "max_results": max(5, min(count, 100)),
            "tweet.fields": "created_at,public_metrics",
            "exclude": "retweets,replies",
        })
        if not isinstance(data.get("data"), list):
            raise UpstreamUnavailable(f"{self.base_url}/users/{user_id}/tweets", reason="invalid response")

        return [_tweet_from_api(t, username) for t in data["data"]][:count]


def _tweet_from_api(data: Dict[str, Any], username: Optional[str]) -> Tweet:
    metrics = data.get("public_metrics") or {}
    tweet_id = str(data.get("id", ""))
    return Tweet(
        id=tweet_id,
        text=data.get("text", ""),
        created_at=data.get("created_at", ""),
        username=username,
        likes=int(metrics.get("like_count") or 0),
        retweets=int(metrics.get("retweet_count") or 0),
        url=f"https://twitter.com/{username}/status/{tweet_id}" if username else None,
    )


# ============================================================================
# Fallback tweet generation
# ============================================================================

INFLUENCERS = [
    "elonmusk", "VitalikButerin", "cz_binance", "solana", "aeyakovenko",
    "punk6529", "cobie", "MustStopMurad", "blknoiz06",
]

TWEET_TEMPLATES = [
    "The future of {coin} looks very promising with the recent developments in {tech}. #Crypto #Solana",
    "Just bought more {coin}! The technical indicators are showing a potential breakout soon. 📈",
    "Market is {sentiment} today. Keep an eye on {coin}, it's showing interesting movement.",
    "{coin} integration with {tech} could be a game changer for the ecosystem. Thoughts?",
    "The {coin} community is one of the strongest in crypto. Building through the bear market! 💪",
    "My analysis on {coin} price action: we might see resistance at {price}, but support is holding strong.",
    "New {tech} update coming to {coin} next month. This could significantly improve scalability.",
    "Comparing {coin} and {other_coin}: which one has better tokenomics for the long term?",
    "Whale alert: Large {coin} transaction spotted on-chain. Something brewing? 👀",
    "{coin} volume is up {percent}% in the last 24h. The market is noticing something.",
    "Just read the {coin} whitepaper again. Still bullish on their approach to {tech}.",
]

FALLBACK_COINS = ["SOL", "BONK", "WIF", "JUP", "POPCAT", "JTO", "PYTH", "RAY", "BOME"]
FALLBACK_OTHER_COINS = ["ETH", "BTC", "LINK", "AVAX", "DOGE"]
FALLBACK_TECH = ["DePIN", "DeFi", "token extensions", "compressed NFTs", "Firedancer", "cross-chain bridges"]
FALLBACK_SENTIMENT = ["bullish", "bearish", "volatile", "consolidating", "uncertain"]
FALLBACK_PRICES = ["$0.50", "$1", "$5", "$20", "$100", "$250"]
FALLBACK_PERCENTS = ["15", "30", "50", "75", "100", "200"]


def generate_fallback_tweets(
    count: int = 10,
    rng: Optional[Random] = None,
    now: Optional[datetime] = None,
) -> List[Tweet]:
    """
    Generate plausible crypto tweets from the last 24 hours, newest first.

    Args:
        count: Number of tweets
        rng: Random source (a fresh Random when not given)
        now: Reference time (current UTC time when not given)
    """
    rng = rng or Random()
    now = now or datetime.now(timezone.utc)

    tweets = []
    for _ in range(count):
        username = rng.choice(INFLUENCERS)
        text = rng.choice(TWEET_TEMPLATES).format(
            coin=rng.choice(FALLBACK_COINS),
            other_coin=rng.choice(FALLBACK_OTHER_COINS),
            tech=rng.choice(FALLBACK_TECH),
            sentiment=rng.choice(FALLBACK_SENTIMENT),
            price=rng.choice(FALLBACK_PRICES),
            percent=rng.choice(FALLBACK_PERCENTS),
        )
        created_at = now - timedelta(minutes=rng.uniform(0, 1440))
        likes = rng.randint(0, 9999)
        retweets = int(likes * rng.uniform(0.1, 0.4))
        tweet_id = str(1_500_000_000_000_000_000 + rng.randint(0, 99_999_999_999))
        tweets.append(Tweet(
            id=tweet_id,
            text=text,
            created_at=created_at.strftime("%Y-%m-%dT%H:%M:%S.000Z"),
            username=username,
            likes=likes,
            retweets=retweets,
            url=f"https://twitter.com/{username}/status/{tweet_id}",
        ))

    tweets.sort(key=lambda t: t.created_at, reverse=True)
    return tweets
