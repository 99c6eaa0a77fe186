"""
Market analysis behind POST /analyze-market.

Query types:
- marketSentiment: CoinGecko meme-coin markets + Birdeye new listings
- marketMovers: Birdeye top traders
- trendingTokens: Birdeye trending, then CoinGecko trending
- pumpFunData / launchMetrics: Birdeye new listings grouped per day
- anything else: OpenAI analysis with keyword sentiment

Results are cached per (queryType, timeframe, tokenTicker) for the configured
TTL. Every result carries source "live" or "fallback"; fallback results are
generated when the upstream data is unavailable.
"""

import logging
import string
from collections import Counter
from datetime import datetime, timedelta, timezone
from random import Random
from typing import Any, Dict, List, Optional

from ..config import MemesenseConfig
from .birdeye_client import BirdeyeClient
from .cache import ResponseCache
from .coingecko_client import CoinGeckoClient
from .errors import AllProvidersFailed, ConfigurationError, UpstreamUnavailable, ValidationError
from .openai_client import OpenAIClient
from .providers import Provider, try_in_order
from .service_metrics import get_metrics
from .solscan_client import SolscanClient

logger = logging.getLogger(__name__)


PERIODS = [("24h", 1), ("7d", 7), ("30d", 30)]
SOL_PRICE_USD_ESTIMATE = 150.0
GRADUATION_LIQUIDITY_USD = 50_000
BASE58_ALPHABET = "".join(c for c in string.digits + string.ascii_letters if c not in "0OIl")

BULLISH_KEYWORDS = ("bullish", "positive", "uptrend", "growth")
BEARISH_KEYWORDS = ("bearish", "negative", "downtrend", "decline")

SYSTEM_PROMPT_BASE = "You are a sophisticated AI analyst specializing in Solana memecoins and DeFi. "

FALLBACK_TRENDING = [
    ("Bonk", "BONK"), ("dogwifhat", "WIF"), ("Popcat", "POPCAT"), ("Book of Meme", "BOME"),
    ("Jupiter", "JUP"), ("Cat in a Dogs World", "MEW"), ("Myro", "MYRO"), ("Slerf", "SLERF"),
]

CANNED_ANALYSIS = (
    "Live AI analysis is temporarily unavailable. Solana memecoin markets remain highly "
    "volatile: size positions conservatively, check liquidity and holder concentration "
    "before entering, and take partial profits on strong moves."
)


def keyword_sentiment(text: str) -> str:
    """Classify free text as Bullish, Bearish or Neutral by keyword."""
    lowered = text.lower()
    if any(k in lowered for k in BULLISH_KEYWORDS):
        return "Bullish"
    if any(k in lowered for k in BEARISH_KEYWORDS):
        return "Bearish"
    return "Neutral"


def format_percent(value: float) -> str:
    """Signed percentage with one decimal, e.g. +12.3% or -4.0%."""
    return f"{value:+.1f}%"


def shorten_address(address: str) -> str:
    if len(address) <= 8:
        return address
    return f"{address[:4]}...{address[-4:]}"


def _sentiment_label(value: int) -> str:
    if value >= 60:
        return "bullish"
    if value <= 40:
        return "bearish"
    return "neutral"


def _clamp_int(value: float, low: int = 0, high: int = 100) -> int:
    return int(max(low, min(high, round(value))))


def _parse_listing_time(value: Any) -> Optional[datetime]:
    """Birdeye reports listing time as epoch seconds or an ISO string."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class MarketAnalyzer:
    """
    Serves the analyze-market query types.

    Usage:
        market = MarketAnalyzer(birdeye, coingecko, openai_client, solscan, cache)
        result = await market.analyze(query_type="trendingTokens")
    """

    def __init__(
        self,
        birdeye: BirdeyeClient,
        coingecko: CoinGeckoClient,
        openai_client: OpenAIClient,
        solscan: SolscanClient,
        cache: ResponseCache,
        rng: Optional[Random] = None,
        analysis_model: Optional[str] = None,
    ):
        self.birdeye = birdeye
        self.coingecko = coingecko
        self.openai = openai_client
        self.solscan = solscan
        self.cache = cache
        self.rng = rng or Random()
        self.analysis_model = analysis_model or MemesenseConfig.get_analysis_model()

    @staticmethod
    def cache_key(query_type: Optional[str], timeframe: Optional[str], token_ticker: Optional[str]) -> str:
        return f"market:{query_type or ''}:{timeframe or ''}:{token_ticker or ''}"

    async def analyze(
        self,
        timeframe: Optional[str] = None,
        token_ticker: Optional[str] = None,
        query_type: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Answer one analyze-market request, from cache when possible.

        Raises:
            ValidationError: If timeframe, token_ticker and query_type are all empty
            ConfigurationError: If an AI analysis is requested without an OpenAI key
        """
        if not timeframe and not token_ticker and not query_type:
            raise ValidationError("Missing required parameters")

        key = self.cache_key(query_type, timeframe, token_ticker)
        cached = self.cache.get_json(key)
        if cached is not None:
            return cached

        now = now or datetime.now(timezone.utc)
        if query_type == "marketSentiment":
            result = await self.market_sentiment(timeframe, now)
        elif query_type == "marketMovers":
            result = await self.market_movers()
        elif query_type == "trendingTokens":
            result = await self.trending_tokens()
        elif query_type in ("pumpFunData", "launchMetrics"):
            result = await self.launch_metrics(now)
        else:
            result = await self.ai_analysis(query_type, timeframe, token_ticker)

        if result.get("source") == "fallback":
            logger.info(f"Serving generated data for analyze-market {query_type or 'general'}")
            get_metrics().record_fallback("analyze-market")

        self.cache.set_json(key, result)
        return result

    # ========================================================================
    # marketSentiment
    # ========================================================================

    async def market_sentiment(self, timeframe: Optional[str], now: datetime) -> Dict[str, Any]:
        try:
            markets = await self.coingecko.get_meme_markets()
        except UpstreamUnavailable as e:
            logger.warning(f"CoinGecko markets unavailable: {e}")
            markets = None

        try:
            listings = await self.birdeye.get_new_listings()
        except UpstreamUnavailable as e:
            logger.warning(f"Birdeye new listings unavailable: {e}")
            listings = []

        if markets:
            snapshots = {
                period: self._sentiment_snapshot(period, days, markets, listings, now)
                for period, days in PERIODS
            }
            source = "live"
        else:
            snapshots = {period: self._generated_snapshot(period, days) for period, days in PERIODS}
            source = "fallback"

        analysis = None
        if self.openai.configured:
            summary = ", ".join(
                f"{p}: {s['value']}/100 {s['sentiment']} ({s['profitable_tokens_percent']}% of tokens up)"
                for p, s in snapshots.items()
            )
            try:
                analysis = await self.openai.complete(
                    [
                        {"role": "system", "content": SYSTEM_PROMPT_BASE + (
                            "Analyze the current memecoin market sentiment and provide a detailed analysis "
                            "with key metrics and observations. Determine if the market is bullish or "
                            "bearish and explain your reasoning."
                        )},
                        {"role": "user", "content": f"Sentiment snapshots: {summary}"},
                    ],
                    model=self.analysis_model,
                )
            except UpstreamUnavailable as e:
                logger.warning(f"Sentiment summary unavailable: {e}")

        return {
            "sentiment": snapshots["24h"]["sentiment"],
            "sentiment24h": snapshots["24h"],
            "sentiment7d": snapshots["7d"],
            "sentiment30d": snapshots["30d"],
            "analysis": analysis,
            "timeframe": timeframe or "current",
            "source": source,
        }

    @staticmethod
    def _sentiment_snapshot(
        period: str,
        days: int,
        markets: List[Dict[str, Any]],
        listings: List[Dict[str, Any]],
        now: datetime,
    ) -> Dict[str, Any]:
        changes = [m[f"price_change_{period}"] for m in markets if m.get(f"price_change_{period}") is not None]
        average = sum(changes) / len(changes) if changes else 0.0
        value = _clamp_int(50 + average)
        profitable = round(100 * sum(1 for c in changes if c > 0) / len(changes)) if changes else 0

        cutoff = now - timedelta(days=days)
        launched = 0
        for listing in listings:
            listed_at = _parse_listing_time(listing.get("listed_at"))
            if listed_at is not None and listed_at >= cutoff:
                launched += 1

        return {
            "period": period,
            "value": value,
            "sentiment": _sentiment_label(value),
            "tokens_launched": launched,
            "tokens_over_100k": sum(1 for m in markets if m["market_cap"] >= 100_000),
            "tokens_over_1m": sum(1 for m in markets if m["market_cap"] >= 1_000_000),
            "profitable_tokens_percent": profitable,
        }

    def _generated_snapshot(self, period: str, days: int) -> Dict[str, Any]:
        value = self.rng.randint(30, 80)
        launched = self.rng.randint(800, 1500) * days
        over_100k = int(launched * self.rng.uniform(0.02, 0.06))
        return {
            "period": period,
            "value": value,
            "sentiment": _sentiment_label(value),
            "tokens_launched": launched,
            "tokens_over_100k": over_100k,
            "tokens_over_1m": int(over_100k * self.rng.uniform(0.05, 0.2)),
            "profitable_tokens_percent": self.rng.randint(10, 45),
        }

    # ========================================================================
    # marketMovers
    # ========================================================================

    async def market_movers(self) -> Dict[str, Any]:
        try:
            today = await self.birdeye.get_top_gainers("today")
        except UpstreamUnavailable as e:
            logger.warning(f"Birdeye top traders unavailable: {e}")
            today = []

        if len(today) < 5:
            return {"marketMovers": self._generated_movers(), "source": "fallback"}

        try:
            week = {t["address"]: t for t in await self.birdeye.get_top_gainers("1W")}
        except UpstreamUnavailable as e:
            logger.warning(f"Birdeye weekly top traders unavailable: {e}")
            week = {}

        sol_price = await self._sol_price()
        movers = []
        for index, trader in enumerate(today[:10], start=1):
            perf_24h = self._performance(trader)
            weekly = week.get(trader["address"])
            movers.append({
                "id": index,
                "address": shorten_address(trader["address"]),
                "performance24h": format_percent(perf_24h),
                "performance7d": format_percent(self._performance(weekly)) if weekly else "n/a",
                "performance30d": "n/a",
                "volume": f"{trader['volume'] / (sol_price or SOL_PRICE_USD_ESTIMATE):,.0f} SOL",
                "trades": trader["trade_count"],
                "profitable": f"{_clamp_int(50 + perf_24h / 2)}%",
            })
        result = {"marketMovers": movers, "source": "live"}
        if sol_price is None:
            result["estimatedFields"] = ["volume"]
        return result

    async def _sol_price(self) -> Optional[float]:
        """Live SOL/USD price, None when CoinGecko has none."""
        try:
            price = await self.coingecko.get_sol_price()
        except UpstreamUnavailable as e:
            logger.warning(f"CoinGecko SOL price unavailable: {e}")
            return None
        return price if price and price > 0 else None

    @staticmethod
    def _performance(trader: Dict[str, Any]) -> float:
        """PnL as a percentage of traded volume."""
        if not trader["volume"]:
            return 0.0
        return trader["pnl"] / trader["volume"] * 100

    def _random_address(self) -> str:
        return "".join(self.rng.choice(BASE58_ALPHABET) for _ in range(44))

    def _generated_movers(self) -> List[Dict[str, Any]]:
        movers = []
        for index in range(1, self.rng.randint(5, 10) + 1):
            movers.append({
                "id": index,
                "address": shorten_address(self._random_address()),
                "performance24h": format_percent(self.rng.uniform(-30, 80)),
                "performance7d": format_percent(self.rng.uniform(-50, 200)),
                "performance30d": format_percent(self.rng.uniform(-70, 500)),
                "volume": f"{self.rng.randint(10_000, 900_000):,} SOL",
                "trades": self.rng.randint(50, 2000),
                "profitable": f"{self.rng.randint(40, 90)}%",
            })
        return movers

    # ========================================================================
    # trendingTokens
    # ========================================================================

    async def trending_tokens(self) -> Dict[str, Any]:
        async def from_birdeye():
            return await self.birdeye.get_trending_tokens(10) or None

        async def from_coingecko():
            return await self.coingecko.get_trending() or None

        try:
            tokens = await try_in_order(
                [Provider("birdeye", from_birdeye), Provider("coingecko", from_coingecko)],
                "trending tokens",
            )
        except AllProvidersFailed:
            return {"trendingTokens": self._generated_trending(), "source": "fallback"}

        trending = []
        for rank, token in enumerate(tokens[:10], start=1):
            change = float(token.get("price_change_24h") or 0)
            # Mention counts are estimated from rank and volume, no social API is queried
            mentions = max(100, int(token.get("volume_24h", 0) / 1000)) if token.get("volume_24h") else (11 - rank) * 1000
            trending.append({
                "name": token["name"],
                "ticker": f"${token['symbol']}",
                "address": token.get("address", ""),
                "price": token.get("price"),
                "sentimentScore": _clamp_int(50 + change),
                "changePercentage": format_percent(change),
                "socialMentions": mentions,
                "mentionChange": format_percent(change * 1.5),
            })
        return {"trendingTokens": trending, "source": "live", "estimatedFields": ["socialMentions", "mentionChange"]}

    def _generated_trending(self) -> List[Dict[str, Any]]:
        tokens = []
        for name, symbol in self.rng.sample(FALLBACK_TRENDING, 5):
            change = self.rng.uniform(-20, 60)
            tokens.append({
                "name": name,
                "ticker": f"${symbol}",
                "address": "",
                "price": None,
                "sentimentScore": _clamp_int(50 + change),
                "changePercentage": format_percent(change),
                "socialMentions": self.rng.randint(500, 25_000),
                "mentionChange": format_percent(self.rng.uniform(-30, 150)),
            })
        return tokens

    # ========================================================================
    # pumpFunData / launchMetrics
    # ========================================================================

    async def launch_metrics(self, now: datetime) -> Dict[str, Any]:
        try:
            listings = await self.birdeye.get_new_listings()
        except UpstreamUnavailable as e:
            logger.warning(f"Birdeye new listings unavailable: {e}")
            listings = []

        dated = []
        for listing in listings:
            listed_at = _parse_listing_time(listing.get("listed_at"))
            if listed_at is not None:
                dated.append((listed_at.strftime("%Y-%m-%d"), listing))

        if not dated:
            return self._generated_launch_metrics(now)

        launches = Counter(day for day, _ in dated)
        graduated = Counter(day for day, l in dated if l["liquidity"] >= GRADUATION_LIQUIDITY_USD)
        days = [(now - timedelta(days=offset)).strftime("%Y-%m-%d") for offset in range(6, -1, -1)]
        daily = [{"date": d, "launches": launches.get(d, 0), "graduated": graduated.get(d, 0)} for d in days]

        total = sum(launches.values())
        return {
            "tokenCount": total,
            "weekChange": self._week_change(daily),
            "dailyLaunches": daily,
            "graduationRate": f"{100 * sum(graduated.values()) / total:.1f}%",
            "source": "live",
        }

    @staticmethod
    def _week_change(daily: List[Dict[str, Any]]) -> str:
        """Latest day against the average of the six days before it."""
        earlier = [d["launches"] for d in daily[:-1]]
        baseline = sum(earlier) / len(earlier) if earlier else 0
        if not baseline:
            return format_percent(0.0)
        return format_percent((daily[-1]["launches"] - baseline) / baseline * 100)

    def _generated_launch_metrics(self, now: datetime) -> Dict[str, Any]:
        daily = []
        for offset in range(6, -1, -1):
            launches = self.rng.randint(8_000, 30_000)
            daily.append({
                "date": (now - timedelta(days=offset)).strftime("%Y-%m-%d"),
                "launches": launches,
                "graduated": int(launches * self.rng.uniform(0.005, 0.015)),
            })
        total = sum(d["launches"] for d in daily)
        graduated = sum(d["graduated"] for d in daily)
        return {
            "tokenCount": total,
            "weekChange": self._week_change(daily),
            "dailyLaunches": daily,
            "graduationRate": f"{100 * graduated / total:.1f}%",
            "source": "fallback",
        }

    # ========================================================================
    # AI analysis (tokenAnalysis, walletFeedback, general)
    # ========================================================================

    @staticmethod
    def system_prompt(query_type: Optional[str], token_ticker: Optional[str]) -> str:
        if query_type == "tokenAnalysis":
            return SYSTEM_PROMPT_BASE + (
                f"Analyze the memecoin {token_ticker} and provide insights on its performance, community "
                "sentiment, and potential outlook. Include specific metrics when possible."
            )
        if query_type == "walletFeedback":
            return SYSTEM_PROMPT_BASE + (
                "Provide personalized trading advice based on the wallet's trading history and pattern. "
                "Offer actionable insights to improve trading performance."
            )
        return SYSTEM_PROMPT_BASE + (
            "Provide a general overview of the current Solana memecoin market conditions including "
            "trending tokens, sentiment, and key metrics."
        )

    async def ai_analysis(
        self,
        query_type: Optional[str],
        timeframe: Optional[str],
        token_ticker: Optional[str],
    ) -> Dict[str, Any]:
        if not self.openai.configured:
            raise ConfigurationError("Missing OpenAI API key")

        context = ""
        if token_ticker:
            try:
                meta = await self.solscan.get_token_meta(token_ticker)
                context += f"Token Info: {meta}\n"
            except AllProvidersFailed as e:
                logger.warning(f"Token meta unavailable for {token_ticker}: {e}")
        if timeframe:
            context += f"Analyzing market trends over {timeframe} timeframe.\n"

        try:
            text = await self.openai.complete(
                [
                    {"role": "system", "content": self.system_prompt(query_type, token_ticker)},
                    {"role": "user", "content": f"{context}\n\nProvide an analysis based on the available information."},
                ],
                model=self.analysis_model,
            )
            source = "live"
        except UpstreamUnavailable as e:
            logger.warning(f"AI market analysis unavailable: {e}")
            text = CANNED_ANALYSIS
            source = "fallback"

        return {
            "analysis": text,
            "sentiment": keyword_sentiment(text),
            "timeframe": timeframe or "current",
            "source": source,
        }
