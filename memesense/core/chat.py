"""
AI chat behind POST /ai-chat.

Before each completion the service gathers live market context (sentiment,
trending tokens, market movers, recent tweets) concurrently and appends it
to the system prompt. The rendered context block is cached for the
configured TTL.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from ..config import MemesenseConfig
from .cache import ResponseCache
from .errors import ConfigurationError, ValidationError
from .market import MarketAnalyzer
from .openai_client import OpenAIClient
from .social import SocialFeed

logger = logging.getLogger(__name__)


CONTEXT_CACHE_KEY = "chat:context"

MEME_ADVISOR_PROMPT = """You are Memesense AI, a specialized assistant for Solana memecoin investors and traders.
You have deep knowledge of:
- Solana memecoins and tokens
- Trading strategies for volatile assets
- On-chain analytics
- Market sentiment analysis
- Risk management techniques
- Current trends in the Solana ecosystem

Provide insightful, concise responses that help users understand the memecoin market and make better trading decisions.
When appropriate, suggest risk management strategies and remind users about the high-risk nature of memecoins.
If asked about specific tokens, provide analysis but avoid making specific price predictions or financial advice."""

WALLET_ADVISOR_PROMPT = """You are Memesense AI's Wallet Advisor, a specialized assistant for analyzing Solana wallet trading patterns.
You help users understand their trading behaviors, identify strengths and weaknesses, and suggest improvements.
Your analysis should focus on:
- Trading frequency patterns
- Asset diversification
- Entry and exit timing
- Risk management
- Profit-taking strategies
- Common behavioral biases

Provide personalized, actionable advice based on the user's questions and trading history.
Avoid making specific financial predictions or giving financial advice that could be construed as promises."""

GENERIC_PROMPT = "You are a helpful AI assistant specializing in Solana cryptocurrency and memecoins."


def system_prompt_for(chat_type: Optional[str]) -> str:
    if chat_type in (None, "meme-advisor"):
        return MEME_ADVISOR_PROMPT
    if chat_type == "wallet-advisor":
        return WALLET_ADVISOR_PROMPT
    return GENERIC_PROMPT


class ChatService:
    """
    Answers ai-chat requests.

    Usage:
        chat = ChatService(openai_client, market, social, cache)
        reply = await chat.handle({"messages": [{"role": "user", "content": "gm"}]})
    """

    def __init__(
        self,
        openai_client: OpenAIClient,
        market: MarketAnalyzer,
        social: SocialFeed,
        cache: ResponseCache,
        chat_model: Optional[str] = None,
    ):
        self.openai = openai_client
        self.market = market
        self.social = social
        self.cache = cache
        self.chat_model = chat_model or MemesenseConfig.get_chat_model()

    async def handle(self, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        Dispatch one ai-chat request body.

        Raises:
            ValidationError: If messages is not a list
            ConfigurationError: If no OpenAI key is configured
            UpstreamUnavailable: If the completion call failed
        """
        if body.get("action") == "getRecentTweets":
            return await self.social.handle("getRecentTweets", count=body.get("count", 10))

        messages = body.get("messages")
        if not isinstance(messages, list):
            raise ValidationError("Invalid request format. 'messages' must be an array.")

        if not self.openai.configured:
            raise ConfigurationError("Missing OpenAI API key")

        return await self.reply(messages, body.get("type"))

    async def reply(self, messages: List[Dict[str, Any]], chat_type: Optional[str] = None) -> Dict[str, str]:
        system_prompt = system_prompt_for(chat_type)
        context = await self.market_context()
        if context:
            system_prompt += "\n\nCurrent market context:\n" + context

        conversation = [{"role": "system", "content": system_prompt}]
        conversation.extend(
            {"role": m.get("role", "user"), "content": str(m.get("content", ""))}
            for m in messages
            if isinstance(m, dict)
        )

        content = await self.openai.complete(
            conversation,
            model=self.chat_model,
            temperature=0.7,
            max_tokens=800,
        )
        return {"role": "assistant", "content": content}

    async def market_context(self) -> str:
        """Render the live context block, from cache when fresh."""
        cached = self.cache.get_json(CONTEXT_CACHE_KEY)
        if cached is not None:
            return cached

        labels = ["Market sentiment", "Trending tokens", "Market movers", "Recent tweets"]
        results = await asyncio.gather(
            self.market.analyze(query_type="marketSentiment"),
            self.market.analyze(query_type="trendingTokens"),
            self.market.analyze(query_type="marketMovers"),
            self.social.handle("getRecentTweets", count=5),
            return_exceptions=True,
        )

        sections = []
        for label, result in zip(labels, results):
            if isinstance(result, Exception):
                logger.warning(f"Chat context source '{label}' failed: {result}")
                continue
            sections.append(self._render(label, result))

        context = "\n".join(s for s in sections if s)
        self.cache.set_json(CONTEXT_CACHE_KEY, context)
        return context

    @staticmethod
    def _render(label: str, result: Dict[str, Any]) -> str:
        if label == "Market sentiment":
            snap = result.get("sentiment24h") or {}
            return f"{label}: {snap.get('sentiment', 'neutral')} ({snap.get('value', 50)}/100 over 24h)"
        if label == "Trending tokens":
            tokens = result.get("trendingTokens") or []
            return f"{label}: " + ", ".join(
                f"{t['ticker']} {t['changePercentage']}" for t in tokens[:5]
            )
        if label == "Market movers":
            movers = result.get("marketMovers") or []
            return f"{label}: " + ", ".join(
                f"{m['address']} {m['performance24h']}" for m in movers[:5]
            )
        tweets = result.get("tweets") or []
        return f"{label}:\n" + "\n".join(
            f"- @{t.get('username')}: {t.get('text')}" for t in tweets[:5]
        )
