"""Tests for the ai-chat service."""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from memesense.core.chat import (
    CONTEXT_CACHE_KEY,
    GENERIC_PROMPT,
    MEME_ADVISOR_PROMPT,
    WALLET_ADVISOR_PROMPT,
    ChatService,
    system_prompt_for,
)
from memesense.core.errors import ConfigurationError, ValidationError


MARKET_RESULTS = {
    "marketSentiment": {"sentiment24h": {"sentiment": "bullish", "value": 72}, "source": "live"},
    "trendingTokens": {"trendingTokens": [{"ticker": "$BONK", "changePercentage": "+12.0%"}], "source": "live"},
    "marketMovers": {"marketMovers": [{"address": "9WzD...AWWM", "performance24h": "+8.1%"}], "source": "live"},
}


def make_market():
    market = Mock()

    async def analyze(query_type=None, **kwargs):
        return MARKET_RESULTS[query_type]

    market.analyze = AsyncMock(side_effect=analyze)
    return market


def make_social():
    social = Mock()
    social.handle = AsyncMock(return_value={
        "tweets": [{"username": "solana", "text": "Firedancer is live"}],
        "usingFallbackData": False,
    })
    return social


def make_openai(configured=True, reply="Consider taking partial profits."):
    openai_client = Mock(configured=configured)
    openai_client.complete = AsyncMock(return_value=reply)
    return openai_client


@pytest.fixture
def chat(memory_cache):
    return ChatService(make_openai(), make_market(), make_social(), memory_cache, chat_model="test-chat")


def test_system_prompt_by_type():
    assert system_prompt_for(None) == MEME_ADVISOR_PROMPT
    assert system_prompt_for("meme-advisor") == MEME_ADVISOR_PROMPT
    assert system_prompt_for("wallet-advisor") == WALLET_ADVISOR_PROMPT
    assert system_prompt_for("anything-else") == GENERIC_PROMPT


class TestHandle:

    def test_recent_tweets_action(self, chat):
        result = asyncio.run(chat.handle({"action": "getRecentTweets", "count": 5}))

        assert result["tweets"][0]["username"] == "solana"
        chat.social.handle.assert_awaited_once_with("getRecentTweets", count=5)
        chat.openai.complete.assert_not_awaited()

    @pytest.mark.parametrize("messages", [None, "hello", {"role": "user"}])
    def test_messages_must_be_a_list(self, chat, messages):
        with pytest.raises(ValidationError, match="'messages' must be an array"):
            asyncio.run(chat.handle({"messages": messages}))

    def test_requires_openai_key(self, memory_cache):
        chat = ChatService(make_openai(configured=False), make_market(), make_social(), memory_cache)

        with pytest.raises(ConfigurationError, match="Missing OpenAI API key"):
            asyncio.run(chat.handle({"messages": [{"role": "user", "content": "gm"}]}))

    def test_reply(self, chat):
        result = asyncio.run(chat.handle({
            "messages": [{"role": "user", "content": "Should I buy BONK?"}],
            "type": "wallet-advisor",
        }))

        assert result == {"role": "assistant", "content": "Consider taking partial profits."}

        args, kwargs = chat.openai.complete.call_args
        conversation = args[0]
        assert conversation[0]["role"] == "system"
        assert conversation[0]["content"].startswith(WALLET_ADVISOR_PROMPT)
        assert "Current market context" in conversation[0]["content"]
        assert "$BONK +12.0%" in conversation[0]["content"]
        assert "@solana: Firedancer is live" in conversation[0]["content"]
        assert conversation[1] == {"role": "user", "content": "Should I buy BONK?"}
        assert kwargs == {"model": "test-chat", "temperature": 0.7, "max_tokens": 800}


class TestMarketContext:

    def test_all_four_sources_fetched(self, chat):
        context = asyncio.run(chat.market_context())

        queried = sorted(c.kwargs["query_type"] for c in chat.market.analyze.call_args_list)
        assert queried == ["marketMovers", "marketSentiment", "trendingTokens"]
        chat.social.handle.assert_awaited_once()
        assert "bullish (72/100 over 24h)" in context

    def test_context_is_cached(self, chat, fake_clock):
        first = asyncio.run(chat.market_context())
        second = asyncio.run(chat.market_context())

        assert first == second
        assert chat.market.analyze.await_count == 3
        assert chat.cache.get_json(CONTEXT_CACHE_KEY) == first

        fake_clock.advance(301)
        asyncio.run(chat.market_context())
        assert chat.market.analyze.await_count == 6

    def test_failed_sources_are_skipped(self, memory_cache):
        market = Mock()
        market.analyze = AsyncMock(side_effect=RuntimeError("birdeye exploded"))
        chat = ChatService(make_openai(), market, make_social(), memory_cache)

        context = asyncio.run(chat.market_context())

        assert "Market sentiment" not in context
        assert context.startswith("Recent tweets:")

    def test_reply_without_context(self, memory_cache):
        market = Mock()
        market.analyze = AsyncMock(side_effect=RuntimeError("down"))
        social = Mock()
        social.handle = AsyncMock(side_effect=RuntimeError("down"))
        chat = ChatService(make_openai(), market, social, memory_cache)

        asyncio.run(chat.reply([{"role": "user", "content": "gm"}]))

        system = chat.openai.complete.call_args.args[0][0]["content"]
        assert system == MEME_ADVISOR_PROMPT
