"""Chat completions wrapper on the openai SDK."""

import logging
from typing import Dict, List, Optional

import openai
from openai import AsyncOpenAI

from ..config import MemesenseConfig
from .errors import ConfigurationError, UpstreamUnavailable

logger = logging.getLogger(__name__)


class OpenAIClient:
    """
    Thin async wrapper around chat.completions.

    The SDK client is created lazily so a service without OPENAI_API_KEY can
    still start; the missing key surfaces as ConfigurationError on first use.
    """

    name = "openai"

    def __init__(self, api_key: Optional[str] = None, timeout_seconds: Optional[float] = None):
        self.api_key = api_key or MemesenseConfig.get_openai_api_key()
        self.timeout_seconds = timeout_seconds or MemesenseConfig.get_http_timeout() * 3
        self._client: Optional[AsyncOpenAI] = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> AsyncOpenAI:
        if not self.api_key:
            raise ConfigurationError("Missing OpenAI API key")
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key, timeout=self.timeout_seconds)
        return self._client

    async def close(self):
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def complete(
        self,
        messages: List[Dict[str, str]],
        model: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Run a chat completion and return the assistant text.

        Raises:
            ConfigurationError: If no API key is configured
            UpstreamUnavailable: If the OpenAI API call failed
        """
        client = self._get_client()
        kwargs = {"model": model, "messages": messages, "temperature": temperature}
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens

        try:
            response = await client.chat.completions.create(**kwargs)
        except openai.APIStatusError as e:
            logger.warning(f"OpenAI request failed: status {e.status_code}")
            raise UpstreamUnavailable("openai:chat.completions", status=e.status_code) from e
        except openai.APIError as e:
            logger.warning(f"OpenAI request failed: {e.__class__.__name__}")
            raise UpstreamUnavailable("openai:chat.completions", reason=e.__class__.__name__) from e

        content = response.choices[0].message.content or ""
        return content.strip()
