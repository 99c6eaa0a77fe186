"""Shared aiohttp plumbing for upstream API clients."""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from ..config import MemesenseConfig
from .errors import UpstreamUnavailable

logger = logging.getLogger(__name__)


class AsyncHTTPClient:
    """
    Base class for JSON-over-HTTP upstream clients.

    The aiohttp session is created lazily on first use and closed with
    close(). A caller may pass its own session for connection pooling, in
    which case close() leaves it open.
    """

    name = "http"

    def __init__(
        self,
        base_url: str,
        timeout_seconds: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds or MemesenseConfig.get_http_timeout()
        self._session = session
        self._own_session = False

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._own_session = True
        return self._session

    async def close(self):
        """Close session if we own it."""
        if self._own_session and self._session:
            await self._session.close()
            self._session = None
            self._own_session = False

    def _headers(self) -> Dict[str, str]:
        return {"Accept": "application/json"}

    async def _get_json(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        GET a JSON document.

        Args:
            path: Path relative to base_url
            params: Query parameters
            headers: Extra headers, merged over the client defaults

        Returns:
            Decoded JSON body

        Raises:
            UpstreamUnavailable: On non-200 status, network error, timeout or bad JSON
        """
        url = f"{self.base_url}{path}"
        request_headers = self._headers()
        if headers:
            request_headers.update(headers)

        session = await self._get_session()
        try:
            async with session.get(
                url,
                params=params,
                headers=request_headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as response:
                if response.status != 200:
                    logger.warning(f"{self.name} request failed: {url} status {response.status}")
                    raise UpstreamUnavailable(url, status=response.status)
                return await response.json(content_type=None)
        except aiohttp.ClientError as e:
            logger.warning(f"{self.name} request failed: {url} ({e.__class__.__name__})")
            raise UpstreamUnavailable(url, reason=str(e) or e.__class__.__name__) from e
        except asyncio.TimeoutError as e:
            logger.warning(f"{self.name} request timed out: {url}")
            raise UpstreamUnavailable(url, reason="timeout") from e
        except ValueError as e:
            logger.warning(f"{self.name} returned invalid JSON: {url}")
            raise UpstreamUnavailable(url, reason="invalid JSON") from e
