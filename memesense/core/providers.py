"""
Ordered-fallback provider abstraction.

A resource (Solscan account info, trending tokens, a Twitter timeline) can
usually be served by more than one upstream. Providers are tried in priority
order and the first usable result wins:

    providers = [
        Provider("solscan-primary", lambda: primary.get_account(address)),
        Provider("solscan-secondary", lambda: secondary.get_account(address)),
    ]
    account = await try_in_order(providers, "account")
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List

from .errors import AllProvidersFailed, UpstreamUnavailable
from .service_metrics import get_metrics

logger = logging.getLogger(__name__)


@dataclass
class Provider:
    """One named upstream attempt."""
    name: str
    fetch: Callable[[], Awaitable[Any]]


async def try_in_order(providers: List[Provider], resource: str) -> Any:
    """
    Await providers sequentially until one returns data.

    A provider that raises UpstreamUnavailable or returns None counts as a
    failed attempt. Any other exception propagates.

    Args:
        providers: Providers in priority order
        resource: Resource name used in logs and in the raised error

    Returns:
        The first non-None result

    Raises:
        AllProvidersFailed: If every provider failed (or the list is empty)
    """
    attempts: List[str] = []

    for provider in providers:
        try:
            result = await provider.fetch()
        except UpstreamUnavailable as e:
            logger.warning(f"{resource}: provider {provider.name} failed: {e}")
            attempts.append(f"{provider.name}: {e}")
            get_metrics().record_upstream_failure(provider.name)
            continue

        if result is None:
            logger.warning(f"{resource}: provider {provider.name} returned no data")
            attempts.append(f"{provider.name}: no data")
            get_metrics().record_upstream_failure(provider.name)
            continue

        return result

    raise AllProvidersFailed(resource, attempts)
