"""
Error taxonomy for Memesense.

ValidationError maps to HTTP 400, ConfigurationError to HTTP 500.
UpstreamUnavailable is recovered locally (next provider, then placeholder
data) and only reaches the caller when no synthesis path exists.
"""

from typing import List, Optional


class MemesenseError(Exception):
    """Base class for all service errors."""


class ValidationError(MemesenseError):
    """Malformed or missing request input."""

    status_code = 400


class ConfigurationError(MemesenseError):
    """A required API key or setting is missing."""

    status_code = 500


class UpstreamUnavailable(MemesenseError):
    """A third-party API returned a non-2xx status or could not be reached."""

    status_code = 500

    def __init__(self, endpoint: str, status: Optional[int] = None, reason: Optional[str] = None):
        self.endpoint = endpoint
        self.status = status
        self.reason = reason
        detail = f"status {status}" if status is not None else (reason or "request failed")
        super().__init__(f"{endpoint}: {detail}")


class AllProvidersFailed(UpstreamUnavailable):
    """Every provider in an ordered fallback list failed for a resource."""

    def __init__(self, resource: str, attempts: Optional[List[str]] = None):
        self.resource = resource
        self.attempts = list(attempts or [])
        reason = "; ".join(self.attempts) if self.attempts else "no provider configured"
        super().__init__(resource, reason=reason)
