"""Shared HTTP client for PlantUML server requests.

The client is reused across calls to benefit from connection pooling.
"""

from __future__ import annotations

import httpx

# Default timeout for HTTP requests (seconds)
DEFAULT_TIMEOUT = 30.0

USER_AGENT = "umlmacro/1.0"

# Global client instance (lazy initialized)
_client: httpx.Client | None = None


def get_client() -> httpx.Client:
    """Get or create the shared HTTP client with connection pooling."""
    global _client
    if _client is None:
        _client = create_client()
    return _client


def create_client(
    *,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Create an HTTP client with the macro's defaults.

    Args:
        timeout: Request timeout in seconds
        transport: Custom transport (e.g. httpx.MockTransport in tests)
    """
    return httpx.Client(
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
        limits=httpx.Limits(
            max_keepalive_connections=20,
            max_connections=100,
            keepalive_expiry=30.0,
        ),
        transport=transport,
    )


def close_client() -> None:
    """Close the shared client, if one was created."""
    global _client
    if _client is not None:
        _client.close()
        _client = None
