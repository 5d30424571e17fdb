"""Shared HTTP client utilities — reusable httpx client."""

import logging

import httpx

from site_api.config import get_settings

logger = logging.getLogger(__name__)

# Module-level shared client (created lazily, lives for the process lifetime)
_client: httpx.AsyncClient | None = None


def get_shared_client() -> httpx.AsyncClient:
    """Return a shared httpx.AsyncClient, creating it on first call.

    The client timeout follows ``dispatch_timeout_seconds`` so a slow email
    provider surfaces as a timeout instead of a hung request.
    """
    global _client
    if _client is None or _client.is_closed:
        settings = get_settings()
        _client = httpx.AsyncClient(timeout=settings.dispatch_timeout_seconds)
    return _client


async def close_shared_client() -> None:
    """Close the shared client (application shutdown)."""
    global _client
    if _client is not None and not _client.is_closed:
        await _client.aclose()
        logger.debug("Shared HTTP client closed")
    _client = None


def resend_headers(api_key: str) -> dict[str, str]:
    """Build Resend API request headers."""
    headers: dict[str, str] = {"Content-Type": "application/json"}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    return headers
