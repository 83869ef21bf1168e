"""
Shared outbound HTTP client factory.
"""
from collections.abc import AsyncIterator

import httpx

from studio.config import settings


def build_http_client(**kwargs) -> httpx.AsyncClient:
    """AsyncClient with the configured timeout."""
    kwargs.setdefault("timeout", settings.http_timeout)
    return httpx.AsyncClient(**kwargs)


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """FastAPI dependency yielding a request scoped client."""
    async with build_http_client() as client:
        yield client
