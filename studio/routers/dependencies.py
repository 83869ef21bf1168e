"""
Shared route dependencies.
"""
from collections.abc import AsyncIterator

import httpx
from fastapi import Depends, Request

from studio.clients.http import get_http_client
from studio.clients.service_client import ServiceClient
from studio.services.session import SessionService


async def get_service_client(
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> AsyncIterator[ServiceClient]:
    """Automation backend client sharing the request scoped HTTP client."""
    yield ServiceClient(http_client=http_client)


def get_session_service(request: Request) -> SessionService:
    """The process wide session, created by the app factory."""
    return request.app.state.session_service
