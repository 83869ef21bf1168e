"""
Provider proxy functions: single attempt, read-only lookups against third-party APIs.
"""
import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from studio.clients.http import get_http_client
from studio.config import settings
from studio.exceptions.handlers import PROXY_CORS_HEADERS, ProxyError
from studio.logging.config import get_structured_logger, mask_key
from studio.providers import BaseProvider, get_function
from studio.repositories.supabase import SupabaseRepository

logger = get_structured_logger(__name__)
router = APIRouter(prefix="/functions/v1", tags=["functions"])


async def resolve_api_key(provider: BaseProvider, provided: str | None) -> str:
    """Use the caller's key, otherwise the one stored for the provider platform."""
    if provided:
        return provided
    if not settings.supabase_configured:
        raise ProxyError(500, "Supabase configuration not found")
    api_key = await run_in_threadpool(SupabaseRepository.get_api_key, provider.platform)
    if not api_key:
        raise ProxyError(500, f"{provider.label} API key not found in database")
    logger.info("Using stored %s key %s", provider.platform, mask_key(api_key))
    return api_key


@router.options("/{name}")
def preflight(name: str):
    """CORS preflight, answered unconditionally."""
    return PlainTextResponse("ok", headers=PROXY_CORS_HEADERS)


@router.post("/{name}")
async def invoke_function(
    name: str,
    request: Request,
    http_client: httpx.AsyncClient = Depends(get_http_client),
):
    """Run a proxy function and wrap its result in the success envelope."""
    try:
        function = get_function(name)
    except KeyError:
        raise ProxyError(404, f"Function '{name}' not found")

    try:
        body = await request.json()
        if not isinstance(body, dict):
            raise ValueError("Request body must be a JSON object")

        if function.identifier_field:
            identifier = body.get(function.identifier_field)
            if not isinstance(identifier, str) or not identifier.strip():
                raise ProxyError(400, function.identifier_error)

        provider = function.provider_cls(http_client)
        api_key = await resolve_api_key(provider, body.get("api_key"))
        result = await function.handler(provider, body, api_key)
    except ProxyError:
        raise
    except Exception as e:
        logger.error("Proxy function %s failed: %s", name, str(e), exc_info=True)
        raise ProxyError(500, "Internal server error", str(e))

    return JSONResponse(content=result, headers=PROXY_CORS_HEADERS)
