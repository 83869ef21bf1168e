"""
Provider account credit routes.
"""
import httpx
from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from studio.clients.http import get_http_client
from studio.exceptions.handlers import AppValidationError, ExternalServiceError
from studio.models.api import CreditsResponse
from studio.repositories.supabase import SupabaseRepository
from studio.services.credits import FETCHERS, fetch_credits, format_credits

router = APIRouter(prefix="/api/v1/credits", tags=["credits"])


@router.get("/{platform}", response_model=CreditsResponse)
async def get_credits(platform: str, http_client: httpx.AsyncClient = Depends(get_http_client)):
    """Remaining balance of a provider account, using its stored key."""
    if platform not in FETCHERS:
        raise AppValidationError(f"Credits are not available for {platform}", "CREDITS_NOT_SUPPORTED")
    api_key = await run_in_threadpool(SupabaseRepository.get_api_key, platform)
    if not api_key:
        raise ExternalServiceError(f"{platform} API key not found in database", "API_KEY_NOT_FOUND")
    result = await fetch_credits(http_client, platform, api_key)
    return CreditsResponse(
        platform=platform,
        credits=result.credits,
        unit=result.unit,
        formatted=format_credits(result.credits, result.unit),
        error=result.error,
    )
