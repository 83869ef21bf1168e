"""
Remaining credits on the provider accounts.
"""
from dataclasses import dataclass
from typing import Literal, Optional, Union

import httpx

from studio.exceptions.handlers import AppValidationError, ProxyError
from studio.logging.config import get_structured_logger
from studio.providers import ElevenLabsProvider, FishAudioProvider, OpenRouterProvider, RunwareProvider

logger = get_structured_logger(__name__)

Unit = Literal["dollars", "characters", "credits"]

NOT_AVAILABLE = "N/A"


@dataclass
class CreditsResult:
    credits: Union[float, str]
    unit: Unit
    error: Optional[str] = None


def _number(value) -> float:
    """Lenient float parsing; unparseable values count as zero."""
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


async def _elevenlabs(client: httpx.AsyncClient, api_key: str) -> float:
    data = await ElevenLabsProvider(client).get_subscription(api_key)
    return _number(data.get("character_limit")) - _number(data.get("character_count"))


async def _fish_audio(client: httpx.AsyncClient, api_key: str) -> float:
    data = await FishAudioProvider(client).get_credit(api_key)
    return _number(data.get("credit"))


async def _openrouter(client: httpx.AsyncClient, api_key: str) -> float:
    data = await OpenRouterProvider(client).get_credits(api_key)
    return _number(data.get("total_credits")) - _number(data.get("total_usage"))


async def _runware(client: httpx.AsyncClient, api_key: str) -> float:
    result = await RunwareProvider(client).get_account_details(api_key)
    return _number(result.get("balance"))


FETCHERS = {
    "ElevenLabs": (_elevenlabs, "characters"),
    "Fish-Audio": (_fish_audio, "dollars"),
    "OpenRouter": (_openrouter, "dollars"),
    "Runware": (_runware, "dollars"),
}


async def fetch_credits(client: httpx.AsyncClient, platform: str, api_key: str) -> CreditsResult:
    """Balance of one account; provider failures are reported in `error`."""
    if platform not in FETCHERS:
        raise AppValidationError(f"Credits are not available for {platform}", "CREDITS_NOT_SUPPORTED")
    fetcher, unit = FETCHERS[platform]
    try:
        credits = await fetcher(client, api_key)
    except ProxyError as e:
        logger.warning("Credit lookup failed platform=%s err=%s", platform, e.message)
        return CreditsResult(NOT_AVAILABLE, unit, e.message)
    except httpx.HTTPError as e:
        logger.warning("Credit lookup failed platform=%s err=%s", platform, str(e))
        return CreditsResult(NOT_AVAILABLE, unit, str(e) or e.__class__.__name__)
    return CreditsResult(credits, unit)


def _group_pt_br(value: float) -> str:
    """Thousands grouped with dots, up to three decimals after a comma."""
    text = f"{abs(value):,.3f}".rstrip("0").rstrip(".")
    integer, _, fraction = text.partition(".")
    grouped = integer.replace(",", ".")
    sign = "-" if value < 0 and text not in ("0", "") else ""
    return f"{sign}{grouped},{fraction}" if fraction else f"{sign}{grouped}"


def format_credits(credits: Union[float, str], unit: Unit) -> str:
    """Display form of a balance."""
    if credits == NOT_AVAILABLE:
        return NOT_AVAILABLE
    amount = _number(credits)
    if unit == "dollars":
        return f"${amount:.2f}"
    if unit == "characters":
        return _group_pt_br(amount)
    if unit == "credits":
        return f"{amount:.2f}"
    return str(credits)
