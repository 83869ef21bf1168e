"""
Provider base class and proxy function registry.
"""
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Dict, Optional, Type

import httpx

from studio.exceptions.handlers import ProxyError
from studio.logging.config import get_structured_logger

logger = get_structured_logger(__name__)

NOT_SPECIFIED = "Não especificado"
UNKNOWN_AUTHOR = "Desconhecido"


class BaseProvider(ABC):
    """Read-only client for one third-party voice or model provider."""

    platform: str = ""
    label: str = ""

    def __init__(self, http_client: httpx.AsyncClient, base_url: Optional[str] = None):
        """The HTTP client is owned by the caller."""
        self.http_client = http_client
        self.base_url = (base_url or self.default_base_url()).rstrip("/")

    @abstractmethod
    def default_base_url(self) -> str:
        """Provider API root from settings."""
        raise NotImplementedError

    @abstractmethod
    def auth_headers(self, api_key: str) -> Dict[str, str]:
        """Credential headers expected by the provider."""
        raise NotImplementedError

    async def request(self, method: str, path: str, api_key: str, **kwargs) -> Any:
        """Single attempt request; a non-2xx answer becomes a ProxyError with the provider status."""
        headers = {"Content-Type": "application/json", **self.auth_headers(api_key)}
        url = f"{self.base_url}{path}"
        logger.info("Calling %s %s %s", self.label, method, url)
        resp = await self.http_client.request(method, url, headers=headers, **kwargs)
        if not resp.is_success:
            logger.error("%s API error status=%s body=%s", self.label, resp.status_code, resp.text[:500])
            raise ProxyError(resp.status_code, f"{self.label} API error: {resp.status_code}", resp.text)
        return resp.json()


ProxyHandler = Callable[[BaseProvider, dict, str], Awaitable[dict]]


@dataclass(frozen=True)
class ProxyFunction:
    """A named proxy function bound to a provider."""
    name: str
    provider_cls: Type[BaseProvider]
    handler: ProxyHandler
    identifier_field: Optional[str] = None
    identifier_error: Optional[str] = None


FUNCTIONS: Dict[str, ProxyFunction] = {}


def register_function(function: ProxyFunction) -> None:
    """Register a proxy function under its name."""
    FUNCTIONS[function.name] = function


def get_function(name: str) -> ProxyFunction:
    """Look up a proxy function by name, raising if it does not exist."""
    if name not in FUNCTIONS:
        raise KeyError(f"Function '{name}' not found. Available: {list(FUNCTIONS.keys())}")
    return FUNCTIONS[name]
