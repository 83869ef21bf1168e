"""
Request state containers: `{data, loading, error}` around service client calls.
"""
from collections.abc import Awaitable, Callable
from typing import Any, Generic, List, Optional, TypeVar

from studio.clients.service_client import CloneAction, ServiceClient
from studio.logging.config import get_structured_logger

logger = get_structured_logger(__name__)

T = TypeVar("T")

DEFAULT_ERROR = "An error occurred"


def error_message(exc: BaseException) -> str:
    """Non-empty message for an exception."""
    return str(exc) or DEFAULT_ERROR


class ApiHook(Generic[T]):
    """Tracks one in-flight call at a time and keeps the last good result."""

    def __init__(self):
        self.data: Optional[T] = None
        self.loading: bool = False
        self.error: Optional[str] = None

    async def execute(self, fn: Callable[[], Awaitable[T]]) -> T:
        """Run `fn`, record the outcome and return it; failures are recorded and re-raised."""
        self.loading = True
        self.error = None
        try:
            result = await fn()
        except Exception as exc:
            self.loading = False
            self.error = error_message(exc)
            logger.warning("Call failed: %s", self.error)
            raise
        self.data = result
        self.loading = False
        self.error = None
        return result

    def reset(self) -> None:
        """Clear data, loading and error."""
        self.data = None
        self.loading = False
        self.error = None


class ChannelSearchHook(ApiHook[Any]):
    """Channel lookup."""

    def __init__(self, client: ServiceClient):
        super().__init__()
        self.client = client

    async def search_channel(self, channel_url: str) -> Any:
        return await self.execute(lambda: self.client.search_channel(channel_url))


class AIGenerationHook(ApiHook[Any]):
    """Title and script generation."""

    def __init__(self, client: ServiceClient):
        super().__init__()
        self.client = client

    async def generate_title(self, idea: str, prompt: str, model: str = "sonnet-4") -> Any:
        return await self.execute(lambda: self.client.generate_title(idea, prompt, model))

    async def generate_script(self, idea: str, title: str, prompt: str, model: str = "sonnet-4") -> Any:
        return await self.execute(lambda: self.client.generate_script(idea, title, prompt, model))


class VideoProcessingHook(ApiHook[Any]):
    """Channel cloning and the video lifecycle."""

    def __init__(self, client: ServiceClient):
        super().__init__()
        self.client = client

    async def clone_channel(self, channel_url: str, videos: List[dict], channel_name: str, action: CloneAction) -> Any:
        return await self.execute(lambda: self.client.clone_channel(channel_url, videos, channel_name, action))

    async def process_video(self, video_id: str) -> Any:
        return await self.execute(lambda: self.client.process_video(video_id))

    async def publish_video(self, video_id: str, schedule_date: Optional[str] = None) -> Any:
        return await self.execute(lambda: self.client.publish_video(video_id, schedule_date))


class CollectionHook(Generic[T]):
    """List loader: failures land in `error` and keep the previous rows."""

    def __init__(self, fetch: Callable[[], Awaitable[List[T]]]):
        self.fetch = fetch
        self.data: List[T] = []
        self.loading: bool = False
        self.error: Optional[str] = None

    async def refetch(self) -> List[T]:
        """Reload the collection."""
        self.loading = True
        self.error = None
        try:
            self.data = list(await self.fetch())
        except Exception as exc:
            self.error = error_message(exc)
            logger.error("Collection load failed: %s", self.error)
        finally:
            self.loading = False
        return self.data
