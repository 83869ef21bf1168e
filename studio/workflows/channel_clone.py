"""
Channel cloning: pick videos of a source YouTube channel and train a studio channel on them.
"""
import os
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from starlette.concurrency import run_in_threadpool

from studio.clients.service_client import ServiceClient, youtube_watch_url
from studio.clients.youtube import YouTubeClient
from studio.exceptions.handlers import WorkflowBusyError, WorkflowValidationError
from studio.hooks.api_state import ApiHook, CollectionHook
from studio.logging.config import get_structured_logger
from studio.models.records import Channel
from studio.models.youtube import YouTubeChannel, YouTubeVideo
from studio.repositories.supabase import SupabaseRepository

logger = get_structured_logger(__name__)

MISSING_TITLE = "Título não encontrado"
SCRIPT_FILE_EXTENSIONS = (".txt", ".md")


@dataclass
class ManualScript:
    """A hand-written training script."""
    text: str
    title: str = ""
    thumb_text: str = ""


def script_from_file(filename: str, content: str) -> ManualScript:
    """Training script from an uploaded text file, titled after the file name."""
    if not filename.lower().endswith(SCRIPT_FILE_EXTENSIONS):
        raise WorkflowValidationError("Only .txt and .md files are supported", "file")
    return ManualScript(text=content, title=os.path.splitext(filename)[0])


class ChannelCloneWorkflow:
    """Source channel search, video selection and training submissions."""

    def __init__(
        self,
        client: ServiceClient,
        youtube: YouTubeClient,
        repository=SupabaseRepository,
        on_change: Optional[Callable[["ChannelCloneWorkflow"], None]] = None,
    ):
        self.client = client
        self.youtube = youtube
        self.repository = repository
        self.on_change = on_change

        self._channels = CollectionHook(lambda: run_in_threadpool(self.repository.list_channels, "nome_canal"))
        self.search_state: ApiHook[YouTubeChannel] = ApiHook()
        self.processing = False

        self.source: Optional[YouTubeChannel] = None
        self.source_url = ""
        self.videos: List[YouTubeVideo] = []
        self.next_page_token: Optional[str] = None
        self.selected: List[str] = []

        self.selected_channel_id: Optional[int] = None
        self.suggested_name = ""

    def _emit(self) -> None:
        if self.on_change is not None:
            self.on_change(self)

    @property
    def channels(self) -> List[Channel]:
        return self._channels.data

    @property
    def has_more(self) -> bool:
        return self.next_page_token is not None

    @property
    def selected_channel(self) -> Optional[Channel]:
        return next((c for c in self.channels if c.id == self.selected_channel_id), None)

    async def load_channels(self) -> List[Channel]:
        channels = await self._channels.refetch()
        self._emit()
        return channels

    def select_channel(self, channel_id: Optional[int]) -> None:
        self.selected_channel_id = channel_id
        self._emit()

    # Source channel

    def reset(self) -> None:
        self.search_state.reset()
        self.source = None
        self.videos = []
        self.next_page_token = None
        self.selected = []
        self._emit()

    async def search(self, channel_url: str, max_videos: int = 50) -> Optional[YouTubeChannel]:
        """Resolve the source channel and load its first page of uploads."""
        if not (channel_url or "").strip():
            return None
        self.reset()
        self.source_url = channel_url
        channel = await self.search_state.execute(lambda: self.youtube.get_channel_info(channel_url))
        self.source = channel
        page = await self.youtube.get_channel_videos(channel.uploadsPlaylistId, max_videos)
        self.videos = list(page.videos)
        self.next_page_token = page.nextPageToken
        self._match_existing_channel(channel.name)
        self._emit()
        return channel

    def _match_existing_channel(self, name: str) -> None:
        """Select the studio channel named like the source, or suggest the name for a new one."""
        existing = next((c for c in self.channels if c.nome_canal.lower() == name.lower()), None)
        if existing is not None:
            self.selected_channel_id = existing.id
            self.suggested_name = ""
        else:
            self.selected_channel_id = None
            self.suggested_name = name

    async def load_more(self, max_videos: int = 50) -> List[YouTubeVideo]:
        if self.source is None or not self.has_more:
            return []
        page = await self.youtube.get_channel_videos(
            self.source.uploadsPlaylistId, max_videos, self.next_page_token
        )
        self.videos.extend(page.videos)
        self.next_page_token = page.nextPageToken
        self._emit()
        return page.videos

    # Selection

    def toggle_video(self, video_id: str) -> None:
        if video_id in self.selected:
            self.selected.remove(video_id)
        else:
            self.selected.append(video_id)
        self._emit()

    def select_all(self) -> None:
        """Select every loaded video, or clear the selection when all are selected."""
        if len(self.selected) == len(self.videos):
            self.selected = []
        else:
            self.selected = [v.id for v in self.videos]
        self._emit()

    def remove_video(self, video_id: str) -> None:
        if video_id in self.selected:
            self.selected.remove(video_id)
            self._emit()

    # Training

    async def _submit(self, payload: dict) -> Any:
        if self.processing:
            raise WorkflowBusyError("processing")
        self.processing = True
        self._emit()
        try:
            return await self.client.train_channel(payload)
        finally:
            self.processing = False
            self._emit()

    def _require_channel(self) -> Channel:
        channel = self.selected_channel
        if channel is None:
            raise WorkflowValidationError("Select or create a channel first", "channel")
        return channel

    def _require_videos(self) -> None:
        if not self.selected:
            raise WorkflowValidationError("Select at least one video", "videos")

    async def create_channel(self, name: str, channel_url: Optional[str] = None) -> Optional[Channel]:
        """Create a studio channel and select it."""
        name = (name or "").strip()
        if not name:
            raise WorkflowValidationError("Enter a channel name", "nome_canal")
        link = channel_url or self.source_url
        await self._submit({"nome_canal": name, "tipo_treino": "criar_canal", "link_canal": link})
        await self.load_channels()
        created = await run_in_threadpool(self.repository.find_channel_by_name, name)
        if created is not None:
            self.selected_channel_id = created.id
        self.suggested_name = ""
        logger.info("Channel created name=%s", name)
        self._emit()
        return created

    async def collect_titles(self) -> Any:
        """Train the channel on the titles of the selected videos."""
        channel = self._require_channel()
        self._require_videos()
        by_id = {v.id: v for v in self.videos}
        titles = [(by_id[v].title if v in by_id else "") or MISSING_TITLE for v in self.selected]
        return await self._submit({
            "nome_canal": channel.nome_canal,
            "titulos": titles,
            "tipo_treino": "treinar_titulo",
        })

    async def transcribe_videos(self) -> Any:
        """Train the channel on transcripts of the selected videos."""
        channel = self._require_channel()
        self._require_videos()
        return await self._submit({
            "nome_canal": channel.nome_canal,
            "videos": [youtube_watch_url(v) for v in self.selected],
            "tipo_treino": "treinar_roteiro",
        })

    async def manual_training(self, scripts: List[ManualScript]) -> Any:
        """Train the channel on hand-written scripts; blank ones are skipped."""
        channel = self._require_channel()
        filled = [s for s in scripts if s.text.strip()]
        if not filled:
            raise WorkflowValidationError("At least one script must have content", "roteiros")
        return await self._submit({
            "nome_canal": channel.nome_canal,
            "tipo_treino": "clonar_manual",
            "roteiros": [
                {
                    "title": s.title or f"Roteiro {index + 1}",
                    "text_thumb": s.thumb_text or "",
                    "roteiro": s.text,
                }
                for index, s in enumerate(filled)
            ],
        })
