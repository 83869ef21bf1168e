"""
Automation backend client: endpoint/webhook URL construction and argument shaping
for every webhook the studio talks to.
"""
import json
from typing import Any, Dict, List, Literal, Optional

import httpx

from studio.clients.http import build_http_client
from studio.config import Settings, settings
from studio.exceptions.handlers import NetworkError, UpstreamHTTPError
from studio.logging.config import get_structured_logger

logger = get_structured_logger(__name__)

CloneAction = Literal["coleta_titulo", "transcrever"]
DeleteType = Literal["deleteScript", "deleteVideo", "deleteChannel"]
TrainingType = Literal["criar_canal", "treinar_titulo", "treinar_roteiro", "clonar_manual"]


def youtube_watch_url(video_id: str) -> str:
    """Public watch link for a video id."""
    return f"https://www.youtube.com/watch?v={video_id}"


class ServiceClient:
    """Async HTTP client for the automation backend."""

    def __init__(self, config: Optional[Settings] = None, http_client: Optional[httpx.AsyncClient] = None):
        self.config = config or settings
        self.base_url = self.config.api_base_url or ""
        self._client = http_client or build_http_client(timeout=self.config.http_timeout)

    async def close(self) -> None:
        """Close the underlying connections."""
        await self._client.aclose()

    async def __aenter__(self) -> "ServiceClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _endpoints(self) -> Dict[str, Optional[str]]:
        return {
            "youtube": self.config.youtube_api_endpoint,
            "aiGeneration": self.config.ai_generation_endpoint,
            "videoProcessing": self.config.video_processing_endpoint,
            "upload": self.config.upload_endpoint,
            "models": self.config.ai_models_endpoint,
        }

    def _webhooks(self) -> Dict[str, Optional[str]]:
        return {
            "cloneChannel": self.config.webhook_clone_channel,
            "generateContent": self.config.webhook_generate_content,
            "generateTitle": self.config.webhook_generate_title,
            "generateScript": self.config.webhook_generate_script,
            "processVideo": self.config.webhook_process_video,
            "publishVideo": self.config.webhook_publish_video,
            "update": self.config.webhook_update,
            "generateVideo": self.config.webhook_generate_video,
            "deleteContent": self.config.webhook_delete,
        }

    def get_endpoint(self, key: str) -> str:
        """Base URL plus the configured endpoint path; unknown keys yield the base URL."""
        return f"{self.base_url}{self._endpoints().get(key) or ''}"

    def get_webhook(self, key: str) -> str:
        """Base URL plus the configured webhook path; unknown keys yield the base URL."""
        return f"{self.base_url}{self._webhooks().get(key) or ''}"

    async def call(
        self,
        endpoint: str,
        method: str = "POST",
        json_body: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Issue a request; non-2xx raises, the body is parsed as JSON with a text fallback."""
        url = endpoint if endpoint.startswith("http") else f"{self.base_url}{endpoint}"
        request_headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            **(headers or {}),
        }

        logger.info("Calling backend %s %s", method, url)
        try:
            resp = await self._client.request(method, url, json=json_body, headers=request_headers)
        except httpx.TransportError as e:
            logger.error("Backend unreachable url=%s err=%s", url, str(e))
            raise NetworkError(url, e) from e

        if not resp.is_success:
            logger.error("Backend error status=%s body=%s", resp.status_code, resp.text[:500])
            raise UpstreamHTTPError(resp.status_code, resp.reason_phrase, resp.text)

        text = resp.text
        try:
            return json.loads(text)
        except ValueError:
            return text

    # Channel search

    async def search_channel(self, channel_url: str) -> Any:
        """Look up a channel through the backend's YouTube endpoint."""
        return await self.call(self.get_endpoint("youtube"), json_body={"channelUrl": channel_url})

    # AI generation

    async def generate_title(self, idea: str, prompt: str, model: str = "sonnet-4") -> Any:
        """Generate titles for an idea."""
        return await self.call(
            self.get_webhook("generateTitle"),
            json_body={"idea": idea, "prompt": prompt, "model": model},
        )

    async def generate_script(self, idea: str, title: str, prompt: str, model: str = "sonnet-4") -> Any:
        """Generate a script for a title."""
        return await self.call(
            self.get_webhook("generateScript"),
            json_body={"idea": idea, "title": title, "prompt": prompt, "model": model},
        )

    async def generate_content(self, payload: Dict[str, Any]) -> Any:
        """Content generation webhook, discriminated by `tipo_geracao`."""
        return await self.call(self.get_webhook("generateContent"), json_body=payload)

    # Channel cloning and training

    async def clone_channel(
        self,
        channel_url: str,
        videos: List[Dict[str, str]],
        channel_name: str,
        action: CloneAction,
    ) -> Any:
        """Send selected videos of a source channel for title collection or transcription."""
        links = [{"title": v["title"], "link": youtube_watch_url(v["id"])} for v in videos]
        return await self.call(
            self.get_webhook("cloneChannel"),
            json_body={
                "channelUrl": channel_url,
                "videos": links,
                "channelName": channel_name,
                "selectedVideoCount": len(links),
                "action": action,
            },
        )

    async def train_channel(self, payload: Dict[str, Any]) -> Any:
        """Training webhook, discriminated by `tipo_treino`."""
        return await self.call(self.get_webhook("cloneChannel"), json_body=payload)

    # Video lifecycle

    async def process_video(self, video_id: str) -> Any:
        """Start processing a video."""
        return await self.call(self.get_webhook("processVideo"), json_body={"videoId": video_id})

    async def publish_video(self, video_id: str, schedule_date: Optional[str] = None) -> Any:
        """Publish a video, optionally scheduled."""
        body: Dict[str, Any] = {"videoId": video_id}
        if schedule_date is not None:
            body["scheduleDate"] = schedule_date
        return await self.call(self.get_webhook("publishVideo"), json_body=body)

    async def generate_videos(self, videos: List[Dict[str, Any]]) -> Any:
        """Render videos: each item carries `id`, `data_publicar` and `zoom_types`."""
        return await self.call(self.get_webhook("generateVideo"), json_body={"videos": videos})

    # Channel management

    async def update_channel(self, payload: Dict[str, Any]) -> Any:
        """Channel settings update."""
        body = {"update_type": "updateChannel", **payload}
        return await self.call(self.get_webhook("update"), json_body=body)

    async def update_channel_image(self, id_canal: int, image_data: Dict[str, str]) -> Any:
        """Replace the channel profile image (`{type, base64}`)."""
        return await self.call(
            self.get_webhook("update"),
            json_body={"update_type": "imageChannel", "id_canal": id_canal, "image_data": image_data},
        )

    async def collect_channel_style(self, id_canal: int, image_base64: str) -> Any:
        """Derive the channel's image style from a reference picture."""
        return await self.call(
            self.get_webhook("update"),
            json_body={"update_type": "updateStyle", "id_canal": id_canal, "image_data": image_base64},
        )

    async def update_video_image(self, id_video: int, image_data: Dict[str, str]) -> Any:
        """Replace a video thumbnail."""
        return await self.call(
            self.get_webhook("update"),
            json_body={"update_type": "thumbVideo", "id_video": id_video, "image_data": image_data},
        )

    async def delete_content(self, content_id: int, delete_type: DeleteType) -> Any:
        """Delete a script, video or channel."""
        return await self.call(
            self.get_webhook("deleteContent"),
            json_body={"id": content_id, "deleteType": delete_type},
        )
