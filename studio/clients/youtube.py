"""
YouTube Data API v3 client: channel lookup and upload listing for channel cloning.
"""
import re
from typing import Any, Dict, List, Optional

import httpx

from studio.clients.http import build_http_client
from studio.config import Settings, settings
from studio.exceptions.handlers import AppValidationError, ExternalServiceError
from studio.logging.config import get_structured_logger
from studio.models.youtube import VideoPage, YouTubeChannel, YouTubeVideo

logger = get_structured_logger(__name__)

CHANNEL_PATTERNS = [
    re.compile(r"youtube\.com/channel/([a-zA-Z0-9_-]+)"),
    re.compile(r"youtube\.com/c/([a-zA-Z0-9_-]+)"),
    re.compile(r"youtube\.com/user/([a-zA-Z0-9_-]+)"),
    re.compile(r"youtube\.com/@([a-zA-Z0-9_.-]+)"),
]

VIDEO_PATTERNS = [
    re.compile(r"youtube\.com/watch\?v=([a-zA-Z0-9_-]+)"),
    re.compile(r"youtu\.be/([a-zA-Z0-9_-]+)"),
    re.compile(r"youtube\.com/embed/([a-zA-Z0-9_-]+)"),
    re.compile(r"youtube\.com/v/([a-zA-Z0-9_-]+)"),
]

DURATION_RE = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")

CHANNEL_PARTS = "snippet,contentDetails,statistics"


def extract_channel_id(url: str) -> Optional[str]:
    """Channel id, custom name, username or handle from a channel URL."""
    for pattern in CHANNEL_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def extract_video_id(url: str) -> Optional[str]:
    """Video id from a watch, short, embed or legacy URL."""
    for pattern in VIDEO_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def format_duration(duration: str) -> str:
    """ISO 8601 duration to clock format (PT4M13S -> 4:13)."""
    match = DURATION_RE.match(duration or "")
    if not match:
        return "0:00"
    hours, minutes, seconds = (int(g or 0) for g in match.groups())
    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def format_count(count: Any) -> str:
    """Compact count (1234567 -> 1.2M)."""
    num = int(count or 0)
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1000:
        return f"{num / 1000:.1f}K"
    return str(num)


def _to_channel(item: Dict[str, Any]) -> YouTubeChannel:
    snippet = item.get("snippet") or {}
    stats = item.get("statistics") or {}
    details = item.get("contentDetails") or {}
    return YouTubeChannel(
        id=item["id"],
        name=snippet.get("title", ""),
        description=snippet.get("description", ""),
        subscriberCount=format_count(stats.get("subscriberCount")),
        videoCount=int(stats.get("videoCount") or 0),
        uploadsPlaylistId=(details.get("relatedPlaylists") or {}).get("uploads", ""),
    )


def _to_video(item: Dict[str, Any]) -> YouTubeVideo:
    snippet = item.get("snippet") or {}
    thumbnails = snippet.get("thumbnails") or {}
    thumbnail = (
        (thumbnails.get("medium") or {}).get("url")
        or (thumbnails.get("default") or {}).get("url")
        or f"https://i.ytimg.com/vi/{item['id']}/hqdefault.jpg"
    )
    return YouTubeVideo(
        id=item["id"],
        title=snippet.get("title", ""),
        thumbnail=thumbnail,
        duration=format_duration((item.get("contentDetails") or {}).get("duration", "")),
        views=format_count((item.get("statistics") or {}).get("viewCount")),
        publishedAt=snippet.get("publishedAt"),
        description=snippet.get("description", ""),
        channelId=snippet.get("channelId", ""),
    )


class YouTubeClient:
    """Async client for the YouTube Data API."""

    def __init__(self, config: Optional[Settings] = None, http_client: Optional[httpx.AsyncClient] = None):
        self.config = config or settings
        if not self.config.youtube_api_key:
            raise AppValidationError("YouTube API key is required. Set YOUTUBE_API_KEY.", "YOUTUBE_KEY_MISSING")
        self.base_url = self.config.youtube_base_url.rstrip("/")
        self._client = http_client or build_http_client(timeout=self.config.http_timeout)

    async def close(self) -> None:
        """Close the underlying connections."""
        await self._client.aclose()

    async def _get(self, path: str, params: Dict[str, Any]) -> httpx.Response:
        return await self._client.get(
            f"{self.base_url}{path}",
            params={**params, "key": self.config.youtube_api_key},
        )

    async def _channels(self, **lookup) -> tuple[httpx.Response, Dict[str, Any]]:
        resp = await self._get("/channels", {"part": CHANNEL_PARTS, **lookup})
        return resp, resp.json()

    async def get_channel_info(self, channel_url: str) -> YouTubeChannel:
        """Resolve a channel from a channel URL, a handle URL or any video URL."""
        identifier = extract_channel_id(channel_url)
        is_handle = "/@" in channel_url

        if not identifier:
            video_id = extract_video_id(channel_url)
            if video_id:
                details = await self.get_video_details([video_id])
                if details:
                    identifier = details[0].channelId
                    is_handle = False
            if not identifier:
                raise AppValidationError("Invalid YouTube channel URL format", "INVALID_CHANNEL_URL")

        if is_handle:
            resp, data = await self._channels(forHandle=identifier)
        else:
            resp, data = await self._channels(id=identifier)

        if not data.get("items"):
            if not is_handle:
                # Legacy usernames
                resp, data = await self._channels(forUsername=identifier)
            elif data.get("error"):
                raise ExternalServiceError(f"YouTube API Error: {data['error'].get('message')}", "YOUTUBE_API_ERROR")

        if not resp.is_success or not data.get("items"):
            message = (data.get("error") or {}).get("message") or "Channel not found or invalid URL"
            raise ExternalServiceError(message, "YOUTUBE_CHANNEL_NOT_FOUND")

        return _to_channel(data["items"][0])

    async def get_channel_videos(
        self,
        uploads_playlist_id: str,
        max_results: int = 50,
        page_token: Optional[str] = None,
    ) -> VideoPage:
        """One page of a channel's uploads with full video details."""
        params = {
            "part": "contentDetails",
            "playlistId": uploads_playlist_id,
            "maxResults": str(min(max_results, 50)),
        }
        if page_token:
            params["pageToken"] = page_token

        resp = await self._get("/playlistItems", params)
        if not resp.is_success:
            try:
                message = (resp.json().get("error") or {}).get("message")
            except ValueError:
                message = None
            message = message or f"HTTP {resp.status_code}: {resp.reason_phrase}"
            raise ExternalServiceError(f"Failed to load channel videos: {message}", "YOUTUBE_API_ERROR")

        data = resp.json()
        items = data.get("items") or []
        if not items:
            return VideoPage()

        video_ids = [item["contentDetails"]["videoId"] for item in items]
        return VideoPage(
            videos=await self.get_video_details(video_ids),
            nextPageToken=data.get("nextPageToken"),
        )

    async def get_video_details(self, video_ids: List[str]) -> List[YouTubeVideo]:
        """Details for a batch of video ids."""
        resp = await self._get("/videos", {"part": CHANNEL_PARTS, "id": ",".join(video_ids)})
        if not resp.is_success:
            raise ExternalServiceError("Failed to load video details", "YOUTUBE_API_ERROR")
        return [_to_video(item) for item in resp.json().get("items") or []]
