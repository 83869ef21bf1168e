"""
YouTube Data API view models.
"""
from pydantic import BaseModel


class YouTubeChannel(BaseModel):
    """Channel summary."""
    id: str
    name: str
    description: str = ""
    subscriberCount: str = "0"
    videoCount: int = 0
    uploadsPlaylistId: str = ""


class YouTubeVideo(BaseModel):
    """Video summary."""
    id: str
    title: str = ""
    thumbnail: str = ""
    duration: str = "0:00"
    views: str = "0"
    publishedAt: str | None = None
    description: str = ""
    channelId: str = ""


class VideoPage(BaseModel):
    """A page of channel uploads."""
    videos: list[YouTubeVideo] = []
    nextPageToken: str | None = None
