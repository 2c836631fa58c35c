"""Domain models for the video catalog."""

from dataclasses import dataclass


@dataclass(frozen=True)
class VideoRecord:
    """Read-only projection of a video served by the API."""

    id: str
    title: str
    status: str
    playlist_url: str
    created_at: str
    updated_at: str
