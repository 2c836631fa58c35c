"""Video catalog client."""

from dataclasses import dataclass
from typing import Protocol

import httpx
from pydantic import ValidationError

from barn_gateway.adapters.identity_client import bearer
from barn_gateway.adapters.payloads import VideoListPayload
from barn_gateway.domain.errors import ErrorKind, Ok, Result, classify_status, err
from barn_gateway.domain.videos import VideoRecord


class VideoClient(Protocol):
    """Interface for the API's video catalog."""

    async def list_videos(
        self, channel: str | None = None
    ) -> Result[list[VideoRecord]]:
        """Return videos, optionally restricted to one channel."""

    async def get_video(self, video_id: str) -> Result[VideoRecord]:
        """Return a single video or NOT_FOUND."""

    async def delete_videos(self, video_ids: list[str], token: str) -> Result[None]:
        """Delete videos owned by the token's user."""


@dataclass
class HttpxVideoClient(VideoClient):
    """Video catalog client implemented with httpx."""

    api_url: str
    http_client: httpx.AsyncClient
    timeout: float = 10

    @classmethod
    def create(cls, api_url: str, timeout: float = 10) -> "HttpxVideoClient":
        """Create a video client with a managed httpx session."""
        return cls(
            api_url=api_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def list_videos(
        self, channel: str | None = None
    ) -> Result[list[VideoRecord]]:
        """Call ``GET /video`` with an optional username filter."""
        params = {"username": channel} if channel else {}
        return await self._fetch(params)

    async def get_video(self, video_id: str) -> Result[VideoRecord]:
        """Call ``GET /video?id=``."""
        result = await self._fetch({"id": video_id})
        match result:
            case Ok([first, *_]):
                return Ok(first)
            case Ok(_):
                return err(ErrorKind.NOT_FOUND, f"Video {video_id} not found")
        return result

    async def delete_videos(self, video_ids: list[str], token: str) -> Result[None]:
        """Call ``DELETE /video?id=a,b``."""
        if not video_ids:
            return err(ErrorKind.INVALID_REQUEST, "No video ids supplied")
        try:
            response = await self.http_client.delete(
                f"{self.api_url}/video",
                params={"id": ",".join(video_ids)},
                headers=bearer(token),
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            return err(ErrorKind.UNKNOWN, f"Error deleting videos: {exc!r}")
        if response.status_code == httpx.codes.NOT_FOUND:
            return err(ErrorKind.NOT_FOUND, "Videos not found", status=404)
        if not response.is_success:
            return classify_status(response.status_code)
        return Ok(None)

    async def _fetch(self, params: dict[str, str]) -> Result[list[VideoRecord]]:
        try:
            response = await self.http_client.get(
                f"{self.api_url}/video", params=params, timeout=self.timeout
            )
        except httpx.HTTPError as exc:
            return err(ErrorKind.UNKNOWN, f"Error fetching videos: {exc!r}")
        if response.status_code == httpx.codes.NOT_FOUND:
            return Ok([])
        if not response.is_success:
            return err(
                ErrorKind.UNKNOWN,
                f"Error fetching videos, status: {response.status_code}",
                status=response.status_code,
            )
        try:
            payload = VideoListPayload.model_validate(response.json())
        except (ValueError, ValidationError):
            return err(ErrorKind.UNKNOWN, "Video response could not be decoded")
        return Ok([video.to_record(self.api_url) for video in payload.videos or []])

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
