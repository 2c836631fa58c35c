"""Multipart upload API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx
from pydantic import ValidationError

from barn_gateway.adapters.identity_client import bearer
from barn_gateway.adapters.payloads import UploadStartPayload
from barn_gateway.domain.errors import ErrorKind, Ok, Result, classify_status, err
from barn_gateway.domain.uploads import CompletedPart, UploadPhase, UploadSession

# Statuses the API uses to report that issued and completed parts disagree.
_PART_MISMATCH_STATUSES = frozenset({409, 422})


class UploadClient(Protocol):
    """Interface for the API's multipart upload endpoints."""

    async def start_upload(
        self,
        token: str,
        key: str,
        content_type: str,
        parts: int,
        title: str | None = None,
    ) -> Result[UploadSession]:
        """Start a multipart upload and return pre-signed part URLs."""

    async def complete_upload(
        self,
        token: str,
        upload_id: str,
        video_id: str,
        key: str,
        completed_parts: list[CompletedPart],
    ) -> Result[None]:
        """Assemble the uploaded parts into the final object."""


@dataclass
class HttpxUploadClient(UploadClient):
    """Upload client implemented with httpx."""

    api_url: str
    http_client: httpx.AsyncClient
    timeout: float = 10

    @classmethod
    def create(cls, api_url: str, timeout: float = 10) -> "HttpxUploadClient":
        """Create an upload client with a managed httpx session."""
        return cls(
            api_url=api_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def start_upload(
        self,
        token: str,
        key: str,
        content_type: str,
        parts: int,
        title: str | None = None,
    ) -> Result[UploadSession]:
        """Call ``POST /upload/start``."""
        phase = UploadPhase.UNINITIALIZED.value
        body: dict[str, object] = {
            "parts": parts,
            "key": key,
            "content_type": content_type,
        }
        if title:
            body["title"] = title
        try:
            response = await self.http_client.post(
                f"{self.api_url}/upload/start",
                json=body,
                headers=bearer(token),
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            return err(
                ErrorKind.INIT_FAILED,
                f"Failed to initialize upload: {exc!r}",
                phase=phase,
            )
        if not response.is_success:
            return err(
                ErrorKind.INIT_FAILED,
                "Failed to initialize upload",
                status=response.status_code,
                phase=phase,
            )
        try:
            payload = UploadStartPayload.model_validate(response.json())
        except (ValueError, ValidationError):
            return err(
                ErrorKind.INIT_FAILED,
                "Upload start response could not be decoded",
                status=response.status_code,
                phase=phase,
            )
        return Ok(payload.to_session(default_key=key))

    async def complete_upload(
        self,
        token: str,
        upload_id: str,
        video_id: str,
        key: str,
        completed_parts: list[CompletedPart],
    ) -> Result[None]:
        """Call ``POST /upload/complete``."""
        phase = UploadPhase.COMPLETING.value
        body = {
            "upload_id": upload_id,
            "video_id": video_id,
            "key": key,
            "completed_parts": [
                {"part_number": part.part_number, "etag": part.etag}
                for part in completed_parts
            ],
        }
        try:
            response = await self.http_client.post(
                f"{self.api_url}/upload/complete",
                json=body,
                headers=bearer(token),
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            return err(
                ErrorKind.UNKNOWN,
                f"Failed to complete upload: {exc!r}",
                phase=phase,
            )
        if response.status_code in _PART_MISMATCH_STATUSES:
            return err(
                ErrorKind.INCOMPLETE_PARTS,
                "Completed parts do not match the parts issued",
                status=response.status_code,
                phase=phase,
            )
        if not response.is_success:
            return classify_status(response.status_code, phase=phase)
        return Ok(None)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
