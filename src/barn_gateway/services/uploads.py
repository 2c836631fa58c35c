"""Multipart upload lifecycle orchestration."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from barn_gateway.adapters.upload_client import UploadClient
from barn_gateway.domain.errors import Err, ErrorKind, Ok, Result, err
from barn_gateway.domain.uploads import (
    CompletedPart,
    UploadPhase,
    UploadResult,
    UploadSession,
)

_logger = logging.getLogger(__name__)


@dataclass
class UploadOrchestrator:
    """Validates and forwards the start and complete calls of an upload.

    Holds no state between the two calls; the caller owns the UploadSession
    and performs the per-part transfers directly against object storage.
    Nothing is retried here: replaying a completion after a partial success
    is unsafe without upstream idempotency keys.
    """

    client: UploadClient

    async def init_upload(
        self,
        token: str,
        file_name: str | None,
        file_type: str | None,
        part_count: int | None,
        title: str | None = None,
    ) -> Result[UploadSession]:
        """Start an upload and return the issued part URLs."""
        phase = UploadPhase.UNINITIALIZED.value
        if not file_name or not file_name.strip():
            return err(ErrorKind.INVALID_REQUEST, "fileName is required", phase=phase)
        if not file_type or not file_type.strip():
            return err(ErrorKind.INVALID_REQUEST, "fileType is required", phase=phase)
        if part_count is None or part_count < 1:
            return err(
                ErrorKind.INVALID_REQUEST, "parts must be at least 1", phase=phase
            )

        result = await self.client.start_upload(
            token,
            key=file_name.strip(),
            content_type=file_type.strip(),
            parts=part_count,
            title=title.strip() if title else None,
        )
        match result:
            case Ok(session) if session.part_numbers != tuple(
                range(1, part_count + 1)
            ):
                _logger.warning(
                    "Upload %s issued parts %s, expected 1..%s",
                    session.upload_id,
                    session.part_numbers,
                    part_count,
                )
                return err(
                    ErrorKind.INIT_FAILED,
                    "Upload start returned an unexpected set of parts",
                    phase=phase,
                )
            case Ok(session):
                _logger.info(
                    "Upload %s initiated for video %s with %s parts",
                    session.upload_id,
                    session.video_id,
                    part_count,
                )
            case Err(error):
                _logger.warning(
                    "Upload init failed: %s (status=%s)", error.message, error.status
                )
        return result

    async def complete_upload(  # noqa: PLR0913
        self,
        token: str,
        upload_id: str | None,
        video_id: str | None,
        key: str | None,
        completed_parts: Iterable[CompletedPart],
        issued_part_numbers: Iterable[int] | None = None,
    ) -> Result[UploadResult]:
        """Assemble the acknowledged parts into the final object.

        Parts may be acknowledged by storage in any order; they are forwarded
        sorted by part number. When the caller passes the part numbers issued
        at start time, a missing part fails locally without a network call.
        """
        phase = UploadPhase.COMPLETING.value
        if not upload_id or not video_id or not key:
            return err(
                ErrorKind.INVALID_REQUEST,
                "upload_id, video_id and key are required",
                phase=phase,
            )
        parts = sorted(completed_parts, key=lambda part: part.part_number)
        if not parts:
            return err(ErrorKind.INVALID_REQUEST, "No completed parts", phase=phase)
        numbers = [part.part_number for part in parts]
        if numbers[0] < 1:
            return err(
                ErrorKind.INVALID_REQUEST, "Part numbers start at 1", phase=phase
            )
        if len(set(numbers)) != len(numbers):
            return err(
                ErrorKind.INVALID_REQUEST,
                "Each part must be reported exactly once",
                phase=phase,
            )
        if any(not part.etag for part in parts):
            return err(
                ErrorKind.INVALID_REQUEST, "Every part needs an etag", phase=phase
            )

        if issued_part_numbers is not None:
            issued = set(issued_part_numbers)
            unknown = sorted(set(numbers) - issued)
            if unknown:
                return err(
                    ErrorKind.INVALID_REQUEST,
                    f"Parts {unknown} were never issued",
                    phase=phase,
                )
            missing = sorted(issued - set(numbers))
            if missing:
                return err(
                    ErrorKind.INCOMPLETE_PARTS,
                    f"Parts {missing} have not completed",
                    phase=phase,
                )

        result = await self.client.complete_upload(
            token, upload_id, video_id, key, parts
        )
        match result:
            case Ok(_):
                _logger.info("Upload %s completed with %s parts", upload_id, len(parts))
                return Ok(
                    UploadResult(
                        upload_id=upload_id,
                        video_id=video_id,
                        key=key,
                        part_count=len(parts),
                    )
                )
            case Err(error):
                _logger.warning(
                    "Upload %s completion failed (%s): %s",
                    upload_id,
                    error.kind.value,
                    error.message,
                )
                return result
