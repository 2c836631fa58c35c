"""Domain models for multipart uploads."""

from dataclasses import dataclass
from enum import Enum


class UploadPhase(Enum):
    """Lifecycle phase of a logical upload."""

    UNINITIALIZED = "uninitialized"
    INITIATED = "initiated"
    COMPLETING = "completing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class PartUrl:
    """Pre-signed URL for a single part of a multipart upload."""

    part_number: int
    url: str


@dataclass(frozen=True)
class UploadSession:
    """Identifiers and part URLs issued when an upload starts."""

    upload_id: str
    video_id: str
    key: str
    part_urls: tuple[PartUrl, ...]

    @property
    def part_numbers(self) -> tuple[int, ...]:
        return tuple(part.part_number for part in self.part_urls)


@dataclass(frozen=True)
class CompletedPart:
    """Part acknowledged by object storage."""

    part_number: int
    etag: str


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a completed upload."""

    upload_id: str
    video_id: str
    key: str
    part_count: int
    phase: UploadPhase = UploadPhase.COMPLETED
