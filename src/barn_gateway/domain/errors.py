"""Error taxonomy and typed results shared by all gateway clients."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(Enum):
    """Closed set of failure kinds surfaced by the gateway."""

    INVALID_TOKEN = "invalid_token"
    NOT_FOUND = "not_found"
    PROVIDER_REJECTED = "provider_rejected"
    MALFORMED_GRANT = "malformed_grant"
    MALFORMED_PROFILE = "malformed_profile"
    INVALID_REQUEST = "invalid_request"
    INIT_FAILED = "init_failed"
    INCOMPLETE_PARTS = "incomplete_parts"
    AUTHORIZATION_FAILED = "authorization_failed"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class GatewayError:
    """A classified failure, with upstream status and lifecycle phase if known."""

    kind: ErrorKind
    message: str
    status: int | None = None
    phase: str | None = None


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful result."""

    value: T


@dataclass(frozen=True)
class Err:
    """Failed result."""

    error: GatewayError

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind


Result = Ok[T] | Err


class ConfigurationError(Exception):
    """Raised when required deployment configuration is missing."""


def err(
    kind: ErrorKind,
    message: str,
    status: int | None = None,
    phase: str | None = None,
) -> Err:
    """Build an ``Err`` for the given kind."""
    return Err(GatewayError(kind=kind, message=message, status=status, phase=phase))


# Statuses that mean the upstream rejected the bearer credential itself.
TOKEN_REJECTED_STATUSES = frozenset({400, 401, 403})


def classify_status(status: int, phase: str | None = None) -> Err:
    """Classify a non-2xx status from a bearer-authenticated upstream call."""
    if status in TOKEN_REJECTED_STATUSES:
        return err(
            ErrorKind.INVALID_TOKEN,
            f"Upstream rejected credential, status: {status}",
            status=status,
            phase=phase,
        )
    return err(
        ErrorKind.UNKNOWN,
        f"Unexpected upstream response, status: {status}",
        status=status,
        phase=phase,
    )
