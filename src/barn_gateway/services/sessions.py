"""Per-request session resolution backed by a cookie-held bearer token."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

from starlette.requests import Request
from starlette.responses import Response

from barn_gateway.adapters.identity_client import IdentityClient
from barn_gateway.domain.errors import Err, ErrorKind, Ok
from barn_gateway.domain.identity import Identity, SessionCredential

_logger = logging.getLogger(__name__)

COOKIE_PATH = "/"
COOKIE_SAME_SITE = "strict"


@dataclass
class CookieTokenStore:
    """Reads and writes the single session credential cookie."""

    cookie_name: str = "jwt"
    ttl_hours: int = 24
    secure: bool = False

    def read(self, request: Request) -> str | None:
        """Return the session token, or None when absent or empty."""
        return request.cookies.get(self.cookie_name) or None

    def issue(self, response: Response, token: str) -> SessionCredential:
        """Set the session cookie and return the credential written."""
        credential = SessionCredential(
            value=token,
            expires_at=datetime.now(tz=UTC) + timedelta(hours=self.ttl_hours),
            path=COOKIE_PATH,
            http_only=True,
            secure=self.secure,
            same_site=COOKIE_SAME_SITE,
        )
        response.set_cookie(
            self.cookie_name,
            credential.value,
            expires=credential.expires_at,
            path=credential.path,
            secure=credential.secure,
            httponly=credential.http_only,
            samesite=credential.same_site,
        )
        return credential

    def clear(self, response: Response) -> None:
        """Delete the session cookie. The path must match the one it was set on."""
        response.delete_cookie(
            self.cookie_name,
            path=COOKIE_PATH,
            secure=self.secure,
            httponly=True,
            samesite=COOKIE_SAME_SITE,
        )


class SessionOutcome(Enum):
    """Terminal states of session resolution."""

    NO_COOKIE = "no_cookie"
    ALREADY_ATTACHED = "already_attached"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


@dataclass(frozen=True)
class SessionResolution:
    """Outcome of resolving one request's session."""

    outcome: SessionOutcome
    identity: Identity | None = None
    token: str | None = None
    clear_cookie: bool = False


def current_identity(request: Request) -> Identity | None:
    """Return the identity attached to this request, if any."""
    return getattr(request.state, "identity", None)


def current_token(request: Request) -> str | None:
    """Return the validated session token for this request, if any."""
    return getattr(request.state, "session_token", None)


@dataclass
class SessionResolver:
    """Attaches a resolved identity to each request or invalidates its cookie.

    Resolution never rejects a request: on any failure the request continues
    unauthenticated and the cookie is cleared in the same response.
    """

    token_store: CookieTokenStore
    identity_client: IdentityClient

    async def resolve(self, request: Request) -> SessionResolution:
        """Resolve the request's session and record it on ``request.state``."""
        token = self.token_store.read(request)
        if token is None:
            resolution = SessionResolution(outcome=SessionOutcome.NO_COOKIE)
        elif current_identity(request) is not None:
            resolution = SessionResolution(
                outcome=SessionOutcome.ALREADY_ATTACHED,
                identity=current_identity(request),
                token=token,
            )
        else:
            resolution = await self._resolve_remote(token)
        request.state.identity = resolution.identity
        request.state.session_token = (
            resolution.token if resolution.identity is not None else None
        )
        request.state.session_resolution = resolution
        return resolution

    async def _resolve_remote(self, token: str) -> SessionResolution:
        match await self.identity_client.resolve(token):
            case Ok(identity):
                return SessionResolution(
                    outcome=SessionOutcome.AUTHENTICATED,
                    identity=identity,
                    token=token,
                )
            case Err(error) if error.kind is ErrorKind.INVALID_TOKEN:
                _logger.info("Session token rejected, status=%s", error.status)
            case Err(error):
                _logger.warning(
                    "Identity resolution failed (%s): %s; clearing session",
                    error.kind.value,
                    error.message,
                )
        return SessionResolution(
            outcome=SessionOutcome.UNAUTHENTICATED, clear_cookie=True
        )

    def mark_issued(self, request: Request, response: Response, token: str) -> None:
        """Issue a fresh credential for this request's response."""
        self.token_store.issue(response, token)
        request.state.credential_issued = True

    def mark_cleared(self, request: Request, response: Response) -> None:
        """Clear the credential on this request's response."""
        self.token_store.clear(response)
        request.state.credential_issued = False

    def finalize(self, request: Request, response: Response) -> None:
        """Apply the deferred cookie deletion unless a handler replaced it."""
        resolution: SessionResolution | None = getattr(
            request.state, "session_resolution", None
        )
        if resolution is None or not resolution.clear_cookie:
            return
        if getattr(request.state, "credential_issued", None) is not None:
            return
        self.token_store.clear(response)
