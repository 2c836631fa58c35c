"""Translate classified gateway errors into HTTP responses."""

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from barn_gateway.domain.errors import ErrorKind, GatewayError
from barn_gateway.services.sessions import SessionResolver

_STATUS_BY_KIND = {
    ErrorKind.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_TOKEN: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.AUTHORIZATION_FAILED: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INCOMPLETE_PARTS: status.HTTP_409_CONFLICT,
    ErrorKind.PROVIDER_REJECTED: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.MALFORMED_GRANT: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.MALFORMED_PROFILE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.UNKNOWN: status.HTTP_502_BAD_GATEWAY,
}


def http_status_for(error: GatewayError) -> int:
    """Pick the HTTP status to report for a classified error."""
    if error.kind is ErrorKind.INIT_FAILED:
        # Surface the upstream status so the caller can decide to retry.
        if error.status is not None and error.status >= 400:  # noqa: PLR2004
            return error.status
        return status.HTTP_502_BAD_GATEWAY
    return _STATUS_BY_KIND[error.kind]


def error_response(error: GatewayError) -> JSONResponse:
    """Render a classified error with its kind, upstream status and phase."""
    return JSONResponse(
        status_code=http_status_for(error),
        content={
            "error": error.message,
            "kind": error.kind.value,
            "status": error.status,
            "phase": error.phase,
        },
    )


def session_error_response(
    request: Request, resolver: SessionResolver, error: GatewayError
) -> JSONResponse:
    """Render an error from a call made with the session token.

    An upstream rejection of that token also clears the session cookie.
    """
    response = error_response(error)
    if error.kind is ErrorKind.INVALID_TOKEN:
        resolver.mark_cleared(request, response)
    return response


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as INVALID_REQUEST."""
    problems = [
        f"{'.'.join(str(part) for part in problem['loc'][1:])}: {problem['msg']}"
        for problem in exc.errors()
    ]
    return error_response(
        GatewayError(
            kind=ErrorKind.INVALID_REQUEST,
            message="; ".join(problems) or "Invalid request",
        )
    )
