"""Twitch OAuth redirect and callback endpoints."""

import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from barn_gateway.api.dependencies import get_container
from barn_gateway.containers import AppContainer
from barn_gateway.domain.errors import ConfigurationError, Err, Ok
from barn_gateway.services.sessions import current_token

router = APIRouter(prefix="/auth/twitch", tags=["oauth"])

_logger = logging.getLogger(__name__)


@router.get("")
async def twitch_redirect(
    container: AppContainer = Depends(get_container),
) -> RedirectResponse:
    """Send the user to Twitch to authorize the application."""
    try:
        url = container.oauth_service.authorize_url()
    except ConfigurationError:
        _logger.exception("Failed to initialize Twitch OAuth")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        ) from None
    return RedirectResponse(url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.get("/callback")
async def twitch_callback(  # noqa: PLR0913
    request: Request,
    code: str | None = None,
    error: str | None = None,
    error_description: str | None = None,
    container: AppContainer = Depends(get_container),
) -> RedirectResponse:
    """Complete the authorization-code flow and sign the user in."""
    try:
        result = await container.oauth_service.handle_callback(
            code,
            error=error,
            error_description=error_description,
            current_token=current_token(request),
        )
    except ConfigurationError:
        _logger.exception("Failed to get Twitch credentials")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        ) from None
    match result:
        case Ok(account):
            response = RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
            container.session_resolver.mark_issued(request, response, account.token)
            return response
        case Err(failure):
            query = urlencode({"error": failure.kind.value})
            return RedirectResponse(
                f"/login?{query}", status_code=status.HTTP_303_SEE_OTHER
            )
