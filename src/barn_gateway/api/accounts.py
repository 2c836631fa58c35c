"""Login, registration, logout and account settings endpoints."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from barn_gateway.api.dependencies import get_container, require_identity, require_token
from barn_gateway.api.errors import error_response, session_error_response
from barn_gateway.api.models import LoginRequest, RegisterRequest, TwitchSettingsRequest
from barn_gateway.containers import AppContainer
from barn_gateway.domain.errors import Err, Ok
from barn_gateway.domain.identity import Identity

router = APIRouter(tags=["accounts"])


def _identity_body(identity: Identity) -> dict[str, str]:
    return {
        "id": identity.id,
        "username": identity.username,
        "email": identity.email,
        "role": identity.role.value,
    }


@router.post("/login")
async def login(
    body: LoginRequest,
    request: Request,
    container: AppContainer = Depends(get_container),
) -> JSONResponse:
    """Exchange credentials for a session cookie."""
    match await container.account_service.login(body.username, body.password):
        case Ok(token):
            response = JSONResponse({"status": "ok"})
            container.session_resolver.mark_issued(request, response, token)
            return response
        case Err(error):
            return error_response(error)


@router.post("/register")
async def register(
    body: RegisterRequest,
    request: Request,
    container: AppContainer = Depends(get_container),
) -> JSONResponse:
    """Create an account and sign it in."""
    result = await container.account_service.register(
        body.username, body.email, body.password, body.password_confirmation
    )
    match result:
        case Ok(token):
            response = JSONResponse({"status": "ok"})
            container.session_resolver.mark_issued(request, response, token)
            return response
        case Err(error):
            return error_response(error)


@router.post("/logout")
async def logout(
    request: Request, container: AppContainer = Depends(get_container)
) -> JSONResponse:
    """Drop the session cookie."""
    response = JSONResponse({"status": "ok"})
    container.session_resolver.mark_cleared(request, response)
    return response


@router.get("/me")
async def me(identity: Identity = Depends(require_identity)) -> dict[str, str]:
    """Return the identity resolved for this request."""
    return _identity_body(identity)


@router.put("/me/settings")
async def update_settings(
    body: TwitchSettingsRequest,
    request: Request,
    identity: Identity = Depends(require_identity),
    token: str = Depends(require_token),
    container: AppContainer = Depends(get_container),
) -> JSONResponse:
    """Update Twitch notification settings for the signed-in user."""
    result = await container.account_service.update_settings(
        identity, token, body.to_toggles()
    )
    match result:
        case Ok(updated):
            return JSONResponse({"success": True, "user": _identity_body(updated)})
        case Err(error):
            return session_error_response(
                request, container.session_resolver, error
            )
