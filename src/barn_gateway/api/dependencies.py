"""Request-scoped dependencies shared by the routers."""

from fastapi import HTTPException, Request, status

from barn_gateway.containers import AppContainer
from barn_gateway.domain.identity import Identity
from barn_gateway.services.sessions import current_identity, current_token


def get_container(request: Request) -> AppContainer:
    """Return the container attached to the application."""
    return request.app.state.container


def require_identity(request: Request) -> Identity:
    """Return the resolved identity or reject the request with 401."""
    identity = current_identity(request)
    if identity is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return identity


def require_token(request: Request) -> str:
    """Return the validated session token or reject the request with 401."""
    token = current_token(request)
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return token
