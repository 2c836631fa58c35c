"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError

from barn_gateway.api.accounts import router as accounts_router
from barn_gateway.api.errors import validation_error_handler
from barn_gateway.api.oauth import router as oauth_router
from barn_gateway.api.uploads import router as uploads_router
from barn_gateway.api.videos import router as videos_router
from barn_gateway.app_logging import configure_logging
from barn_gateway.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Gateway starting against %s", container.settings.api_base_url)
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    @app.middleware("http")
    async def resolve_session(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Resolve the session once per request before any route runs."""
        resolver = request.app.state.container.session_resolver
        await resolver.resolve(request)
        response = await call_next(request)
        resolver.finalize(request, response)
        return response

    app.include_router(accounts_router)
    app.include_router(oauth_router)
    app.include_router(uploads_router)
    app.include_router(videos_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
