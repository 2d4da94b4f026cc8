"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from nutrivision.api.assistant import router as assistant_router
from nutrivision.api.auth import router as auth_router
from nutrivision.api.profile import router as profile_router
from nutrivision.app_logging import configure_logging
from nutrivision.containers import AppContainer
from nutrivision.services.sessions import NotAuthenticatedError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Starting NutriVision (environment=%s, storage=%s)",
            container.settings.environment,
            container.settings.storage_backend,
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.state.pending_quizzes = {}

    app.include_router(auth_router)
    app.include_router(profile_router)
    app.include_router(assistant_router)

    @app.exception_handler(NotAuthenticatedError)
    async def not_authenticated(
        request: Request, exc: NotAuthenticatedError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED, content={"detail": str(exc)}
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
