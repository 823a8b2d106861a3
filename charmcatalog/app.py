"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from charmcatalog import __version__
from charmcatalog.api import create_router
from charmcatalog.config import Settings, get_settings
from charmcatalog.db.database import Database
from charmcatalog.exceptions import CatalogError

API_PREFIX = "/v5"

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Apply the configured log level to the root logger.

    Args:
        settings: Application settings.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_lifespan(settings: Settings):
    """Create a lifespan context manager.

    Args:
        settings: Application settings.

    Returns:
        Lifespan context manager.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Open the database on startup and close it on shutdown.

        Args:
            app: FastAPI application.

        Yields:
            None.
        """
        db = Database(settings.database_url)
        await db.initialize()
        app.state.db = db

        logger.info("Charm catalog started")

        yield

        await db.close()
        logger.info("Charm catalog stopped")

    return lifespan


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = get_settings()

    configure_logging(settings)

    app = FastAPI(
        title="Charm Catalog",
        description="Charm and bundle catalog",
        version=__version__,
        lifespan=create_lifespan(settings),
        docs_url=f"{API_PREFIX}/docs",
        redoc_url=f"{API_PREFIX}/redoc",
    )
    app.dependency_overrides[get_settings] = lambda: settings

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CatalogError)
    async def catalog_error_handler(
        request: Request,
        exc: CatalogError,
    ) -> JSONResponse:
        """Handle catalog errors.

        Args:
            request: FastAPI request.
            exc: Catalog error.

        Returns:
            JSON error response.
        """
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "code": exc.kind.value},
        )

    @app.middleware("http")
    async def add_request_state(request: Request, call_next):
        """Add the database to request state.

        Args:
            request: FastAPI request.
            call_next: Next middleware.

        Returns:
            Response.
        """
        if hasattr(app.state, "db"):
            request.state.db = app.state.db
        return await call_next(request)

    app.include_router(create_router(), prefix=API_PREFIX)

    return app
