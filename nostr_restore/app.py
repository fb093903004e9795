"""
FastAPI application factory for the Nostr Event Restore Service.

This module creates the main FastAPI app with:
- Archive connection pool lifecycle management
- Exception handlers mapping service errors to HTTP status codes
- HTML routes
- Static file serving for the browser script and stylesheet
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles

from .archive_store import ArchiveStore
from .config import Settings
from .errors import ArchiveUnavailableError, InvalidIdentifierError, TemplateRenderError
from .relay_client import ProfileFetcher
from .routes import router

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage archive connection pool lifecycle."""
    settings: Settings = app.state.settings
    owns_store = app.state.archive_store is None

    if owns_store:
        app.state.archive_store = await ArchiveStore.connect(
            settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            timeout=settings.db_connect_timeout,
        )

    yield

    if owns_store:
        await app.state.archive_store.close()
        app.state.archive_store = None


async def handle_invalid_identifier(request: Request, exc: InvalidIdentifierError) -> PlainTextResponse:
    logger.info(f"Rejected identifier {exc.identifier!r}: {exc.message}")
    return PlainTextResponse("Invalid npub format", status_code=400)


async def handle_archive_unavailable(
    request: Request, exc: ArchiveUnavailableError
) -> PlainTextResponse:
    logger.error(f"Archive unavailable: {exc.message}", extra={"details": exc.details})
    return PlainTextResponse("Archive unavailable", status_code=500)


async def handle_template_render(request: Request, exc: TemplateRenderError) -> PlainTextResponse:
    logger.error(f"Template render failed: {exc.message}", extra={"details": exc.details})
    return PlainTextResponse("Failed to render page", status_code=500)


def create_app(
    settings: Settings | None = None,
    archive_store: ArchiveStore | None = None,
    profile_fetcher: ProfileFetcher | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Configuration (loaded from environment if not provided)
        archive_store: Pre-built store; if None, a pool is opened on startup
        profile_fetcher: Pre-built fetcher; if None, built from settings
    """
    settings = settings or Settings()

    app = FastAPI(
        title="Nostr Event Restore Service",
        description="Browse archived Nostr events by npub and restore contact lists.",
        version="1.0.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )

    app.state.settings = settings
    app.state.archive_store = archive_store
    app.state.profile_fetcher = profile_fetcher or ProfileFetcher(
        settings.profile_relays,
        timeout=settings.relay_timeout,
    )

    app.add_exception_handler(InvalidIdentifierError, handle_invalid_identifier)
    app.add_exception_handler(ArchiveUnavailableError, handle_archive_unavailable)
    app.add_exception_handler(TemplateRenderError, handle_template_render)

    app.include_router(router)

    @app.get("/health")
    async def health(request: Request):
        store: ArchiveStore | None = request.app.state.archive_store
        healthy = store is not None and await store.ping()
        return JSONResponse(
            {"status": "healthy" if healthy else "unhealthy", "service": "nostr-restore"},
            status_code=200 if healthy else 503,
        )

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    return app
