"""
FastAPI application entrypoint for the saved explorer.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from saved_explorer.api.routes import router as api_router
from saved_explorer.core.config import get_settings
from saved_explorer.core.logging import configure_logging
from saved_explorer.dependencies import get_session_manager


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    if get_session_manager.cache_info().currsize:
        await get_session_manager().aclose()


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Reddit Saved Explorer",
        version="0.1.0",
        description="OAuth session and saved-item paging for the explorer UI.",
        lifespan=_lifespan,
    )
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
