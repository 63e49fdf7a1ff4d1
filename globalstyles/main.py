"""
Global Styles API application.

Run with an ASGI server, e.g.::

    uvicorn globalstyles.main:app
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from globalstyles import __version__
from globalstyles.config import Settings, get_settings
from globalstyles.core.database import get_engine, get_session_factory
from globalstyles.core.exceptions import register_exception_handlers
from globalstyles.repositories.global_styles import GlobalStylesRepository
from globalstyles.routers.global_styles import router as global_styles_router

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


async def bootstrap_active_theme(settings: Settings) -> None:
    """Make sure the active theme has a user global styles document."""
    if not settings.active_theme:
        return

    async with get_session_factory()() as session:
        post = await GlobalStylesRepository(session).get_or_create_for_theme(
            settings.active_theme
        )
        await session.commit()

    logger.info(f"Active theme {settings.active_theme!r} uses global styles {post.id}")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    await bootstrap_active_theme(settings)
    yield
    await get_engine().dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Global Styles API",
        version=__version__,
        lifespan=lifespan,
    )
    register_exception_handlers(app)
    app.include_router(global_styles_router)

    logger.debug(f"Application created (environment={settings.environment})")
    return app


app = create_app()
