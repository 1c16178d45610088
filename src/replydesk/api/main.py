"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from replydesk.infrastructure import get_settings
from replydesk.infrastructure.logging import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Mailbox: {settings.mail_user or '<unset>'} on {settings.imap_host}")

    yield

    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Unread inbox, AI reply suggestions and reply sending for one mailbox",
        lifespan=lifespan,
    )

    from replydesk.api.routes import router

    app.include_router(router)

    return app


# Create app instance
app = create_app()
