"""SlimeBot FastAPI Application."""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from src.config import settings, validate_discord_settings
from src.core.migrations import run_migrations_in_thread
from src.core.purge.errors import DiscordApiError
from src.database import close_database
from src.logging_config import get_logger, setup_logging
from src.middleware import CorrelationIdMiddleware
from src.routers import discord, health
from src.services.discord_api import get_discord_client
from src.services.discord_commands import COMMAND_DEFINITIONS
from src.services.purge_command import cancel_running_purges

setup_logging(
    log_format=settings.log_format,
    log_level=settings.log_level,
    service_name=settings.service_name,
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    validate_discord_settings()
    logger.info("SlimeBot API started", environment=str(settings.environment))

    if settings.database_migrate_on_startup and not settings.testing:
        await run_migrations_in_thread()

    if settings.discord_register_commands and not settings.testing:
        try:
            await get_discord_client().register_global_commands(COMMAND_DEFINITIONS)
        except DiscordApiError as exc:
            logger.warning("Failed to register Discord commands", error=str(exc))

    yield

    # Shutdown
    logger.info("Shutting down SlimeBot API...")
    cancelled = await cancel_running_purges()
    if cancelled:
        logger.warning("Cancelled in-flight purges", count=cancelled)
    await close_database()
    logger.info("SlimeBot API shutdown complete")


app = FastAPI(
    title="SlimeBot API",
    description="Discord moderation bot: rate-limited purging of old channel messages",
    version="0.1.0",
    lifespan=lifespan,
)

# Add correlation ID middleware for request tracing
app.add_middleware(CorrelationIdMiddleware)

# Include routers
app.include_router(health.router)
app.include_router(discord.router)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint."""
    return {
        "name": "SlimeBot API",
        "version": "0.1.0",
        "docs": "/docs",
    }
