"""Alembic helpers for the bot settings schema."""

import asyncio
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory

from src.logging_config import get_logger

logger = get_logger(__name__)

APP_ROOT = Path(__file__).resolve().parent.parent.parent


def get_alembic_config() -> Config:
    """Alembic config for ``alembic.ini`` at the project root.

    Raises:
        FileNotFoundError: alembic.ini is missing (e.g. installed without
            the migrations directory).
    """
    alembic_ini = APP_ROOT / "alembic.ini"
    if not alembic_ini.exists():
        raise FileNotFoundError(f"alembic.ini not found at {alembic_ini}")

    config = Config(str(alembic_ini))
    config.set_main_option("script_location", str(APP_ROOT / "migrations"))
    return config


def get_head_revision() -> str | None:
    """Newest revision shipped with the code."""
    return ScriptDirectory.from_config(get_alembic_config()).get_current_head()


def run_migrations() -> None:
    """Upgrade the database to head. Blocking; the env script runs its own loop."""
    logger.info("Running database migrations", target=get_head_revision())
    command.upgrade(get_alembic_config(), "head")
    logger.info("Database migrations completed")


async def run_migrations_in_thread() -> None:
    """Upgrade from inside a running event loop (e.g. app startup)."""
    await asyncio.to_thread(run_migrations)
