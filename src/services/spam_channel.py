"""Bot spam channel configuration service.

Records which channel a guild wants bot status updates posted to.
"""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.purge.errors import SpamChannelError
from src.logging_config import get_logger
from src.models.bot_spam_channel import BotSpamChannel

logger = get_logger(__name__)


async def get_spam_channel(db: AsyncSession, guild_id: int) -> BotSpamChannel | None:
    """Get the configured spam channel for a guild, if any."""
    result = await db.execute(
        select(BotSpamChannel).where(BotSpamChannel.guild_id == guild_id)
    )
    return result.scalar_one_or_none()


async def set_spam_channel(
    db: AsyncSession,
    guild_id: int,
    channel_id: int,
) -> BotSpamChannel:
    """Set (or replace) the bot spam channel for a guild.

    Args:
        db: Database session.
        guild_id: Guild the setting belongs to.
        channel_id: Channel to post status updates in.

    Returns:
        The stored BotSpamChannel row.

    Raises:
        SpamChannelError: The database write failed (after rollback).
    """
    try:
        existing = await get_spam_channel(db, guild_id)
        if existing is None:
            row = BotSpamChannel(guild_id=guild_id, channel_id=channel_id)
            db.add(row)
        else:
            existing.channel_id = channel_id
            row = existing
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error(
            "Failed to save bot spam channel",
            guild_id=guild_id,
            channel_id=channel_id,
        )
        raise SpamChannelError(f"Could not save spam channel: {exc}") from exc

    logger.info("Bot spam channel set", guild_id=guild_id, channel_id=channel_id)
    return row
