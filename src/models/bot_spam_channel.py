"""Bot spam channel model.

Stores, per guild, the channel where the bot posts status updates.
"""

import uuid

from sqlalchemy import BigInteger
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, TimestampMixin


class BotSpamChannel(Base, TimestampMixin):
    """One status channel per guild. Replaced when set again."""

    __tablename__ = "bot_spam_channels"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    guild_id: Mapped[int] = mapped_column(
        BigInteger,
        unique=True,
        nullable=False,
        index=True,
    )

    channel_id: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<BotSpamChannel(guild_id={self.guild_id}, "
            f"channel_id={self.channel_id})>"
        )
