"""Create bot_spam_channels table.

Revision ID: 001_bot_spam_channels
Revises:
Create Date: 2026-10-19
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "001_bot_spam_channels"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "bot_spam_channels",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column(
            "guild_id",
            sa.BigInteger(),
            nullable=False,
            unique=True,
        ),
        sa.Column(
            "channel_id",
            sa.BigInteger(),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "ix_bot_spam_channels_guild_id",
        "bot_spam_channels",
        ["guild_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_bot_spam_channels_guild_id", table_name="bot_spam_channels")
    op.drop_table("bot_spam_channels")
