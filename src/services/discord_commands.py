"""Slash command definitions and handlers.

Supported commands (administrators only, guild only):
  /purge_old        – Delete messages older than the retention period
  /set_spam_channel – Choose where bot status updates are posted

Each handler returns the interaction response body the endpoint sends
back to Discord. ``purge_old`` defers and continues in a background task.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.purge.errors import SpamChannelError
from src.logging_config import get_logger
from src.schemas.discord import Interaction, InteractionResponseType
from src.services.discord_api import EPHEMERAL_FLAG, DiscordClient
from src.services.purge_command import start_purge_task
from src.services.spam_channel import set_spam_channel

logger = get_logger(__name__)

# Application command option types
OPTION_BOOLEAN = 5
OPTION_CHANNEL = 7
# Guild text channel
CHANNEL_TYPE_GUILD_TEXT = 0

ADMINISTRATOR = "8"

COMMAND_DEFINITIONS: list[dict[str, Any]] = [
    {
        "name": "purge_old",
        "description": (
            "Bulk deletes messages from the supplied channel. "
            "Warning: This can take a very long time."
        ),
        "default_member_permissions": ADMINISTRATOR,
        "dm_permission": False,
        "options": [
            {
                "name": "channel",
                "description": "the channel to purge from",
                "type": OPTION_CHANNEL,
                "channel_types": [CHANNEL_TYPE_GUILD_TEXT],
                "required": True,
            },
            {
                "name": "dry_run",
                "description": (
                    "whether to actually run the command or merely show "
                    "progress as if it were running"
                ),
                "type": OPTION_BOOLEAN,
                "required": False,
            },
        ],
    },
    {
        "name": "set_spam_channel",
        "description": (
            "Sets the channel where bot spam (e.g. status updates) should "
            "happen. Default: current channel"
        ),
        "default_member_permissions": ADMINISTRATOR,
        "dm_permission": False,
        "options": [
            {
                "name": "channel",
                "description": "the channel to post bot updates in",
                "type": OPTION_CHANNEL,
                "channel_types": [CHANNEL_TYPE_GUILD_TEXT],
                "required": False,
            },
        ],
    },
]


def _ephemeral(content: str) -> dict[str, Any]:
    return {
        "type": InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE,
        "data": {"content": content, "flags": EPHEMERAL_FLAG},
    }


def _handle_purge_old(interaction: Interaction, discord: DiscordClient) -> dict[str, Any]:
    """Defer the reply and start the purge in the background."""
    channel_id = int(interaction.option("channel"))
    guild_id = int(interaction.guild_id) if interaction.guild_id else None
    dry_run = interaction.option("dry_run")

    logger.info(
        "purge_old invoked",
        channel_id=channel_id,
        guild_id=guild_id,
        user_id=interaction.actor_id,
        dry_run=dry_run,
    )
    start_purge_task(discord, interaction.token, channel_id, guild_id, dry_run)
    return {"type": InteractionResponseType.DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE}


async def _handle_set_spam_channel(
    interaction: Interaction,
    db: AsyncSession,
) -> dict[str, Any]:
    raw_channel = interaction.option("channel", interaction.channel_id)
    channel_id = int(raw_channel)
    try:
        await set_spam_channel(db, int(interaction.guild_id), channel_id)
    except SpamChannelError:
        return _ephemeral("I couldn't save that setting. Please try again later.")
    return _ephemeral(f"Bot updates will be posted in <#{channel_id}>.")


async def handle_command(
    interaction: Interaction,
    db: AsyncSession,
    discord: DiscordClient,
) -> dict[str, Any]:
    """Route a slash command to its handler.

    Args:
        interaction: Parsed APPLICATION_COMMAND interaction.
        db: Database session.
        discord: REST client.

    Returns:
        Interaction response body.
    """
    name = interaction.data.name if interaction.data else None

    if interaction.guild_id is None:
        return _ephemeral("This command can only be used in a server.")
    if not interaction.is_administrator:
        logger.warning(
            "Command rejected: not an administrator",
            command=name,
            user_id=interaction.actor_id,
        )
        return _ephemeral("You need the Administrator permission to do that.")

    if name == "purge_old":
        return _handle_purge_old(interaction, discord)
    if name == "set_spam_channel":
        return await _handle_set_spam_channel(interaction, db)

    logger.warning("Unknown command", command=name)
    return _ephemeral(f"Unknown command: {name}")
