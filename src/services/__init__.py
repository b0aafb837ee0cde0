# Business Logic Services
from src.services.discord_api import DiscordClient, get_discord_client
from src.services.purge_command import (
    cancel_running_purges,
    purge_old,
    run_purge_task,
    start_purge_task,
)
from src.services.spam_channel import get_spam_channel, set_spam_channel

__all__ = [
    "DiscordClient",
    "get_discord_client",
    "cancel_running_purges",
    "purge_old",
    "run_purge_task",
    "start_purge_task",
    "get_spam_channel",
    "set_spam_channel",
]
