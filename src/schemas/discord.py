"""Discord interaction schemas.

Only the fields the bot reads are modelled; everything else in the
payload is ignored.
"""

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, Field

# Permission bit for ADMINISTRATOR
ADMINISTRATOR_PERMISSION = 1 << 3


class InteractionType(IntEnum):
    PING = 1
    APPLICATION_COMMAND = 2
    MESSAGE_COMPONENT = 3


class InteractionResponseType(IntEnum):
    PONG = 1
    CHANNEL_MESSAGE_WITH_SOURCE = 4
    DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE = 5
    DEFERRED_UPDATE_MESSAGE = 6
    UPDATE_MESSAGE = 7


class DiscordUser(BaseModel):
    id: str
    username: str | None = None


class GuildMember(BaseModel):
    """The invoking member, present for interactions inside a guild."""

    user: DiscordUser | None = None
    permissions: str = "0"


class CommandOption(BaseModel):
    name: str
    type: int
    value: Any = None


class InteractionData(BaseModel):
    """``data`` for both slash commands and component clicks."""

    name: str | None = None
    options: list[CommandOption] = Field(default_factory=list)
    custom_id: str | None = None
    component_type: int | None = None


class InteractionMessage(BaseModel):
    """The message a clicked component is attached to."""

    id: str
    content: str = ""


class Interaction(BaseModel):
    """Incoming request to the interactions endpoint."""

    id: str
    application_id: str
    type: InteractionType
    token: str
    guild_id: str | None = None
    channel_id: str | None = None
    member: GuildMember | None = None
    user: DiscordUser | None = None
    data: InteractionData | None = None
    message: InteractionMessage | None = None

    @property
    def actor_id(self) -> int | None:
        """ID of whoever invoked the command or clicked the button."""
        actor = self.member.user if self.member and self.member.user else self.user
        return int(actor.id) if actor else None

    @property
    def is_administrator(self) -> bool:
        if self.member is None:
            return False
        return bool(int(self.member.permissions) & ADMINISTRATOR_PERMISSION)

    def option(self, name: str, default: Any = None) -> Any:
        """Value of a slash command option, or ``default`` if not supplied."""
        if self.data is None:
            return default
        for opt in self.data.options:
            if opt.name == name:
                return opt.value
        return default
