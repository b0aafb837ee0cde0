"""Discord REST API client.

Handles every Discord HTTP call the bot makes: channel history,
message deletion, interaction responses/follow-ups, and slash command
registration. Any non-2xx response becomes a ``DiscordApiError``;
nothing here retries.
"""

from collections.abc import AsyncIterator
from typing import Any

import httpx

from src.config import settings
from src.core.purge.constants import (
    BULK_DELETE_MAX_MESSAGES,
    BULK_DELETE_MIN_MESSAGES,
    HISTORY_PAGE_SIZE,
)
from src.core.purge.errors import DiscordApiError
from src.core.purge.models import ChannelMessage
from src.logging_config import get_logger

logger = get_logger(__name__)

_TIMEOUT = 15.0

# Message flag: only the interacting user can see the message
EPHEMERAL_FLAG = 1 << 6


class DiscordClient:
    """Thin async wrapper over the Discord REST endpoints the bot uses.

    ``transport`` lets tests route requests to an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        token: str,
        application_id: str,
        api_base: str = "https://discord.com/api/v10",
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token = token
        self.application_id = application_id
        self.api_base = api_base.rstrip("/")
        self._transport = transport

    def _headers(self, authenticated: bool = True) -> dict[str, str]:
        h: dict[str, str] = {"Content-Type": "application/json"}
        if authenticated:
            h["Authorization"] = f"Bot {self.token}"
        return h

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any:
        """Issue one request and return the decoded body (None for 204)."""
        if authenticated and not self.token:
            raise DiscordApiError("Discord bot token is not configured")

        try:
            async with httpx.AsyncClient(
                timeout=_TIMEOUT, transport=self._transport
            ) as client:
                response = await client.request(
                    method,
                    f"{self.api_base}{path}",
                    headers=self._headers(authenticated),
                    json=json,
                    params=params,
                )
        except httpx.HTTPError as exc:
            raise DiscordApiError(f"Discord request failed: {method} {path}: {exc}") from exc

        if response.status_code >= 400:
            raise DiscordApiError(
                f"Discord API error: {response.status_code} {response.text}",
                status_code=response.status_code,
            )

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # ── Channel messages ──

    async def get_messages(
        self,
        channel_id: int,
        before: int | None = None,
        limit: int = HISTORY_PAGE_SIZE,
    ) -> list[dict[str, Any]]:
        """Fetch one page of channel history, newest first."""
        params: dict[str, Any] = {"limit": limit}
        if before is not None:
            params["before"] = str(before)
        return await self._request(
            "GET", f"/channels/{channel_id}/messages", params=params
        )

    async def iter_channel_messages(
        self,
        channel_id: int,
        guild_id: int | None = None,
    ) -> AsyncIterator[ChannelMessage]:
        """Stream a channel's whole history, newest first.

        Pages backwards with ``before=<oldest id seen>`` until a page comes
        back shorter than the page size.
        """
        before: int | None = None
        while True:
            page = await self.get_messages(channel_id, before=before)
            for payload in page:
                yield ChannelMessage.from_api(payload, guild_id)
            if len(page) < HISTORY_PAGE_SIZE:
                return
            before = int(page[-1]["id"])

    async def delete_message(self, channel_id: int, message_id: int) -> None:
        """Delete a single message. No age ceiling."""
        await self._request("DELETE", f"/channels/{channel_id}/messages/{message_id}")

    async def bulk_delete_messages(
        self,
        channel_id: int,
        message_ids: list[int],
    ) -> None:
        """Delete up to 100 messages younger than 14 days in one call.

        The bulk endpoint rejects fewer than two ids, so a single id goes
        through ``delete_message`` instead.
        """
        if not message_ids:
            return
        if len(message_ids) > BULK_DELETE_MAX_MESSAGES:
            raise ValueError(
                f"bulk delete accepts at most {BULK_DELETE_MAX_MESSAGES} messages"
            )
        if len(message_ids) < BULK_DELETE_MIN_MESSAGES:
            await self.delete_message(channel_id, message_ids[0])
            return
        await self._request(
            "POST",
            f"/channels/{channel_id}/messages/bulk-delete",
            json={"messages": [str(mid) for mid in message_ids]},
        )

    # ── Interactions ──
    # Webhook endpoints are authorized by the interaction token in the path.

    async def edit_original_response(
        self,
        interaction_token: str,
        content: str,
        components: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        """Replace the (deferred) response to a slash command."""
        body: dict[str, Any] = {"content": content}
        if components is not None:
            body["components"] = components
        return await self._request(
            "PATCH",
            f"/webhooks/{self.application_id}/{interaction_token}/messages/@original",
            json=body,
            authenticated=False,
        )

    async def create_followup(
        self,
        interaction_token: str,
        content: str,
        ephemeral: bool = False,
    ) -> dict[str, Any]:
        """Send a follow-up message for an interaction."""
        body: dict[str, Any] = {"content": content}
        if ephemeral:
            body["flags"] = EPHEMERAL_FLAG
        return await self._request(
            "POST",
            f"/webhooks/{self.application_id}/{interaction_token}",
            json=body,
            authenticated=False,
        )

    # ── Commands ──

    async def register_global_commands(
        self,
        commands: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        """Bulk-overwrite the application's global slash commands."""
        result = await self._request(
            "PUT",
            f"/applications/{self.application_id}/commands",
            json=commands,
        )
        logger.info("Discord commands registered", count=len(commands))
        return result


def get_discord_client() -> DiscordClient:
    """Build a client from application settings."""
    return DiscordClient(
        token=settings.discord_bot_token,
        application_id=settings.discord_application_id,
        api_base=settings.discord_api_base,
    )
