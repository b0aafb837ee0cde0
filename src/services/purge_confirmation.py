"""Interactive confirmation gate for purges.

The purge prompt carries two buttons whose ``custom_id`` embeds a token
unique to the invocation. Button clicks reach the app through the
interactions endpoint, which claims the token in ``PendingConfirmations``
and hands the click to the waiting gate. Only the first matching click
counts; anything after that (or after the timeout) is a no-op.
"""

import asyncio
import uuid
from dataclasses import dataclass
from typing import Any

from src.core.purge.constants import (
    CONFIRMATION_CUSTOM_ID_PREFIX,
    DEFAULT_CONFIRMATION_TIMEOUT_SECONDS,
)
from src.core.purge.enums import ConfirmationChoice, ConfirmationDecision
from src.core.purge.errors import DiscordApiError
from src.core.purge.models import PlanSummary
from src.logging_config import get_logger
from src.services.discord_api import DiscordClient

logger = get_logger(__name__)

# Discord component types/styles
ACTION_ROW = 1
BUTTON = 2
BUTTON_STYLE_SECONDARY = 2
BUTTON_STYLE_DANGER = 4

_ACKNOWLEDGEMENTS = {
    ConfirmationChoice.proceed: "yes",
    ConfirmationChoice.cancel: "no",
}


@dataclass(frozen=True)
class ComponentClick:
    """A button press routed to a waiting gate."""

    choice: ConfirmationChoice
    interaction_token: str
    user_id: int | None = None


def make_custom_id(token: uuid.UUID, choice: ConfirmationChoice) -> str:
    return f"{CONFIRMATION_CUSTOM_ID_PREFIX}:{token}:{choice}"


def parse_custom_id(custom_id: str) -> tuple[uuid.UUID, ConfirmationChoice] | None:
    """Split a confirmation button id into (token, choice).

    Returns None for ids that don't belong to a purge prompt.
    """
    parts = custom_id.split(":")
    if len(parts) != 3 or parts[0] != CONFIRMATION_CUSTOM_ID_PREFIX:
        return None
    try:
        return uuid.UUID(parts[1]), ConfirmationChoice(parts[2])
    except ValueError:
        return None


def build_confirmation_buttons(
    token: uuid.UUID,
    disabled: bool = False,
) -> list[dict[str, Any]]:
    """Action row with the "yes" (proceed) and "no" (cancel) buttons."""
    return [
        {
            "type": ACTION_ROW,
            "components": [
                {
                    "type": BUTTON,
                    "style": BUTTON_STYLE_DANGER,
                    "label": "yes",
                    "custom_id": make_custom_id(token, ConfirmationChoice.proceed),
                    "disabled": disabled,
                },
                {
                    "type": BUTTON,
                    "style": BUTTON_STYLE_SECONDARY,
                    "label": "no",
                    "custom_id": make_custom_id(token, ConfirmationChoice.cancel),
                    "disabled": disabled,
                },
            ],
        }
    ]


class PendingConfirmations:
    """Registry of gates waiting for a click, keyed by invocation token.

    Single-process and single event loop. Each token is registered by
    exactly one gate and claimed at most once.
    """

    def __init__(self) -> None:
        self._waiting: dict[uuid.UUID, asyncio.Future[ComponentClick]] = {}

    def __contains__(self, token: uuid.UUID) -> bool:
        return token in self._waiting

    def __len__(self) -> int:
        return len(self._waiting)

    def register(self, token: uuid.UUID) -> asyncio.Future[ComponentClick]:
        if token in self._waiting:
            raise ValueError(f"confirmation token {token} is already registered")
        future: asyncio.Future[ComponentClick] = (
            asyncio.get_running_loop().create_future()
        )
        self._waiting[token] = future
        return future

    def claim(self, token: uuid.UUID) -> asyncio.Future[ComponentClick] | None:
        """Take the waiting future for a token, or None if nobody is waiting."""
        future = self._waiting.pop(token, None)
        if future is None or future.done():
            return None
        return future

    def discard(self, token: uuid.UUID) -> None:
        self._waiting.pop(token, None)


async def resolve_click(
    future: asyncio.Future[ComponentClick],
    click: ComponentClick,
) -> None:
    """Deliver a claimed click unless the gate already gave up.

    Must run on the loop that owns ``future``, so it is a coroutine:
    Starlette awaits async background tasks on the loop but sends plain
    functions to a worker thread.
    """
    if future.done():
        logger.warning(
            "Confirmation click arrived after the prompt expired",
            choice=str(click.choice),
            user_id=click.user_id,
        )
        return
    future.set_result(click)


pending_confirmations = PendingConfirmations()


class PurgeConfirmationGate:
    """Posts the plan summary with yes/no buttons and waits for a decision.

    Not reentrant: one ``confirm`` call produces one decision.
    """

    def __init__(
        self,
        discord: DiscordClient,
        pending: PendingConfirmations = pending_confirmations,
        timeout: float = DEFAULT_CONFIRMATION_TIMEOUT_SECONDS,
    ):
        self._discord = discord
        self._pending = pending
        self.timeout = timeout

    async def confirm(
        self,
        interaction_token: str,
        summary: PlanSummary,
        token: uuid.UUID | None = None,
    ) -> ConfirmationDecision:
        """Ask the requester to confirm the purge.

        Args:
            interaction_token: Token of the deferred slash command response
                the prompt is written into.
            summary: Rendered plan.
            token: Routing token for this invocation (generated if omitted).

        Returns:
            confirmed, declined, or timed_out. On timeout the prompt is left
            as-is, buttons included.
        """
        token = token or uuid.uuid4()
        future = self._pending.register(token)
        try:
            await self._discord.edit_original_response(
                interaction_token,
                summary.content,
                components=build_confirmation_buttons(token),
            )
            try:
                click = await asyncio.wait_for(future, self.timeout)
            except TimeoutError:
                logger.info(
                    "Purge confirmation timed out",
                    token=str(token),
                    timeout_seconds=self.timeout,
                )
                return ConfirmationDecision.timed_out
        finally:
            self._pending.discard(token)

        decision = (
            ConfirmationDecision.confirmed
            if click.choice == ConfirmationChoice.proceed
            else ConfirmationDecision.declined
        )
        logger.info(
            "Purge confirmation received",
            token=str(token),
            decision=str(decision),
            user_id=click.user_id,
        )

        try:
            await self._discord.create_followup(
                click.interaction_token,
                _ACKNOWLEDGEMENTS[click.choice],
                ephemeral=True,
            )
        except DiscordApiError as exc:
            logger.error("Failed to acknowledge confirmation click", error=str(exc))
            raise

        return decision
