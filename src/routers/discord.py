"""Discord interactions endpoint.

Discord POSTs every slash command invocation and button click here.
Requests are authenticated by their Ed25519 signature, not by session.
"""

from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.core.security import (
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    verify_interaction_signature,
)
from src.database import get_db
from src.logging_config import get_logger
from src.schemas.discord import (
    Interaction,
    InteractionResponseType,
    InteractionType,
)
from src.services.discord_api import DiscordClient, get_discord_client
from src.services.discord_commands import handle_command
from src.services.purge_confirmation import (
    ComponentClick,
    PendingConfirmations,
    build_confirmation_buttons,
    parse_custom_id,
    pending_confirmations,
    resolve_click,
)

logger = get_logger(__name__)

router = APIRouter(
    prefix="/api/discord",
    tags=["discord"],
)


def get_pending_confirmations() -> PendingConfirmations:
    return pending_confirmations


def handle_component(
    interaction: Interaction,
    background_tasks: BackgroundTasks,
    pending: PendingConfirmations,
) -> dict[str, Any]:
    """Answer a button click on a purge prompt.

    The first click for a waiting token disables both buttons and hands
    the click to the gate once the response has gone out. Clicks on
    unknown, expired, or already-answered prompts change nothing.
    """
    custom_id = interaction.data.custom_id if interaction.data else None
    parsed = parse_custom_id(custom_id or "")
    future = pending.claim(parsed[0]) if parsed else None

    if parsed is None or future is None:
        logger.info("Ignoring stale component interaction", custom_id=custom_id)
        return {"type": InteractionResponseType.DEFERRED_UPDATE_MESSAGE}

    token, choice = parsed
    background_tasks.add_task(
        resolve_click,
        future,
        ComponentClick(
            choice=choice,
            interaction_token=interaction.token,
            user_id=interaction.actor_id,
        ),
    )
    content = interaction.message.content if interaction.message else ""
    return {
        "type": InteractionResponseType.UPDATE_MESSAGE,
        "data": {
            "content": content,
            "components": build_confirmation_buttons(token, disabled=True),
        },
    }


@router.post("/interactions")
async def receive_interaction(
    request: Request,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    discord: DiscordClient = Depends(get_discord_client),
    pending: PendingConfirmations = Depends(get_pending_confirmations),
) -> dict[str, Any]:
    """Handle PING, slash command, and component interactions."""
    body = await request.body()
    if not verify_interaction_signature(
        settings.discord_public_key,
        request.headers.get(SIGNATURE_HEADER),
        request.headers.get(TIMESTAMP_HEADER),
        body,
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid request signature",
        )

    try:
        interaction = Interaction.model_validate_json(body)
    except ValidationError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Malformed interaction payload",
        )

    if interaction.type == InteractionType.PING:
        return {"type": InteractionResponseType.PONG}

    if interaction.type == InteractionType.APPLICATION_COMMAND:
        return await handle_command(interaction, db, discord)

    return handle_component(interaction, background_tasks, pending)
