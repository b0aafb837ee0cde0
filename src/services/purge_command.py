"""purge_old command handler.

Wires the purge engine together:

    fetch history -> plan -> confirm -> execute

Each invocation runs as its own asyncio task, started by the
interactions endpoint after it has deferred the slash command. Any
component failure propagates out of ``purge_old`` unchanged;
``run_purge_task`` is the outermost layer and reports it.
"""

import asyncio
import uuid
from datetime import UTC, datetime

from src.config import settings
from src.core.purge.enums import ConfirmationDecision, Environment, PurgeOutcome
from src.core.purge.errors import DiscordApiError, PurgeError
from src.core.purge.models import PurgeRequest, PurgeResult
from src.logging_config import correlation_scope, get_logger
from src.services.discord_api import DiscordClient
from src.services.message_history import fetch_messages_before
from src.services.purge_confirmation import PurgeConfirmationGate
from src.services.purge_executor import PurgeExecutor
from src.services.purge_planner import build_purge_plan, render_plan_summary

logger = get_logger(__name__)

NOTHING_TO_PURGE = "There are no messages older than {days} days in <#{channel_id}>."
PURGE_FAILED = "The purge stopped because of an error. Some messages may already be deleted."

# Strong references to in-flight purges (the event loop only keeps weak ones)
_running_tasks: set[asyncio.Task] = set()


def resolve_dry_run(dry_run: bool | None) -> bool:
    """Requested dry-run flag, forced on outside production."""
    return bool(dry_run) or settings.environment != Environment.production


async def purge_old(
    discord: DiscordClient,
    interaction_token: str,
    channel_id: int,
    guild_id: int | None = None,
    dry_run: bool | None = None,
    *,
    gate: PurgeConfirmationGate | None = None,
    executor: PurgeExecutor | None = None,
    now: datetime | None = None,
    token: uuid.UUID | None = None,
) -> PurgeResult:
    """Purge messages older than the retention period from a channel.

    Args:
        discord: REST client.
        interaction_token: Token of the deferred slash command.
        channel_id: Channel to purge.
        guild_id: Guild the channel belongs to (used for message links).
        dry_run: Pace through the purge without deleting anything.
        gate: Confirmation gate (defaults to one built from settings).
        executor: Executor (defaults to one built from settings).
        now: Reference instant for the cutoffs.
        token: Routing token for the confirmation buttons.

    Returns:
        PurgeResult describing how the invocation ended.
    """
    request = PurgeRequest(
        channel_id=channel_id,
        guild_id=guild_id,
        now=now or datetime.now(UTC),
        dry_run=resolve_dry_run(dry_run),
        retention_days=settings.purge_retention_days,
        bulk_cutoff_hours=settings.purge_bulk_cutoff_hours,
    )

    candidates = await fetch_messages_before(
        discord.iter_channel_messages(channel_id, guild_id),
        request.retention_cutoff,
    )
    if not candidates:
        logger.info("Nothing to purge", channel_id=channel_id)
        await discord.edit_original_response(
            interaction_token,
            NOTHING_TO_PURGE.format(days=request.retention_days, channel_id=channel_id),
            components=[],
        )
        return PurgeResult(outcome=PurgeOutcome.nothing_to_do)

    plan = build_purge_plan(candidates, request.bulk_cutoff, settings.purge_rate_limit)
    logger.info(
        "Purge plan built",
        channel_id=channel_id,
        bulk_count=plan.bulk_count,
        slow_count=plan.slow_count,
        total_minutes=round(plan.total_minutes, 4),
        dry_run=request.dry_run,
    )

    gate = gate or PurgeConfirmationGate(
        discord, timeout=settings.purge_confirmation_timeout_seconds
    )
    decision = await gate.confirm(interaction_token, render_plan_summary(plan), token)
    if decision == ConfirmationDecision.declined:
        return PurgeResult(outcome=PurgeOutcome.declined, plan=plan)
    if decision == ConfirmationDecision.timed_out:
        return PurgeResult(outcome=PurgeOutcome.timed_out, plan=plan)

    executor = executor or PurgeExecutor(
        discord,
        channel_id,
        rate_limit=settings.purge_rate_limit,
        window_seconds=settings.purge_window_seconds,
        bulk_max_age_days=settings.purge_bulk_max_age_days,
    )
    report = await executor.run(plan, request.dry_run)
    logger.info(
        "Purge completed",
        channel_id=channel_id,
        bulk_calls=report.bulk_calls,
        single_calls=report.single_calls,
        messages=report.messages_processed,
        dry_run=report.dry_run,
    )
    return PurgeResult(outcome=PurgeOutcome.completed, plan=plan, report=report)


async def run_purge_task(
    discord: DiscordClient,
    interaction_token: str,
    channel_id: int,
    guild_id: int | None = None,
    dry_run: bool | None = None,
) -> PurgeResult | None:
    """Run one purge as a detached task and report failures to the requester.

    Log lines emitted during the purge share the confirmation token as
    their correlation ID.
    """
    token = uuid.uuid4()
    with correlation_scope(str(token)):
        try:
            return await purge_old(
                discord,
                interaction_token,
                channel_id,
                guild_id,
                dry_run,
                token=token,
            )
        except PurgeError as exc:
            logger.error(
                "Purge failed",
                channel_id=channel_id,
                kind=str(exc.kind),
                error=str(exc),
            )
        except Exception:
            logger.exception("Unexpected error during purge", channel_id=channel_id)
        await _report_failure(discord, interaction_token)
        return None


async def _report_failure(discord: DiscordClient, interaction_token: str) -> None:
    try:
        await discord.create_followup(interaction_token, PURGE_FAILED, ephemeral=True)
    except DiscordApiError as exc:
        logger.warning("Failed to send purge failure notice", error=str(exc))


def start_purge_task(
    discord: DiscordClient,
    interaction_token: str,
    channel_id: int,
    guild_id: int | None = None,
    dry_run: bool | None = None,
) -> asyncio.Task:
    """Schedule a purge on the running loop and keep it referenced."""
    task = asyncio.create_task(
        run_purge_task(discord, interaction_token, channel_id, guild_id, dry_run),
        name=f"purge-{channel_id}",
    )
    _running_tasks.add(task)
    task.add_done_callback(_running_tasks.discard)
    return task


def active_purge_count() -> int:
    return len(_running_tasks)


async def cancel_running_purges() -> int:
    """Cancel in-flight purges (used at shutdown). Returns how many."""
    tasks = list(_running_tasks)
    for task in tasks:
        task.cancel()
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)
    return len(tasks)
