"""Purge execution.

Deletes a confirmed plan in two phases, bulk first, each paced by its own
RateMeter. Dry-run walks the exact same loop and pacing but never calls a
destructive endpoint. The first failed call aborts the purge; nothing
records how far it got.
"""

import asyncio
import time
from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta

from src.core.purge.constants import (
    BULK_DELETE_MAX_AGE_DAYS,
    BULK_DELETE_MAX_MESSAGES,
    DEFAULT_RATE_LIMIT,
    DEFAULT_WINDOW_SECONDS,
)
from src.core.purge.errors import StalePlanError
from src.core.purge.models import ChannelMessage, PurgePlan, PurgeReport
from src.core.purge.rate_meter import Clock, RateMeter, Sleeper
from src.logging_config import get_logger
from src.services.discord_api import DiscordClient

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def chunk_messages(
    messages: Sequence[ChannelMessage],
    size: int = BULK_DELETE_MAX_MESSAGES,
) -> list[Sequence[ChannelMessage]]:
    """Split into consecutive groups of at most ``size``, order preserved."""
    return [messages[i : i + size] for i in range(0, len(messages), size)]


class PurgeExecutor:
    """Runs the deletion phases for one channel."""

    def __init__(
        self,
        discord: DiscordClient,
        channel_id: int,
        *,
        rate_limit: int = DEFAULT_RATE_LIMIT,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        bulk_max_age_days: int = BULK_DELETE_MAX_AGE_DAYS,
        clock: Clock = time.monotonic,
        sleep: Sleeper = asyncio.sleep,
        now: Callable[[], datetime] = _utcnow,
    ):
        self._discord = discord
        self.channel_id = channel_id
        self.rate_limit = rate_limit
        self.window_seconds = window_seconds
        self.bulk_max_age_days = bulk_max_age_days
        self._clock = clock
        self._sleep = sleep
        self._now = now

    def _new_meter(self) -> RateMeter:
        return RateMeter(
            self.rate_limit,
            self.window_seconds,
            clock=self._clock,
            sleep=self._sleep,
        )

    def check_plan_fresh(self, plan: PurgePlan) -> None:
        """Refuse to bulk delete messages that aged past the platform ceiling.

        Raises:
            StalePlanError: The oldest bulk-segment message is now older
                than the bulk-delete age limit.
        """
        if not plan.bulk_messages:
            return
        oldest = plan.bulk_messages[-1]
        ceiling = self._now() - timedelta(days=self.bulk_max_age_days)
        if oldest.timestamp <= ceiling:
            raise StalePlanError(
                f"Message {oldest.id} from {oldest.timestamp.isoformat()} is older "
                f"than the {self.bulk_max_age_days}-day bulk delete limit; "
                "the plan is stale and must be rebuilt"
            )

    async def run(self, plan: PurgePlan, dry_run: bool) -> PurgeReport:
        """Delete the bulk segment, then the slow segment.

        Args:
            plan: A confirmed plan.
            dry_run: Pace as usual but skip every delete call.

        Returns:
            Counts of calls issued (or that would have been issued).
        """
        self.check_plan_fresh(plan)

        bulk_calls, bulk_pauses = await self._run_bulk_phase(plan.bulk_messages, dry_run)
        single_calls, slow_pauses = await self._run_slow_phase(
            plan.slow_messages, dry_run
        )

        return PurgeReport(
            dry_run=dry_run,
            bulk_calls=bulk_calls,
            single_calls=single_calls,
            messages_processed=len(plan.candidates),
            window_pauses=bulk_pauses + slow_pauses,
        )

    async def _run_bulk_phase(
        self,
        messages: Sequence[ChannelMessage],
        dry_run: bool,
    ) -> tuple[int, int]:
        if not messages:
            return 0, 0

        logger.info(
            "Bulk purge phase started",
            channel_id=self.channel_id,
            messages=len(messages),
            dry_run=dry_run,
        )
        meter = self._new_meter()
        calls = 0
        for chunk in chunk_messages(messages):
            if not dry_run:
                await self._discord.bulk_delete_messages(
                    self.channel_id, [m.id for m in chunk]
                )
            calls += 1
            if await meter.record_operation():
                logger.debug("Bulk purge window full, paused", calls=calls)

        logger.info("Bulk purge phase finished", channel_id=self.channel_id, calls=calls)
        return calls, meter.pauses

    async def _run_slow_phase(
        self,
        messages: Sequence[ChannelMessage],
        dry_run: bool,
    ) -> tuple[int, int]:
        if not messages:
            return 0, 0

        logger.info(
            "Slow purge phase started",
            channel_id=self.channel_id,
            messages=len(messages),
            dry_run=dry_run,
        )
        meter = self._new_meter()
        calls = 0
        for message in messages:
            if not dry_run:
                await self._discord.delete_message(self.channel_id, message.id)
            calls += 1
            if await meter.record_operation():
                logger.debug("Slow purge window full, paused", calls=calls)

        logger.info("Slow purge phase finished", channel_id=self.channel_id, calls=calls)
        return calls, meter.pauses
