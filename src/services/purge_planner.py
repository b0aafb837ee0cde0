"""Purge planning: bulk/slow classification, estimates, and summary text.

Both public functions are pure. ``build_purge_plan`` decides what will be
deleted and how long it should take; ``render_plan_summary`` turns a plan
into the confirmation prompt text.
"""

from collections.abc import Sequence
from datetime import datetime

from src.core.purge.constants import BULK_DELETE_MAX_MESSAGES
from src.core.purge.models import ChannelMessage, PlanSummary, PurgePlan


def find_split_index(
    candidates: Sequence[ChannelMessage],
    bulk_cutoff: datetime,
) -> int:
    """Index of the first candidate older than ``bulk_cutoff``.

    Returns ``len(candidates)`` when every candidate is bulk-eligible.
    """
    for idx, message in enumerate(candidates):
        if message.timestamp < bulk_cutoff:
            return idx
    return len(candidates)


def estimate_bulk_minutes(bulk_count: int, rate_limit: int) -> float:
    """Minutes to clear ``bulk_count`` messages, 100 per rate-limited call."""
    return bulk_count / (rate_limit * BULK_DELETE_MAX_MESSAGES)


def estimate_slow_minutes(slow_count: int, rate_limit: int) -> float:
    """Minutes to clear ``slow_count`` messages, one per rate-limited call."""
    return slow_count / rate_limit


def build_purge_plan(
    candidates: Sequence[ChannelMessage],
    bulk_cutoff: datetime,
    rate_limit: int,
) -> PurgePlan:
    """Partition newest-first candidates into bulk and slow segments.

    Args:
        candidates: Output of ``fetch_messages_before``.
        bulk_cutoff: Candidates older than this can't be bulk deleted.
        rate_limit: Operations allowed per minute.

    Returns:
        An immutable PurgePlan. Empty input gives an empty plan.
    """
    split = find_split_index(candidates, bulk_cutoff)
    slow_count = len(candidates) - split
    return PurgePlan(
        candidates=tuple(candidates),
        split_index=split,
        bulk_cutoff=bulk_cutoff,
        rate_limit=rate_limit,
        bulk_minutes=estimate_bulk_minutes(split, rate_limit),
        slow_minutes=estimate_slow_minutes(slow_count, rate_limit),
    )


def render_plan_summary(plan: PurgePlan) -> PlanSummary:
    """Render the confirmation prompt for a non-empty plan."""
    if plan.is_empty:
        raise ValueError("cannot summarize an empty purge plan")

    sections = ["I'll help you purge old messages!"]
    slow_links: tuple[str, str] | None = None
    bulk_links: tuple[str, str] | None = None

    if plan.slow_count:
        # Oldest candidate first, then the newest message past the cutoff
        slow_links = (plan.candidates[-1].link, plan.slow_messages[0].link)
        sections.append(
            f"This deletion has {plan.slow_count} messages beyond the bulk cutoff window!\n"
            f"At a rate of {plan.rate_limit} messages per minute, deleting these "
            f"will take approximately {plan.slow_minutes:.2f} minutes.\n"
            f"The first message in this set is <{slow_links[0]}>, "
            f"and the last is <{slow_links[1]}>."
        )

    if plan.bulk_count:
        msgs_per_min = plan.rate_limit * BULK_DELETE_MAX_MESSAGES
        bulk_links = (plan.bulk_messages[-1].link, plan.candidates[0].link)
        sections.append(
            f"This deletion has {plan.bulk_count} messages that can be *bulk* deleted!\n"
            f"At a rate of {msgs_per_min} messages per minute, deleting these "
            f"will take approximately {plan.bulk_minutes:.2f} minutes.\n"
            f"The first message in this set is <{bulk_links[0]}>, "
            f"and the last is <{bulk_links[1]}>."
        )

    sections.append(
        f"Overall, this will take {plan.total_minutes:.2f} minutes to complete, "
        "starting with the bulk messages. Continue?"
    )

    return PlanSummary(
        content="\n\n".join(sections),
        bulk_count=plan.bulk_count,
        slow_count=plan.slow_count,
        total_minutes=plan.total_minutes,
        bulk_links=bulk_links,
        slow_links=slow_links,
    )
