"""Purge engine core.

Retires messages older than a retention threshold from a channel while
staying inside Discord's deletion limits:

1. History older than the retention cutoff (7 days) is collected.
2. Candidates newer than the bulk cutoff (13.5 days) go through the
   batch endpoint, up to 100 per call; older ones are deleted singly.
3. Each segment gets a time estimate at the configured rate.
4. Nothing is deleted until the requester confirms interactively.
5. Every phase is paced by its own fixed-window RateMeter.

This package holds the pure pieces (models, enums, errors, the meter).
Network and orchestration live in ``src.services``.
"""

from src.core.purge.enums import (
    ConfirmationChoice,
    ConfirmationDecision,
    Environment,
    PurgeErrorKind,
    PurgeOutcome,
)
from src.core.purge.errors import (
    DiscordApiError,
    PurgeError,
    SpamChannelError,
    StalePlanError,
)
from src.core.purge.models import (
    ChannelMessage,
    PlanSummary,
    PurgePlan,
    PurgeReport,
    PurgeRequest,
    PurgeResult,
)
from src.core.purge.rate_meter import RateMeter

__all__ = [
    "ChannelMessage",
    "ConfirmationChoice",
    "ConfirmationDecision",
    "DiscordApiError",
    "Environment",
    "PlanSummary",
    "PurgeError",
    "PurgeErrorKind",
    "PurgeOutcome",
    "PurgePlan",
    "PurgeReport",
    "PurgeRequest",
    "PurgeResult",
    "RateMeter",
    "SpamChannelError",
    "StalePlanError",
]
