"""Purge engine Pydantic models.

Pure data models for the purge pipeline. No database dependencies and no
HTTP. Everything here is frozen: a plan is computed once, shown to the
requester, then used read-only as the deletion worklist.
"""

from datetime import datetime, timedelta
from typing import Any, Self

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, model_validator

from src.core.purge.constants import (
    DEFAULT_BULK_CUTOFF_HOURS,
    DEFAULT_RETENTION_DAYS,
)
from src.core.purge.enums import PurgeOutcome

DISCORD_WEB_BASE = "https://discord.com/channels"


class ChannelMessage(BaseModel):
    """A message as the purge engine sees it. Owned by the platform."""

    model_config = ConfigDict(frozen=True)

    id: int
    channel_id: int
    guild_id: int | None = None
    timestamp: AwareDatetime

    @property
    def link(self) -> str:
        """Jump link usable in status text and audit logs."""
        guild = self.guild_id if self.guild_id is not None else "@me"
        return f"{DISCORD_WEB_BASE}/{guild}/{self.channel_id}/{self.id}"

    @classmethod
    def from_api(cls, payload: dict[str, Any], guild_id: int | None = None) -> Self:
        """Build from a REST message object.

        Message objects returned by the channel history endpoint do not
        carry ``guild_id``, so the caller passes it in.
        """
        return cls(
            id=int(payload["id"]),
            channel_id=int(payload["channel_id"]),
            guild_id=guild_id,
            timestamp=datetime.fromisoformat(payload["timestamp"]),
        )


class PurgeRequest(BaseModel):
    """Input for one purge_old invocation."""

    model_config = ConfigDict(frozen=True)

    channel_id: int
    guild_id: int | None = None
    now: AwareDatetime
    dry_run: bool = False
    retention_days: int = Field(default=DEFAULT_RETENTION_DAYS, ge=0)
    bulk_cutoff_hours: int = Field(default=DEFAULT_BULK_CUTOFF_HOURS, ge=0)

    @property
    def retention_cutoff(self) -> datetime:
        """Messages strictly older than this are candidates."""
        return self.now - timedelta(days=self.retention_days)

    @property
    def bulk_cutoff(self) -> datetime:
        """Candidates older than this must be deleted one at a time."""
        return self.now - timedelta(hours=self.bulk_cutoff_hours)


class PurgePlan(BaseModel):
    """Classification and time estimate for a purge request.

    ``candidates`` is newest first. Indices before ``split_index`` are the
    bulk segment, indices at or after it are the slow segment.
    """

    model_config = ConfigDict(frozen=True)

    candidates: tuple[ChannelMessage, ...] = ()
    split_index: int = Field(default=0, ge=0)
    bulk_cutoff: AwareDatetime
    rate_limit: int = Field(gt=0)
    bulk_minutes: float = Field(default=0.0, ge=0)
    slow_minutes: float = Field(default=0.0, ge=0)

    @model_validator(mode="after")
    def check_partition(self) -> Self:
        """Enforce ordering and the bulk/slow split against the cutoff."""
        if self.split_index > len(self.candidates):
            msg = "split_index must not exceed the number of candidates"
            raise ValueError(msg)
        for newer, older in zip(self.candidates, self.candidates[1:]):
            if older.timestamp > newer.timestamp:
                msg = "candidates must be ordered newest first"
                raise ValueError(msg)
        if any(m.timestamp < self.bulk_cutoff for m in self.bulk_messages):
            msg = "bulk segment contains a message older than the bulk cutoff"
            raise ValueError(msg)
        if any(m.timestamp >= self.bulk_cutoff for m in self.slow_messages):
            msg = "slow segment contains a message newer than the bulk cutoff"
            raise ValueError(msg)
        return self

    @property
    def bulk_messages(self) -> tuple[ChannelMessage, ...]:
        return self.candidates[: self.split_index]

    @property
    def slow_messages(self) -> tuple[ChannelMessage, ...]:
        return self.candidates[self.split_index :]

    @property
    def bulk_count(self) -> int:
        return self.split_index

    @property
    def slow_count(self) -> int:
        return len(self.candidates) - self.split_index

    @property
    def total_minutes(self) -> float:
        return self.bulk_minutes + self.slow_minutes

    @property
    def is_empty(self) -> bool:
        return not self.candidates


class PlanSummary(BaseModel):
    """Human-readable rendering of a plan, plus the data it was built from."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(min_length=1)
    bulk_count: int = Field(ge=0)
    slow_count: int = Field(ge=0)
    total_minutes: float = Field(ge=0)
    bulk_links: tuple[str, str] | None = None  # (first, last)
    slow_links: tuple[str, str] | None = None  # (first, last)


class PurgeReport(BaseModel):
    """What the executor did. Calls are counted even in dry-run."""

    model_config = ConfigDict(frozen=True)

    dry_run: bool
    bulk_calls: int = Field(default=0, ge=0)
    single_calls: int = Field(default=0, ge=0)
    messages_processed: int = Field(default=0, ge=0)
    window_pauses: int = Field(default=0, ge=0)


class PurgeResult(BaseModel):
    """Result of a purge_old invocation that did not raise."""

    model_config = ConfigDict(frozen=True)

    outcome: PurgeOutcome
    plan: PurgePlan | None = None
    report: PurgeReport | None = None
