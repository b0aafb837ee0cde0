"""Builders shared by the purge engine tests."""

from collections.abc import AsyncIterator, Iterable
from datetime import UTC, datetime, timedelta

from src.core.purge.models import ChannelMessage

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)
GUILD_ID = 111111111111111111
CHANNEL_ID = 222222222222222222


class FakeClock:
    """Monotonic clock that only moves when slept on or advanced."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay

    def advance(self, seconds: float) -> None:
        self.now += seconds


def build_message(
    message_id: int,
    age: timedelta,
    now: datetime = NOW,
    channel_id: int = CHANNEL_ID,
    guild_id: int | None = GUILD_ID,
) -> ChannelMessage:
    return ChannelMessage(
        id=message_id,
        channel_id=channel_id,
        guild_id=guild_id,
        timestamp=now - age,
    )


def build_history(ages: Iterable[timedelta], now: datetime = NOW) -> list[ChannelMessage]:
    """Newest-first history; ages must be ascending. Ids count down."""
    ages = list(ages)
    return [
        build_message(10_000 + len(ages) - idx, age, now)
        for idx, age in enumerate(ages)
    ]


async def stream(messages: Iterable[ChannelMessage]) -> AsyncIterator[ChannelMessage]:
    for message in messages:
        yield message
