"""Channel history collection for the purge engine."""

from collections.abc import AsyncIterable
from datetime import datetime

from src.core.purge.models import ChannelMessage


async def fetch_messages_before(
    history: AsyncIterable[ChannelMessage],
    cutoff: datetime,
) -> list[ChannelMessage]:
    """Collect every message strictly older than ``cutoff``.

    ``history`` is traversed newest to oldest. Messages at or after the
    cutoff are skipped; once the first older message appears, everything
    from there to the end of history is kept as-is (no reordering, no
    dedup). Source errors propagate and no partial result is returned.

    Args:
        history: Newest-first message stream, e.g.
            ``DiscordClient.iter_channel_messages``.
        cutoff: The retention cutoff.

    Returns:
        Candidates, newest first.
    """
    collected: list[ChannelMessage] = []
    skipping = True
    async for message in history:
        if skipping and message.timestamp >= cutoff:
            continue
        skipping = False
        collected.append(message)
    return collected
