"""Tests for purge planning and the confirmation summary."""

from datetime import timedelta

import pytest

from src.core.purge.constants import DEFAULT_BULK_CUTOFF_HOURS
from src.services.message_history import fetch_messages_before
from src.services.purge_planner import (
    build_purge_plan,
    estimate_bulk_minutes,
    estimate_slow_minutes,
    find_split_index,
    render_plan_summary,
)
from tests.helpers import NOW, build_history, stream

RETENTION_CUTOFF = NOW - timedelta(days=7)
BULK_CUTOFF = NOW - timedelta(hours=DEFAULT_BULK_CUTOFF_HOURS)


def _mixed_history():
    """200 recent, 30 bulk-eligible and 20 too old for bulk deletion."""
    ages = (
        [timedelta(minutes=10 * m) for m in range(200)]
        + [timedelta(days=8, hours=h) for h in range(30)]
        + [timedelta(days=20, hours=h) for h in range(20)]
    )
    return build_history(ages)


class TestEstimates:
    def test_bulk_estimate_is_per_hundred(self):
        assert estimate_bulk_minutes(30, 500) == pytest.approx(0.0006)
        assert estimate_bulk_minutes(50_000, 500) == pytest.approx(1.0)

    def test_slow_estimate_is_one_per_operation(self):
        assert estimate_slow_minutes(20, 500) == pytest.approx(0.04)
        assert estimate_slow_minutes(1200, 500) == pytest.approx(2.4)

    def test_estimates_grow_with_count(self):
        for count in range(0, 1000, 37):
            assert estimate_bulk_minutes(count + 1, 500) > estimate_bulk_minutes(count, 500)
            assert estimate_slow_minutes(count + 1, 500) > estimate_slow_minutes(count, 500)

    def test_zero_count_is_zero(self):
        assert estimate_bulk_minutes(0, 500) == 0
        assert estimate_slow_minutes(0, 500) == 0


class TestFindSplitIndex:
    def test_all_bulk(self):
        history = build_history([timedelta(days=8), timedelta(days=9)])
        assert find_split_index(history, BULK_CUTOFF) == 2

    def test_all_slow(self):
        history = build_history([timedelta(days=15), timedelta(days=16)])
        assert find_split_index(history, BULK_CUTOFF) == 0

    def test_message_at_cutoff_is_bulk(self):
        history = build_history(
            [timedelta(hours=DEFAULT_BULK_CUTOFF_HOURS), timedelta(days=20)]
        )
        assert find_split_index(history, BULK_CUTOFF) == 1

    def test_empty(self):
        assert find_split_index([], BULK_CUTOFF) == 0


class TestBuildPurgePlan:
    @pytest.mark.asyncio
    async def test_mixed_history_plan(self):
        candidates = await fetch_messages_before(stream(_mixed_history()), RETENTION_CUTOFF)

        plan = build_purge_plan(candidates, BULK_CUTOFF, 500)

        assert len(plan.candidates) == 50
        assert plan.bulk_count == 30
        assert plan.slow_count == 20
        assert plan.bulk_minutes == pytest.approx(0.0006)
        assert plan.slow_minutes == pytest.approx(0.04)
        assert plan.total_minutes == pytest.approx(0.0406)

    def test_partition_respects_cutoff(self):
        plan = build_purge_plan(_mixed_history()[200:], BULK_CUTOFF, 500)

        assert all(m.timestamp >= BULK_CUTOFF for m in plan.bulk_messages)
        assert all(m.timestamp < BULK_CUTOFF for m in plan.slow_messages)
        assert plan.bulk_messages + plan.slow_messages == plan.candidates

    def test_empty_candidates_give_empty_plan(self):
        plan = build_purge_plan([], BULK_CUTOFF, 500)

        assert plan.is_empty
        assert plan.bulk_count == 0
        assert plan.slow_count == 0
        assert plan.total_minutes == 0


class TestRenderPlanSummary:
    def test_mixed_summary_mentions_both_segments(self):
        candidates = _mixed_history()[200:]
        plan = build_purge_plan(candidates, BULK_CUTOFF, 500)

        summary = render_plan_summary(plan)

        assert summary.content.startswith("I'll help you purge old messages!")
        assert "This deletion has 20 messages beyond the bulk cutoff window!" in summary.content
        assert "At a rate of 500 messages per minute" in summary.content
        assert "This deletion has 30 messages that can be *bulk* deleted!" in summary.content
        assert "At a rate of 50000 messages per minute" in summary.content
        assert summary.content.endswith(
            "Overall, this will take 0.04 minutes to complete, "
            "starting with the bulk messages. Continue?"
        )
        assert summary.bulk_count == 30
        assert summary.slow_count == 20

    def test_links_span_each_segment(self):
        candidates = _mixed_history()[200:]
        plan = build_purge_plan(candidates, BULK_CUTOFF, 500)

        summary = render_plan_summary(plan)

        assert summary.slow_links == (candidates[-1].link, candidates[30].link)
        assert summary.bulk_links == (candidates[29].link, candidates[0].link)
        assert f"<{candidates[-1].link}>" in summary.content
        assert f"<{candidates[0].link}>" in summary.content

    def test_slow_section_comes_before_bulk_section(self):
        plan = build_purge_plan(_mixed_history()[200:], BULK_CUTOFF, 500)

        content = render_plan_summary(plan).content

        assert content.index("beyond the bulk cutoff") < content.index("*bulk* deleted")

    def test_bulk_only_summary_omits_slow_section(self):
        plan = build_purge_plan(_mixed_history()[200:230], BULK_CUTOFF, 500)

        summary = render_plan_summary(plan)

        assert "beyond the bulk cutoff" not in summary.content
        assert summary.slow_links is None
        assert summary.bulk_links is not None

    def test_slow_only_summary_omits_bulk_section(self):
        plan = build_purge_plan(_mixed_history()[230:], BULK_CUTOFF, 500)

        summary = render_plan_summary(plan)

        assert "*bulk* deleted" not in summary.content
        assert summary.bulk_links is None

    def test_links_point_at_guild_channel_message(self):
        candidates = _mixed_history()[200:]
        plan = build_purge_plan(candidates, BULK_CUTOFF, 500)

        summary = render_plan_summary(plan)

        first = candidates[0]
        assert summary.bulk_links[1] == (
            f"https://discord.com/channels/{first.guild_id}/{first.channel_id}/{first.id}"
        )

    def test_empty_plan_cannot_be_summarized(self):
        plan = build_purge_plan([], BULK_CUTOFF, 500)

        with pytest.raises(ValueError, match="empty"):
            render_plan_summary(plan)
