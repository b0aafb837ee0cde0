"""Tests for the purge confirmation gate and click routing."""

import asyncio
import logging
import uuid
from unittest.mock import AsyncMock

import pytest

from src.core.purge.enums import ConfirmationChoice, ConfirmationDecision
from src.core.purge.errors import DiscordApiError
from src.core.purge.models import PlanSummary
from src.services.purge_confirmation import (
    ComponentClick,
    PendingConfirmations,
    PurgeConfirmationGate,
    build_confirmation_buttons,
    make_custom_id,
    parse_custom_id,
    resolve_click,
)

SUMMARY = PlanSummary(
    content="I'll help you purge old messages!",
    bulk_count=3,
    slow_count=0,
    total_minutes=0.0,
)


def _clicking_discord(pending: PendingConfirmations, button: int, user_id: int = 42):
    """Discord mock whose prompt edit is immediately followed by a click."""
    discord = AsyncMock()

    async def edit(interaction_token, content, components=None):
        custom_id = components[0]["components"][button]["custom_id"]
        token, choice = parse_custom_id(custom_id)
        future = pending.claim(token)
        await resolve_click(future, ComponentClick(choice, "click-token", user_id))

    discord.edit_original_response.side_effect = edit
    return discord


class TestCustomIds:
    def test_round_trip(self):
        token = uuid.uuid4()
        custom_id = make_custom_id(token, ConfirmationChoice.cancel)

        assert custom_id == f"purge:{token}:cancel"
        assert parse_custom_id(custom_id) == (token, ConfirmationChoice.cancel)

    @pytest.mark.parametrize(
        "custom_id",
        [
            "",
            "purge",
            "other:0f8fad5b-d9cb-469f-a165-70867728950e:proceed",
            "purge:not-a-uuid:proceed",
            "purge:0f8fad5b-d9cb-469f-a165-70867728950e:maybe",
            "purge:0f8fad5b-d9cb-469f-a165-70867728950e:proceed:extra",
        ],
    )
    def test_foreign_ids_are_rejected(self, custom_id):
        assert parse_custom_id(custom_id) is None

    def test_buttons_carry_token_and_labels(self):
        token = uuid.uuid4()

        rows = build_confirmation_buttons(token)

        buttons = rows[0]["components"]
        assert [b["label"] for b in buttons] == ["yes", "no"]
        assert parse_custom_id(buttons[0]["custom_id"]) == (token, ConfirmationChoice.proceed)
        assert parse_custom_id(buttons[1]["custom_id"]) == (token, ConfirmationChoice.cancel)
        assert not any(b["disabled"] for b in buttons)

    def test_disabled_buttons(self):
        rows = build_confirmation_buttons(uuid.uuid4(), disabled=True)

        assert all(b["disabled"] for b in rows[0]["components"])


class TestPendingConfirmations:
    @pytest.mark.asyncio
    async def test_claim_is_single_use(self):
        pending = PendingConfirmations()
        token = uuid.uuid4()
        future = pending.register(token)

        assert token in pending
        assert pending.claim(token) is future
        assert pending.claim(token) is None
        assert len(pending) == 0

    @pytest.mark.asyncio
    async def test_duplicate_register_rejected(self):
        pending = PendingConfirmations()
        token = uuid.uuid4()
        pending.register(token)

        with pytest.raises(ValueError, match="already registered"):
            pending.register(token)

    @pytest.mark.asyncio
    async def test_unknown_token(self):
        assert PendingConfirmations().claim(uuid.uuid4()) is None

    @pytest.mark.asyncio
    async def test_cancelled_future_is_not_claimable(self):
        pending = PendingConfirmations()
        token = uuid.uuid4()
        pending.register(token).cancel()

        assert pending.claim(token) is None

    @pytest.mark.asyncio
    async def test_resolve_click_ignores_finished_future(self, caplog):
        future = asyncio.get_running_loop().create_future()
        future.cancel()

        with caplog.at_level(logging.WARNING):
            await resolve_click(future, ComponentClick(ConfirmationChoice.proceed, "t"))

        assert future.cancelled()
        assert "after the prompt expired" in caplog.text

    @pytest.mark.asyncio
    async def test_resolve_click_wakes_waiter(self):
        future = asyncio.get_running_loop().create_future()
        waiter = asyncio.create_task(asyncio.wait_for(future, 5))
        await asyncio.sleep(0)

        await resolve_click(future, ComponentClick(ConfirmationChoice.cancel, "t", 7))

        click = await waiter
        assert click.choice == ConfirmationChoice.cancel
        assert click.user_id == 7


class TestPurgeConfirmationGate:
    @pytest.mark.asyncio
    async def test_proceed_click_confirms(self):
        pending = PendingConfirmations()
        discord = _clicking_discord(pending, button=0)
        gate = PurgeConfirmationGate(discord, pending, timeout=5)

        decision = await gate.confirm("command-token", SUMMARY)

        assert decision == ConfirmationDecision.confirmed
        edit_args = discord.edit_original_response.await_args
        assert edit_args.args[:2] == ("command-token", SUMMARY.content)
        discord.create_followup.assert_awaited_once_with(
            "click-token", "yes", ephemeral=True
        )
        assert len(pending) == 0

    @pytest.mark.asyncio
    async def test_cancel_click_declines(self):
        pending = PendingConfirmations()
        discord = _clicking_discord(pending, button=1)
        gate = PurgeConfirmationGate(discord, pending, timeout=5)

        decision = await gate.confirm("command-token", SUMMARY)

        assert decision == ConfirmationDecision.declined
        discord.create_followup.assert_awaited_once_with(
            "click-token", "no", ephemeral=True
        )

    @pytest.mark.asyncio
    async def test_uses_given_token(self):
        pending = PendingConfirmations()
        discord = _clicking_discord(pending, button=0)
        gate = PurgeConfirmationGate(discord, pending, timeout=5)
        token = uuid.uuid4()

        await gate.confirm("command-token", SUMMARY, token=token)

        components = discord.edit_original_response.await_args.kwargs["components"]
        assert str(token) in components[0]["components"][0]["custom_id"]

    @pytest.mark.asyncio
    async def test_timeout_without_click(self):
        pending = PendingConfirmations()
        discord = AsyncMock()
        gate = PurgeConfirmationGate(discord, pending, timeout=0.01)
        token = uuid.uuid4()

        decision = await gate.confirm("command-token", SUMMARY, token=token)

        assert decision == ConfirmationDecision.timed_out
        discord.create_followup.assert_not_awaited()
        # Late clicks find nothing to claim
        assert pending.claim(token) is None

    @pytest.mark.asyncio
    async def test_failed_prompt_edit_unregisters_token(self):
        pending = PendingConfirmations()
        discord = AsyncMock()
        discord.edit_original_response.side_effect = DiscordApiError("boom", 500)
        gate = PurgeConfirmationGate(discord, pending, timeout=5)

        with pytest.raises(DiscordApiError):
            await gate.confirm("command-token", SUMMARY)

        assert len(pending) == 0

    @pytest.mark.asyncio
    async def test_failed_acknowledgement_propagates(self):
        pending = PendingConfirmations()
        discord = _clicking_discord(pending, button=0)
        discord.create_followup.side_effect = DiscordApiError("expired", 404)
        gate = PurgeConfirmationGate(discord, pending, timeout=5)

        with pytest.raises(DiscordApiError, match="expired"):
            await gate.confirm("command-token", SUMMARY)
