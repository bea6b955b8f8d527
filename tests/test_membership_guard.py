"""Membership guard tests."""

import pytest

from app.schemas.transfer import RejectionReason
from app.services import membership_guard
from conftest import FREE_AGENT, TEAM_A, make_config


@pytest.mark.asyncio
async def test_free_agent_to_allowed_team_passes(directory):
    assert await membership_guard.validate(directory, make_config(), "player-1", TEAM_A) is None


@pytest.mark.asyncio
async def test_requester_without_free_agent_role(directory):
    directory.roles["player-2"] = {TEAM_A}
    reason = await membership_guard.validate(directory, make_config(), "player-2", TEAM_A)
    assert reason == RejectionReason.NOT_ELIGIBLE


@pytest.mark.asyncio
async def test_target_not_on_allow_list(directory):
    reason = await membership_guard.validate(directory, make_config(), "player-1", "moderators")
    assert reason == RejectionReason.INVALID_TARGET


@pytest.mark.asyncio
async def test_guard_does_not_mutate(directory):
    await membership_guard.validate(directory, make_config(), "player-1", TEAM_A)
    assert directory.added == [] and directory.removed == []
    assert directory.roles["player-1"] == {FREE_AGENT}
