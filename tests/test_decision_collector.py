"""Decision collector tests — single resolution, filtering, deadline."""

import asyncio

import pytest

from app.schemas.transfer import DecisionChoice, DecisionEvent, MessageHandle
from app.services.decision_collector import DecisionCollector

SURFACE = MessageHandle(channel_id="approval-ch", message_id="msg-1")


def _event(actor="admin-1", *, authority=True, message_id="msg-1", choice=DecisionChoice.APPROVE):
    return DecisionEvent(
        actor_id=actor,
        actor_has_manage_authority=authority,
        message_id=message_id,
        choice=choice,
    )


@pytest.mark.asyncio
async def test_first_qualifying_event_wins():
    collector = DecisionCollector(SURFACE, timeout=1.0)
    first = _event("admin-1", choice=DecisionChoice.DENY)
    second = _event("admin-2", choice=DecisionChoice.APPROVE)

    assert collector.offer(first) is True
    assert collector.offer(second) is False
    assert collector.armed is False
    assert await collector.wait() == first


@pytest.mark.asyncio
async def test_filter_rejects_unauthorized_and_other_surfaces():
    collector = DecisionCollector(SURFACE, timeout=1.0)

    assert collector.offer(_event("player-9", authority=False)) is False
    assert collector.offer(_event(message_id="msg-other")) is False
    assert collector.armed is True

    qualifying = _event("admin-1")
    assert collector.offer(qualifying) is True
    assert await collector.wait() == qualifying


@pytest.mark.asyncio
async def test_deadline_without_events_returns_none():
    collector = DecisionCollector(SURFACE, timeout=0.05)
    assert await collector.wait() is None
    # Late events are inert once the deadline fired
    assert collector.offer(_event()) is False


@pytest.mark.asyncio
async def test_event_delivered_before_deadline_beats_timeout():
    collector = DecisionCollector(SURFACE, timeout=0.0)
    event = _event()
    assert collector.offer(event) is True
    assert await collector.wait() == event


@pytest.mark.asyncio
async def test_event_arriving_while_waiting():
    collector = DecisionCollector(SURFACE, timeout=1.0)
    event = _event()

    async def press_later():
        await asyncio.sleep(0.01)
        return collector.offer(event)

    result, accepted = await asyncio.gather(collector.wait(), press_later())
    assert accepted is True
    assert result == event


@pytest.mark.asyncio
async def test_stop_makes_collector_inert():
    collector = DecisionCollector(SURFACE, timeout=1.0)
    waiter = asyncio.create_task(collector.wait())
    await asyncio.sleep(0)

    collector.stop()
    assert await waiter is None
    assert collector.offer(_event()) is False


@pytest.mark.asyncio
async def test_cancelling_the_waiter_propagates():
    collector = DecisionCollector(SURFACE, timeout=1.0)
    waiter = asyncio.create_task(collector.wait())
    await asyncio.sleep(0)

    waiter.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiter
    assert collector.offer(_event()) is False
