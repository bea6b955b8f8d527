"""Message board gateway tests."""

import pytest

from app.adapters.base import GatewayError
from app.adapters.board import MessageBoard
from app.schemas.transfer import APPROVAL_CONTROLS, MessageHandle


@pytest.mark.asyncio
async def test_edit_replaces_content_and_controls():
    board = MessageBoard()
    handle = await board.send_message("c1", "hello", controls=APPROVAL_CONTROLS)
    assert len(board.get(handle.message_id).controls) == 2

    await board.edit_message(handle, "bye")
    message = board.get(handle.message_id)
    assert message.content == "bye"
    assert message.controls == []
    assert message.edited_at is not None


@pytest.mark.asyncio
async def test_edit_unknown_message():
    board = MessageBoard()
    with pytest.raises(GatewayError):
        await board.edit_message(MessageHandle(channel_id="c1", message_id="missing"), "x")


@pytest.mark.asyncio
async def test_subscribers_receive_events():
    board = MessageBoard()
    queue = board.subscribe()

    handle = await board.send_message("c1", "hello")
    await board.send_private("u1", "c1", "psst")
    board.unsubscribe(queue)
    await board.edit_message(handle, "edited")

    events = [queue.get_nowait()["event"] for _ in range(queue.qsize())]
    assert events == ["message.created", "message.private"]


@pytest.mark.asyncio
async def test_history_is_bounded():
    board = MessageBoard(history=2)
    first = await board.send_message("c1", "one")
    await board.send_message("c1", "two")
    await board.send_message("c1", "three")

    assert [m.content for m in board.messages("c1")] == ["two", "three"]
    assert board.get(first.message_id) is None
