"""Message board endpoints — read channels and inboxes, stream board events."""

import logging

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect

from app.adapters.board import MessageBoard
from app.deps import get_board
from app.schemas.channel import BoardMessage, PrivateMessage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/inbox/{user_id}", response_model=list[PrivateMessage])
async def get_inbox(user_id: str, board: MessageBoard = Depends(get_board)):
    return board.inbox(user_id)


@router.get("/messages/{message_id}", response_model=BoardMessage)
async def get_message(message_id: str, board: MessageBoard = Depends(get_board)):
    message = board.get(message_id)
    if not message:
        raise HTTPException(status_code=404, detail="Message not found")
    return message


@router.get("/{channel_id}/messages", response_model=list[BoardMessage])
async def list_messages(channel_id: str, board: MessageBoard = Depends(get_board)):
    return board.messages(channel_id)


@router.websocket("/ws")
async def board_ws(ws: WebSocket):
    """Stream board events.

    Server sends: {"event": "message.created|message.updated|message.private", "payload": {...}}
    """
    board = get_board()
    await ws.accept()
    queue = board.subscribe()
    logger.info("Board WS subscriber connected")
    try:
        while True:
            frame = await queue.get()
            await ws.send_json(frame)
    except WebSocketDisconnect:
        logger.info("Board WS subscriber disconnected")
    finally:
        board.unsubscribe(queue)
