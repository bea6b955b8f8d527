"""In-process message board — the default messaging gateway.

Keeps a bounded history per channel and per-user private inboxes, and fans
every change out to subscribed queues (the channels WebSocket streams these).
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Any

from app.adapters.base import GatewayError, MessagingGateway
from app.schemas.channel import BoardMessage, PrivateMessage
from app.schemas.transfer import DecisionControl, MessageHandle

logger = logging.getLogger(__name__)

DEFAULT_HISTORY = 500


class MessageBoard(MessagingGateway):
    def __init__(self, history: int = DEFAULT_HISTORY) -> None:
        self._history = history
        self._channels: dict[str, deque[BoardMessage]] = {}
        self._index: dict[str, BoardMessage] = {}
        self._inboxes: dict[str, deque[PrivateMessage]] = {}
        self._subscribers: set[asyncio.Queue[dict[str, Any]]] = set()

    # ── MessagingGateway ─────────────────────────────────────────────

    async def send_message(
        self,
        channel_id: str,
        content: str,
        *,
        controls: list[DecisionControl] | None = None,
    ) -> MessageHandle:
        message = BoardMessage(
            id=self._make_id(),
            channel_id=channel_id,
            content=content,
            controls=list(controls or []),
        )
        channel = self._channels.setdefault(channel_id, deque())
        if len(channel) >= self._history:
            evicted = channel.popleft()
            self._index.pop(evicted.id, None)
        channel.append(message)
        self._index[message.id] = message

        self._publish("message.created", message.model_dump(mode="json"))
        return MessageHandle(channel_id=channel_id, message_id=message.id)

    async def edit_message(
        self,
        handle: MessageHandle,
        content: str,
        *,
        controls: list[DecisionControl] | None = None,
    ) -> None:
        message = self._index.get(handle.message_id)
        if message is None or message.channel_id != handle.channel_id:
            raise GatewayError(f"Unknown message {handle.message_id} in {handle.channel_id}")

        message.content = content
        message.controls = list(controls or [])
        message.edited_at = datetime.now(timezone.utc)
        self._publish("message.updated", message.model_dump(mode="json"))

    async def send_private(self, user_id: str, channel_id: str, content: str) -> None:
        private = PrivateMessage(user_id=user_id, channel_id=channel_id, content=content)
        self._inboxes.setdefault(user_id, deque(maxlen=self._history)).append(private)
        self._publish("message.private", private.model_dump(mode="json"))

    # ── Reads ────────────────────────────────────────────────────────

    def messages(self, channel_id: str) -> list[BoardMessage]:
        return list(self._channels.get(channel_id, ()))

    def get(self, message_id: str) -> BoardMessage | None:
        return self._index.get(message_id)

    def inbox(self, user_id: str) -> list[PrivateMessage]:
        return list(self._inboxes.get(user_id, ()))

    def clear(self) -> None:
        self._channels.clear()
        self._index.clear()
        self._inboxes.clear()

    # ── Subscriptions ────────────────────────────────────────────────

    def subscribe(self) -> asyncio.Queue[dict[str, Any]]:
        queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=1000)
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[dict[str, Any]]) -> None:
        self._subscribers.discard(queue)

    def _publish(self, event: str, payload: dict[str, Any]) -> None:
        frame = {"event": event, "payload": payload}
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(frame)
            except asyncio.QueueFull:
                logger.warning("Dropping board event %s for a slow subscriber", event)

    @staticmethod
    def _make_id() -> str:
        return str(uuid.uuid4())


# Singleton shared across the application
board = MessageBoard()
