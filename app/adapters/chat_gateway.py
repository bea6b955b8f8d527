"""Chat gateway WebSocket adapter.

Implements the bot side of the chat gateway protocol:
  - connect handshake (challenge nonce + bot token)
  - req/res pattern for posting, editing and private replies
  - event streaming for slash commands and button presses
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

import websockets
from websockets.asyncio.client import ClientConnection

from app.adapters.base import GatewayError, MessagingGateway
from app.schemas.transfer import DecisionChoice, DecisionControl, DecisionEvent, MessageHandle

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = 1
CLIENT_ID = "rosterdesk"

REQUEST_TIMEOUT = 30.0

ConfirmHandler = Callable[[str, str, int, str], Awaitable[Any]]
RegisterHandler = Callable[[str, str, str, str], Awaitable[Any]]
DecisionHandler = Callable[[DecisionEvent], bool]


class ChatGatewayAdapter(MessagingGateway):
    """WebSocket client for a chat platform gateway."""

    def __init__(self, url: str, token: str = "") -> None:
        self._url = url
        self._token = token
        self._ws: ClientConnection | None = None
        self._pending: dict[str, asyncio.Future[dict]] = {}
        self._listener_task: asyncio.Task | None = None
        self._handler_tasks: set[asyncio.Task] = set()
        self._connected = False

        self._on_confirm: ConfirmHandler | None = None
        self._on_register: RegisterHandler | None = None
        self._on_decision: DecisionHandler | None = None

    def bind(
        self,
        *,
        on_confirm: ConfirmHandler | None = None,
        on_register: RegisterHandler | None = None,
        on_decision: DecisionHandler | None = None,
    ) -> None:
        """Attach the callbacks inbound interactions are routed to."""
        self._on_confirm = on_confirm
        self._on_register = on_register
        self._on_decision = on_decision

    # ── Connection lifecycle ─────────────────────────────────────────

    async def connect(self) -> None:
        if self._connected and self._listener_task and not self._listener_task.done():
            return

        logger.info("Connecting to chat gateway at %s", self._url)
        self._ws = await websockets.connect(self._url)

        # Wait for connect.challenge event
        challenge = json.loads(await self._ws.recv())
        if challenge.get("event") != "connect.challenge":
            raise ConnectionError(f"Expected connect.challenge, got: {challenge}")

        connect_req = {
            "type": "req",
            "id": self._make_id(),
            "method": "connect",
            "params": {
                "protocol": PROTOCOL_VERSION,
                "client": {"id": CLIENT_ID, "version": "0.1.0"},
                "auth": {"token": self._token} if self._token else {},
                "nonce": challenge["payload"]["nonce"],
                "intents": ["interactions", "messages"],
            },
        }
        await self._ws.send(json.dumps(connect_req))

        hello = json.loads(await self._ws.recv())
        if not hello.get("ok"):
            await self._ws.close()
            self._ws = None
            raise ConnectionError(f"Connect failed: {hello.get('error')}")

        logger.info("Connected to chat gateway as %s", hello.get("payload", {}).get("user", "?"))
        self._connected = True
        self._listener_task = asyncio.create_task(self._listen())

    async def disconnect(self) -> None:
        self._connected = False
        if self._listener_task:
            self._listener_task.cancel()
            try:
                await self._listener_task
            except asyncio.CancelledError:
                pass
        for task in list(self._handler_tasks):
            task.cancel()
        if self._ws:
            await self._ws.close()
            self._ws = None

    # ── Core protocol ────────────────────────────────────────────────

    async def _listen(self) -> None:
        """Background loop: dispatch responses and events."""
        if self._ws is None:
            return
        try:
            async for raw in self._ws:
                try:
                    self._handle_frame(json.loads(raw))
                except (ValueError, AttributeError) as exc:
                    logger.warning("Ignoring malformed gateway frame %.200r: %s", raw, exc)
        except websockets.ConnectionClosed:
            logger.warning("Chat gateway connection closed")
        except asyncio.CancelledError:
            pass
        finally:
            self._connected = False
            for future in self._pending.values():
                if not future.done():
                    future.set_exception(GatewayError("Chat gateway connection closed"))

    def _handle_frame(self, msg: dict[str, Any]) -> None:
        msg_type = msg.get("type")
        if msg_type == "res":
            future = self._pending.get(msg.get("id", ""))
            if future and not future.done():
                future.set_result(msg)
        elif msg_type == "event":
            self._handle_event(msg.get("event", ""), msg.get("payload") or {})

    def _handle_event(self, event: str, payload: dict[str, Any]) -> None:
        # Button presses resolve synchronously; commands post messages, which
        # needs this listener free to receive the responses.
        if event == "interaction.button":
            if self._on_decision is None:
                return
            try:
                decision = DecisionEvent(
                    actor_id=str(payload["userId"]),
                    actor_has_manage_authority=bool(payload.get("canManageRoles", False)),
                    message_id=str(payload["messageId"]),
                    choice=DecisionChoice(payload["customId"]),
                )
            except (KeyError, ValueError) as exc:
                logger.warning("Malformed button interaction %s: %s", payload, exc)
                return
            self._on_decision(decision)
        elif event == "interaction.confirm" and self._on_confirm is not None:
            try:
                seasons = int(payload.get("seasons", 0))
            except (TypeError, ValueError):
                logger.warning("Malformed confirm interaction %s", payload)
                return
            self._spawn(
                self._on_confirm(
                    str(payload.get("userId", "")),
                    str(payload.get("roleId", "")),
                    seasons,
                    str(payload.get("channelId", "")),
                ),
                event,
            )
        elif event == "interaction.register" and self._on_register is not None:
            self._spawn(
                self._on_register(
                    str(payload.get("userId", "")),
                    str(payload.get("username", "")),
                    str(payload.get("steamLink", "")),
                    str(payload.get("channelId", "")),
                ),
                event,
            )
        else:
            logger.debug("Ignoring gateway event %s", event)

    def _spawn(self, coro: Awaitable[Any], event: str) -> None:
        async def runner() -> None:
            try:
                await coro
            except Exception:
                logger.exception("Handler for %s failed", event)

        task = asyncio.create_task(runner())
        self._handler_tasks.add(task)
        task.add_done_callback(self._handler_tasks.discard)

    async def _request(self, method: str, params: dict[str, Any]) -> dict[str, Any]:
        """Send a req and wait for the matching res."""
        if not self._ws or not self._connected:
            raise GatewayError("Chat gateway is not connected")

        req_id = self._make_id()
        frame = {"type": "req", "id": req_id, "method": method, "params": params}

        future: asyncio.Future[dict] = asyncio.get_running_loop().create_future()
        self._pending[req_id] = future
        try:
            await self._ws.send(json.dumps(frame))
            result = await asyncio.wait_for(future, timeout=REQUEST_TIMEOUT)
        except (TimeoutError, websockets.ConnectionClosed) as exc:
            raise GatewayError(f"Chat gateway request {method} failed: {exc}") from exc
        finally:
            self._pending.pop(req_id, None)

        if not result.get("ok"):
            raise GatewayError(f"Chat gateway request {method} failed: {result.get('error')}")
        return result.get("payload", {})

    # ── MessagingGateway ─────────────────────────────────────────────

    async def send_message(
        self,
        channel_id: str,
        content: str,
        *,
        controls: list[DecisionControl] | None = None,
    ) -> MessageHandle:
        payload = await self._request(
            "message.send",
            {
                "channelId": channel_id,
                "content": content,
                "components": self._components(controls),
            },
        )
        return MessageHandle(channel_id=channel_id, message_id=str(payload["messageId"]))

    async def edit_message(
        self,
        handle: MessageHandle,
        content: str,
        *,
        controls: list[DecisionControl] | None = None,
    ) -> None:
        await self._request(
            "message.edit",
            {
                "channelId": handle.channel_id,
                "messageId": handle.message_id,
                "content": content,
                "components": self._components(controls),
            },
        )

    async def send_private(self, user_id: str, channel_id: str, content: str) -> None:
        await self._request(
            "message.private",
            {"userId": user_id, "channelId": channel_id, "content": content},
        )

    # ── Helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _components(controls: list[DecisionControl] | None) -> list[dict[str, str]]:
        return [
            {"type": "button", "customId": c.custom_id.value, "label": c.label, "style": c.style}
            for c in controls or []
        ]

    @staticmethod
    def _make_id() -> str:
        return str(uuid.uuid4())
