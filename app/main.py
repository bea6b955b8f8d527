"""FastAPI application entrypoint."""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.adapters.base import MessagingGateway
from app.adapters.board import board
from app.adapters.chat_gateway import ChatGatewayAdapter
from app.adapters.directory import SqlMembershipDirectory
from app.config import settings
from app.database import async_session, init_db
from app.routers import channels, members, registry, requests
from app.schemas.player import REGISTER_MESSAGES
from app.services import registry_service
from app.services.approval_service import ApprovalOrchestrator

# ── Logging setup ────────────────────────────────────────────────────
_log_level = os.environ.get("ROSTERDESK_LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=_log_level,
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)
# Always trace request lifecycles
logging.getLogger("app.services.approval_service").setLevel(logging.DEBUG)

logger = logging.getLogger(__name__)


def _bind_chat_gateway(adapter: ChatGatewayAdapter, orchestrator: ApprovalOrchestrator) -> None:
    """Route slash commands and button presses from the chat gateway."""

    async def on_register(user_id: str, username: str, steam_link: str, channel_id: str) -> None:
        outcome = await registry_service.register_player(
            settings.players_path, user_id, username, steam_link
        )
        await adapter.send_private(user_id, channel_id, REGISTER_MESSAGES[outcome])

    adapter.bind(
        on_confirm=orchestrator.submit,
        on_register=on_register,
        on_decision=orchestrator.dispatch_decision,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await init_db()

    chat_gateway: ChatGatewayAdapter | None = None
    gateway: MessagingGateway = board
    if settings.chat_gateway_url:
        chat_gateway = ChatGatewayAdapter(settings.chat_gateway_url, settings.chat_gateway_token)
        gateway = chat_gateway

    directory = SqlMembershipDirectory(async_session)
    orchestrator = ApprovalOrchestrator(settings.approval_config(), gateway, directory)
    app.state.directory = directory
    app.state.orchestrator = orchestrator

    if chat_gateway:
        _bind_chat_gateway(chat_gateway, orchestrator)
        try:
            await chat_gateway.connect()
        except (ConnectionError, OSError) as exc:
            logger.warning("Chat gateway connection failed (non-fatal): %s", exc)
    else:
        logger.info("No chat gateway configured, using the in-process message board")

    yield

    # Shutdown: pending requests are not persisted
    await orchestrator.shutdown()
    if chat_gateway:
        await chat_gateway.disconnect()


app = FastAPI(
    title="RosterDesk",
    description="Team transfer confirmations with approver sign-off",
    version="0.1.0",
    lifespan=lifespan,
)

# Mount routers
app.include_router(requests.router, prefix="/api", tags=["requests"])
app.include_router(channels.router, prefix="/api/channels", tags=["channels"])
app.include_router(members.router, prefix="/api/members", tags=["members"])
app.include_router(registry.router, prefix="/api", tags=["registry"])


@app.get("/health")
async def health():
    orchestrator: ApprovalOrchestrator | None = getattr(app.state, "orchestrator", None)
    return {
        "status": "ok",
        "service": "rosterdesk",
        "gateway": "chat" if settings.chat_gateway_url else "board",
        "pending_requests": len(orchestrator.pending()) if orchestrator else 0,
    }
