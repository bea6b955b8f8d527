"""Shared fixtures: in-memory database, message board, fake directory, HTTP client."""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.adapters.base import DirectoryError, MembershipDirectory
from app.adapters.board import MessageBoard, board
from app.adapters.directory import SqlMembershipDirectory
from app.config import ApprovalConfig
from app.database import Base, get_db
from app.main import app
from app.services.approval_service import ApprovalOrchestrator

CONFIRM_CHANNEL = "confirm-ch"
APPROVAL_CHANNEL = "approval-ch"
LOG_CHANNEL = "transfer-log-ch"
FREE_AGENT = "free-agent"
TEAM_A = "team-a"
TEAM_B = "team-b"


class FakeDirectory(MembershipDirectory):
    """Dict-backed directory that records mutations and can be told to fail."""

    def __init__(self) -> None:
        self.roles: dict[str, set[str]] = {}
        self.managers: set[str] = set()
        self.added: list[tuple[str, str]] = []
        self.removed: list[tuple[str, str]] = []
        self.fail_mutations = False

    async def has_role(self, user_id: str, role_id: str) -> bool:
        return role_id in self.roles.get(user_id, set())

    async def add_role(self, user_id: str, role_id: str) -> None:
        if self.fail_mutations:
            raise DirectoryError("directory offline")
        self.roles.setdefault(user_id, set()).add(role_id)
        self.added.append((user_id, role_id))

    async def remove_role(self, user_id: str, role_id: str) -> None:
        if self.fail_mutations:
            raise DirectoryError("directory offline")
        self.roles.setdefault(user_id, set()).discard(role_id)
        self.removed.append((user_id, role_id))

    async def has_manage_authority(self, user_id: str) -> bool:
        return user_id in self.managers


def make_config(window: float = 5.0) -> ApprovalConfig:
    return ApprovalConfig(
        confirmation_channel_id=CONFIRM_CHANNEL,
        approval_channel_id=APPROVAL_CHANNEL,
        transfer_log_channel_id=LOG_CHANNEL,
        free_agent_role_id=FREE_AGENT,
        allowed_team_role_ids=frozenset({TEAM_A, TEAM_B}),
        decision_window_seconds=window,
    )


@pytest.fixture
def gateway() -> MessageBoard:
    return MessageBoard()


@pytest.fixture
def directory() -> FakeDirectory:
    d = FakeDirectory()
    d.roles["player-1"] = {FREE_AGENT}
    d.managers.add("admin-1")
    d.managers.add("admin-2")
    return d


@pytest_asyncio.fixture
async def orchestrator(gateway, directory):
    orch = ApprovalOrchestrator(make_config(), gateway, directory)
    yield orch
    await orch.shutdown()


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    board.clear()
    directory = SqlMembershipDirectory(session_factory)
    orch = ApprovalOrchestrator(make_config(), board, directory)
    app.state.directory = directory
    app.state.orchestrator = orch
    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    await orch.shutdown()
    board.clear()
