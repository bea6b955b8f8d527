"""Transfer request API tests — submit, decide and inspect over HTTP."""

import pytest
from httpx import AsyncClient

from app.main import app
from conftest import APPROVAL_CHANNEL, CONFIRM_CHANNEL, FREE_AGENT, LOG_CHANNEL, TEAM_A


async def _seed(client: AsyncClient):
    await client.put(
        "/api/members/player-1",
        json={"display_name": "Player One", "role_ids": [FREE_AGENT]},
    )
    await client.put(
        "/api/members/admin-1",
        json={"display_name": "Admin", "can_manage_roles": True},
    )
    await client.put("/api/members/fan-1", json={"display_name": "Fan"})


def _submit_body(**overrides):
    body = {
        "requester_id": "player-1",
        "role_id": TEAM_A,
        "seasons": 3,
        "channel_id": CONFIRM_CHANNEL,
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_member_roles_roundtrip(client: AsyncClient):
    await _seed(client)
    resp = await client.get("/api/members/player-1")
    assert resp.status_code == 200
    assert resp.json()["role_ids"] == [FREE_AGENT]

    resp = await client.post("/api/members/player-1/roles/extra")
    assert resp.json()["role_ids"] == ["extra", FREE_AGENT]

    resp = await client.delete("/api/members/player-1/roles/extra")
    assert resp.status_code == 204
    resp = await client.delete("/api/members/player-1/roles/extra")
    assert resp.status_code == 404

    resp = await client.get("/api/members/nobody")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_submit_and_approve(client: AsyncClient):
    await _seed(client)

    resp = await client.post("/api/requests", json=_submit_body())
    assert resp.status_code == 202
    data = resp.json()
    assert data["state"] == "pending"
    assert data["seasons"] == 3
    message_id = data["approver_surface"]["message_id"]

    resp = await client.get("/api/requests")
    assert [r["id"] for r in resp.json()] == [data["id"]]

    resp = await client.get(f"/api/channels/{APPROVAL_CHANNEL}/messages")
    [notice] = resp.json()
    assert notice["id"] == message_id
    assert len(notice["controls"]) == 2

    resp = await client.post(
        "/api/decisions",
        json={"message_id": message_id, "actor_id": "admin-1", "choice": "approve"},
    )
    assert resp.status_code == 202
    assert resp.json()["accepted"] is True

    await app.state.orchestrator.drain()

    resp = await client.get(f"/api/requests/{data['id']}")
    assert resp.status_code == 404

    resp = await client.get("/api/members/player-1")
    assert resp.json()["role_ids"] == [TEAM_A]

    resp = await client.get(f"/api/channels/{LOG_CHANNEL}/messages")
    assert len(resp.json()) == 1

    resp = await client.get(f"/api/channels/messages/{message_id}")
    assert resp.json()["controls"] == []
    assert "by <@admin-1>" in resp.json()["content"]

    # Stale button press after resolution
    resp = await client.post(
        "/api/decisions",
        json={"message_id": message_id, "actor_id": "admin-1", "choice": "deny"},
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_decision_without_authority(client: AsyncClient):
    await _seed(client)
    data = (await client.post("/api/requests", json=_submit_body())).json()
    message_id = data["approver_surface"]["message_id"]

    resp = await client.post(
        "/api/decisions",
        json={"message_id": message_id, "actor_id": "fan-1", "choice": "approve"},
    )
    assert resp.status_code == 403

    resp = await client.get(f"/api/requests/{data['id']}")
    assert resp.status_code == 200
    assert resp.json()["state"] == "pending"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("overrides", "status", "reason"),
    [
        ({"channel_id": "general"}, 403, "wrong_channel"),
        ({"requester_id": "fan-1"}, 403, "not_eligible"),
        ({"role_id": "moderators"}, 403, "invalid_target"),
        ({"seasons": 0}, 422, "invalid_duration"),
        ({"seasons": 6}, 422, "invalid_duration"),
    ],
)
async def test_submit_rejections(client: AsyncClient, overrides, status, reason):
    await _seed(client)
    resp = await client.post("/api/requests", json=_submit_body(**overrides))
    assert resp.status_code == status
    assert resp.json()["detail"]["reason"] == reason

    resp = await client.get(f"/api/channels/{APPROVAL_CHANNEL}/messages")
    assert resp.json() == []
    requester = overrides.get("requester_id", "player-1")
    resp = await client.get(f"/api/channels/inbox/{requester}")
    assert len(resp.json()) == 1


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.json()["pending_requests"] == 0
