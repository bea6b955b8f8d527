"""Player registry endpoints — self-registration and the read-only JSON export."""

import logging
from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.config import settings
from app.schemas.player import REGISTER_MESSAGES, PlayerRegister, RegisterOutcome, RegisterResult
from app.services import registry_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _export(path: Path, label: str):
    try:
        return registry_service.read_json_file(path)
    except (OSError, ValueError) as exc:
        logger.error("Error reading %s file: %s", label, exc)
        return JSONResponse(status_code=500, content={"error": f"Failed to read {label} data."})


@router.get("/players.json")
async def export_players():
    return _export(settings.players_path, "players")


@router.get("/teams.json")
async def export_teams():
    return _export(settings.teams_path, "teams")


@router.post("/register", response_model=RegisterResult)
async def register(body: PlayerRegister):
    outcome = await registry_service.register_player(
        settings.players_path, body.user_id, body.username, body.steam_link
    )
    status = {
        RegisterOutcome.REGISTERED: 201,
        RegisterOutcome.ALREADY_REGISTERED: 409,
        RegisterOutcome.FAILED: 500,
    }[outcome]
    result = RegisterResult(outcome=outcome, message=REGISTER_MESSAGES[outcome])
    return JSONResponse(status_code=status, content=result.model_dump(mode="json"))
