"""Registry service — player self-registration in players.json, plus read-only export."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from app.schemas.player import RegisterOutcome

logger = logging.getLogger(__name__)

# Read-modify-write of players.json must not interleave
_write_lock = asyncio.Lock()


def _default_profile(user_id: str, username: str, steam_link: str) -> dict[str, Any]:
    return {
        "id": int(user_id),
        "name": username,
        "position": "N/A",
        "rating": 70,
        "team": "N/A",
        "averageScorePosition": 0,
        "estimatedWorthEbits": 100000,
        "negativeTraits": {},
        "positiveTraits": {},
        "allTimeStats": {},
        "steamAccountLink": steam_link,
    }


def read_json_file(path: Path) -> Any:
    """Parse a JSON data file. Raises OSError / ValueError on failure."""
    return json.loads(path.read_text(encoding="utf-8"))


async def register_player(
    path: Path, user_id: str, username: str, steam_link: str
) -> RegisterOutcome:
    if not user_id.isdigit():
        logger.warning("Refusing to register non-numeric user id %r", user_id)
        return RegisterOutcome.FAILED

    async with _write_lock:
        try:
            players = read_json_file(path)
        except FileNotFoundError:
            players = []
        except (OSError, ValueError) as exc:
            logger.error("Error reading %s: %s", path, exc)
            return RegisterOutcome.FAILED

        if any(str(p.get("id")) == str(user_id) for p in players):
            return RegisterOutcome.ALREADY_REGISTERED

        players.append(_default_profile(user_id, username, steam_link))

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(players, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.error("Error writing %s: %s", path, exc)
            return RegisterOutcome.FAILED

    logger.info("Registered player %s (%s)", user_id, username)
    return RegisterOutcome.REGISTERED
