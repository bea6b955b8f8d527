"""Audit logger — posts approved transfers to the transfer log channel."""

from __future__ import annotations

import logging

from app.adapters.base import MessagingGateway
from app.utils.messages import transfer_record

logger = logging.getLogger(__name__)


class AuditLogger:
    def __init__(self, gateway: MessagingGateway, channel_id: str) -> None:
        self._gateway = gateway
        self._channel_id = channel_id

    async def record(
        self, requester_id: str, target_role: str, seasons: int, approver_id: str
    ) -> bool:
        """Best-effort: returns False (and logs) if the record could not be delivered."""
        content = transfer_record(requester_id, target_role, seasons, approver_id)
        try:
            await self._gateway.send_message(self._channel_id, content)
        except Exception as exc:
            logger.warning(
                "Failed to post transfer record for %s → %s: %s", requester_id, target_role, exc
            )
            return False
        return True
