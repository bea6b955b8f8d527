"""Membership guard — eligibility and allow-list checks for transfer requests."""

from __future__ import annotations

from app.adapters.base import MembershipDirectory
from app.config import ApprovalConfig
from app.schemas.transfer import RejectionReason


async def validate(
    directory: MembershipDirectory,
    config: ApprovalConfig,
    requester_id: str,
    target_role: str,
) -> RejectionReason | None:
    """Return the rejection reason, or None if the request may proceed."""
    if not await directory.has_role(requester_id, config.free_agent_role_id):
        return RejectionReason.NOT_ELIGIBLE
    if target_role not in config.allowed_team_role_ids:
        return RejectionReason.INVALID_TARGET
    return None
