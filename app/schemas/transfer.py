"""Transfer request types — the in-memory ledger entry, gateway handles, API bodies."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, Field


class TransferState(StrEnum):
    """Lifecycle of a transfer request. Everything but PENDING is terminal."""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    EXPIRED = "expired"


class DecisionChoice(StrEnum):
    APPROVE = "approve"
    DENY = "deny"


class RejectionReason(StrEnum):
    WRONG_CHANNEL = "wrong_channel"
    INVALID_DURATION = "invalid_duration"
    NOT_ELIGIBLE = "not_eligible"
    INVALID_TARGET = "invalid_target"


# ── Gateway primitives ───────────────────────────────────────────────


class MessageHandle(BaseModel):
    """Identifies a posted message so it can be edited later."""

    model_config = {"frozen": True}

    channel_id: str
    message_id: str


class DecisionControl(BaseModel):
    """An interactive button rendered under an approver notice."""

    model_config = {"frozen": True}

    custom_id: DecisionChoice
    label: str
    style: str = "secondary"


APPROVAL_CONTROLS: list[DecisionControl] = [
    DecisionControl(custom_id=DecisionChoice.APPROVE, label="Approve", style="success"),
    DecisionControl(custom_id=DecisionChoice.DENY, label="Deny", style="danger"),
]


class DecisionEvent(BaseModel):
    """A button press on some message, as delivered by the gateway."""

    model_config = {"frozen": True}

    actor_id: str
    actor_has_manage_authority: bool
    message_id: str
    choice: DecisionChoice


# ── Ledger entry ─────────────────────────────────────────────────────


class TransferRequest(BaseModel):
    """One pending request to join a team role, held in memory only."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4, frozen=True)
    requester_id: str = Field(frozen=True)
    target_role: str = Field(frozen=True)
    seasons: int = Field(frozen=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), frozen=True)
    requester_surface: MessageHandle | None = None
    approver_surface: MessageHandle | None = None
    state: TransferState = TransferState.PENDING
    resolved_by: str | None = None
    resolved_at: datetime | None = None
    role_update_failed: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.state != TransferState.PENDING

    def transition(self, state: TransferState, resolved_by: str | None = None) -> bool:
        """Move out of PENDING. Returns False if the request was already resolved."""
        if state == TransferState.PENDING:
            raise ValueError("Cannot transition back to pending")
        if self.is_terminal:
            return False
        self.state = state
        self.resolved_by = resolved_by
        self.resolved_at = datetime.now(timezone.utc)
        return True


class Submission(BaseModel):
    """Outcome of a submit call: either a pending request or a rejection."""

    accepted: bool
    reason: RejectionReason | None = None
    message: str = ""
    request: TransferRequest | None = None


# ── API bodies ───────────────────────────────────────────────────────


class TransferSubmit(BaseModel):
    requester_id: str = Field(..., min_length=1, max_length=64)
    role_id: str = Field(..., min_length=1, max_length=64)
    seasons: int
    channel_id: str = Field(..., min_length=1, max_length=64)


class TransferResponse(BaseModel):
    id: uuid.UUID
    requester_id: str
    target_role: str
    seasons: int
    state: TransferState
    created_at: datetime
    requester_surface: MessageHandle | None
    approver_surface: MessageHandle | None
    resolved_by: str | None
    resolved_at: datetime | None

    model_config = {"from_attributes": True}


class DecisionSubmit(BaseModel):
    message_id: str
    actor_id: str
    choice: DecisionChoice


class DecisionResult(BaseModel):
    accepted: bool
    message_id: str
