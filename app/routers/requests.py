"""Transfer request endpoints — submit, inspect pending requests, decide."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException

from app.adapters.base import DirectoryError, GatewayError, MembershipDirectory
from app.deps import get_directory, get_orchestrator
from app.schemas.transfer import (
    DecisionEvent,
    DecisionResult,
    DecisionSubmit,
    RejectionReason,
    TransferResponse,
    TransferSubmit,
)
from app.services.approval_service import ApprovalOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter()

_REJECTION_STATUS = {
    RejectionReason.WRONG_CHANNEL: 403,
    RejectionReason.NOT_ELIGIBLE: 403,
    RejectionReason.INVALID_TARGET: 403,
    RejectionReason.INVALID_DURATION: 422,
}


@router.post("/requests", response_model=TransferResponse, status_code=202)
async def submit_request(
    body: TransferSubmit,
    orchestrator: ApprovalOrchestrator = Depends(get_orchestrator),
):
    try:
        submission = await orchestrator.submit(
            body.requester_id, body.role_id, body.seasons, body.channel_id
        )
    except DirectoryError as exc:
        logger.error("Membership directory unavailable: %s", exc)
        raise HTTPException(status_code=503, detail="Membership directory unavailable")
    except GatewayError as exc:
        raise HTTPException(status_code=502, detail=f"Could not post request: {exc}")

    if not submission.accepted and submission.reason is not None:
        raise HTTPException(
            status_code=_REJECTION_STATUS[submission.reason],
            detail={"reason": submission.reason.value, "message": submission.message},
        )
    return submission.request


@router.get("/requests", response_model=list[TransferResponse])
async def list_requests(orchestrator: ApprovalOrchestrator = Depends(get_orchestrator)):
    return orchestrator.pending()


@router.get("/requests/{request_id}", response_model=TransferResponse)
async def get_request(
    request_id: uuid.UUID, orchestrator: ApprovalOrchestrator = Depends(get_orchestrator)
):
    request = orchestrator.get(request_id)
    if not request:
        raise HTTPException(status_code=404, detail="Request not found or already resolved")
    return request


@router.post("/decisions", response_model=DecisionResult, status_code=202)
async def decide(
    body: DecisionSubmit,
    orchestrator: ApprovalOrchestrator = Depends(get_orchestrator),
    directory: MembershipDirectory = Depends(get_directory),
):
    """A button press on an approver notice."""
    if orchestrator.get_by_surface(body.message_id) is None:
        raise HTTPException(status_code=404, detail="No pending request for this message")

    try:
        authority = await directory.has_manage_authority(body.actor_id)
    except DirectoryError as exc:
        logger.error("Membership directory unavailable: %s", exc)
        raise HTTPException(status_code=503, detail="Membership directory unavailable")

    event = DecisionEvent(
        actor_id=body.actor_id,
        actor_has_manage_authority=authority,
        message_id=body.message_id,
        choice=body.choice,
    )
    if not orchestrator.dispatch_decision(event):
        if not authority:
            raise HTTPException(status_code=403, detail="Missing role-management authority")
        raise HTTPException(status_code=409, detail="Request already resolved")
    return DecisionResult(accepted=True, message_id=body.message_id)
