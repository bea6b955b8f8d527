"""Approval service — drives a transfer request from submission to its terminal state.

submit() validates the request, posts the requester acknowledgement and the
approver notice, and arms a DecisionCollector on the approver notice. A
background task then waits for the collector and applies exactly one of the
approved / denied / expired side-effect branches before dropping the request.

Pending requests live only in memory, keyed by approver message id. They are
lost if the process restarts.
"""

from __future__ import annotations

import asyncio
import logging
import uuid

from app.adapters.base import GatewayError, MembershipDirectory, MessagingGateway
from app.config import ApprovalConfig
from app.schemas.transfer import (
    APPROVAL_CONTROLS,
    DecisionChoice,
    DecisionEvent,
    MessageHandle,
    RejectionReason,
    Submission,
    TransferRequest,
    TransferState,
)
from app.services import membership_guard
from app.services.audit_logger import AuditLogger
from app.services.decision_collector import DecisionCollector
from app.utils import messages

logger = logging.getLogger(__name__)


class ApprovalOrchestrator:
    def __init__(
        self,
        config: ApprovalConfig,
        gateway: MessagingGateway,
        directory: MembershipDirectory,
        audit: AuditLogger | None = None,
    ) -> None:
        self.config = config
        self._gateway = gateway
        self._directory = directory
        self._audit = audit or AuditLogger(gateway, config.transfer_log_channel_id)
        self._requests: dict[str, TransferRequest] = {}
        self._collectors: dict[str, DecisionCollector] = {}
        self._tasks: set[asyncio.Task[TransferRequest]] = set()

    # ── Submission ───────────────────────────────────────────────────

    async def submit(
        self,
        requester_id: str,
        target_role: str,
        seasons: int,
        origin_channel: str,
    ) -> Submission:
        reason = self._precheck(seasons, origin_channel)
        if reason is None:
            reason = await membership_guard.validate(
                self._directory, self.config, requester_id, target_role
            )
        if reason is not None:
            return await self._reject(requester_id, origin_channel, reason)

        request = TransferRequest(
            requester_id=requester_id, target_role=target_role, seasons=seasons
        )
        ack = messages.requester_ack(requester_id, target_role, seasons)
        request.requester_surface = await self._gateway.send_message(origin_channel, ack)

        try:
            request.approver_surface = await self._gateway.send_message(
                self.config.approval_channel_id,
                messages.approver_notice(requester_id, target_role, seasons),
                controls=APPROVAL_CONTROLS,
            )
        except GatewayError:
            logger.error("Could not post approver notice for request %s", request.id)
            await self._safe_edit(request.requester_surface, messages.undeliverable_notice())
            raise

        self._arm(request)
        logger.info(
            "Transfer request %s: %s → %s for %d season(s), awaiting approval",
            request.id, requester_id, target_role, seasons,
        )
        return Submission(accepted=True, message=ack, request=request)

    def _precheck(self, seasons: int, origin_channel: str) -> RejectionReason | None:
        if origin_channel != self.config.confirmation_channel_id:
            return RejectionReason.WRONG_CHANNEL
        if not self.config.min_seasons <= seasons <= self.config.max_seasons:
            return RejectionReason.INVALID_DURATION
        return None

    async def _reject(
        self, requester_id: str, origin_channel: str, reason: RejectionReason
    ) -> Submission:
        text = messages.rejection_message(
            reason, min_seasons=self.config.min_seasons, max_seasons=self.config.max_seasons
        )
        logger.info("Rejected transfer request from %s: %s", requester_id, reason.value)
        try:
            await self._gateway.send_private(requester_id, origin_channel, text)
        except GatewayError as exc:
            logger.warning("Failed to notify %s of rejection: %s", requester_id, exc)
        return Submission(accepted=False, reason=reason, message=text)

    def _arm(self, request: TransferRequest) -> None:
        if request.approver_surface is None:
            raise ValueError(f"Request {request.id} has no approver notice to watch")
        key = request.approver_surface.message_id
        collector = DecisionCollector(
            request.approver_surface, timeout=self.config.decision_window_seconds
        )
        self._requests[key] = request
        self._collectors[key] = collector

        task = asyncio.create_task(self._run(request, collector), name=f"transfer-{request.id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    # ── Decisions ────────────────────────────────────────────────────

    def dispatch_decision(self, event: DecisionEvent) -> bool:
        """Route a button press to its collector. Returns True if it resolved a request."""
        collector = self._collectors.get(event.message_id)
        if collector is None:
            logger.debug("Decision on unknown or resolved message %s", event.message_id)
            return False
        return collector.offer(event)

    async def _run(self, request: TransferRequest, collector: DecisionCollector) -> TransferRequest:
        key = collector.surface.message_id
        try:
            event = await collector.wait()
            if event is None:
                await self._expire(request)
            elif event.choice == DecisionChoice.APPROVE:
                await self._approve(request, event.actor_id)
            else:
                await self._deny(request, event.actor_id)
        except Exception:
            logger.exception("Transfer request %s failed while resolving", request.id)
        finally:
            collector.stop()
            self._requests.pop(key, None)
            self._collectors.pop(key, None)
        return request

    # ── Terminal branches ────────────────────────────────────────────

    async def _approve(self, request: TransferRequest, approver_id: str) -> None:
        if not request.transition(TransferState.APPROVED, resolved_by=approver_id):
            return
        logger.info("Transfer request %s approved by %s", request.id, approver_id)

        if not await self._move_roles(request):
            request.role_update_failed = True
        await self._audit.record(
            request.requester_id, request.target_role, request.seasons, approver_id
        )
        await self._finalize(
            request,
            approver_text=messages.approved_for_approver(
                request.requester_id, request.target_role, request.seasons, approver_id
            ),
            requester_text=messages.approved_for_requester(
                request.requester_id, request.target_role, request.seasons
            ),
        )

    async def _deny(self, request: TransferRequest, approver_id: str) -> None:
        if not request.transition(TransferState.DENIED, resolved_by=approver_id):
            return
        logger.info("Transfer request %s denied by %s", request.id, approver_id)
        await self._finalize(
            request,
            approver_text=messages.denied_for_approver(
                request.requester_id, request.target_role, request.seasons, approver_id
            ),
            requester_text=messages.denied_for_requester(
                request.requester_id, request.target_role, request.seasons
            ),
        )

    async def _expire(self, request: TransferRequest) -> None:
        if not request.transition(TransferState.EXPIRED):
            return
        logger.info("Transfer request %s timed out", request.id)
        await self._finalize(
            request,
            approver_text=messages.expired_for_approver(),
            requester_text=messages.expired_for_requester(),
        )

    async def _move_roles(self, request: TransferRequest) -> bool:
        """Swap the Free Agent role for the team role. Not retried on failure."""
        try:
            await self._directory.remove_role(request.requester_id, self.config.free_agent_role_id)
            await self._directory.add_role(request.requester_id, request.target_role)
        except Exception:
            logger.error(
                "Role update failed for approved request %s (%s → %s)",
                request.id, request.requester_id, request.target_role, exc_info=True,
            )
            return False
        return True

    async def _finalize(
        self, request: TransferRequest, *, approver_text: str, requester_text: str
    ) -> None:
        # controls=None strips the Approve/Deny buttons
        if request.approver_surface:
            await self._safe_edit(request.approver_surface, approver_text)
        if request.requester_surface:
            await self._safe_edit(request.requester_surface, requester_text)

    async def _safe_edit(self, handle: MessageHandle, content: str) -> None:
        try:
            await self._gateway.edit_message(handle, content, controls=None)
        except Exception as exc:
            logger.warning("Failed to edit message %s: %s", handle.message_id, exc)

    # ── Registry ─────────────────────────────────────────────────────

    def pending(self) -> list[TransferRequest]:
        return sorted(self._requests.values(), key=lambda r: r.created_at)

    def get_by_surface(self, message_id: str) -> TransferRequest | None:
        return self._requests.get(message_id)

    def get(self, request_id: uuid.UUID) -> TransferRequest | None:
        for request in self._requests.values():
            if request.id == request_id:
                return request
        return None

    async def drain(self) -> None:
        """Wait for every in-flight request to reach a terminal state."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def shutdown(self) -> None:
        """Drop in-flight requests without resolving them."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if tasks:
            logger.warning("Dropped %d pending transfer request(s) on shutdown", len(tasks))
