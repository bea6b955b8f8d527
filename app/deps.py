"""FastAPI dependencies for the runtime objects built at startup."""

from fastapi import Request

from app.adapters.base import MembershipDirectory
from app.adapters.board import MessageBoard, board
from app.services.approval_service import ApprovalOrchestrator


def get_orchestrator(request: Request) -> ApprovalOrchestrator:
    return request.app.state.orchestrator


def get_directory(request: Request) -> MembershipDirectory:
    return request.app.state.directory


def get_board() -> MessageBoard:
    return board
