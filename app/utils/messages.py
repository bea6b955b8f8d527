"""Message text helpers — mention formatting and the transfer notice templates."""

from __future__ import annotations

from app.schemas.transfer import RejectionReason


def user_mention(user_id: str) -> str:
    return f"<@{user_id}>"


def role_mention(role_id: str) -> str:
    return f"<@&{role_id}>"


def _seasons(n: int) -> str:
    return f"{n} season(s)"


REJECTION_MESSAGES: dict[RejectionReason, str] = {
    RejectionReason.WRONG_CHANNEL: "This command can only be used in the designated confirmation channel.",
    RejectionReason.INVALID_DURATION: "Number of seasons must be between {min} and {max}.",
    RejectionReason.NOT_ELIGIBLE: "You can only confirm if you are a Free Agent.",
    RejectionReason.INVALID_TARGET: "You can only confirm to a designated team role.",
}


def rejection_message(reason: RejectionReason, *, min_seasons: int = 1, max_seasons: int = 5) -> str:
    return REJECTION_MESSAGES[reason].format(min=min_seasons, max=max_seasons)


# ── Pending ──────────────────────────────────────────────────────────


def requester_ack(requester_id: str, role_id: str, seasons: int) -> str:
    return f"{user_mention(requester_id)} requests to join {role_mention(role_id)} for {_seasons(seasons)}."


def approver_notice(requester_id: str, role_id: str, seasons: int) -> str:
    return (
        f"{user_mention(requester_id)} has requested to join "
        f"{role_mention(role_id)} for {_seasons(seasons)}."
    )


def undeliverable_notice() -> str:
    return "Your confirmation request could not be delivered to the approvers. Please try again later."


# ── Terminal ─────────────────────────────────────────────────────────


def approved_for_approver(requester_id: str, role_id: str, seasons: int, approver_id: str) -> str:
    return (
        f"{user_mention(requester_id)} approved to join {role_mention(role_id)} "
        f"for {_seasons(seasons)} by {user_mention(approver_id)}."
    )


def approved_for_requester(requester_id: str, role_id: str, seasons: int) -> str:
    return (
        f"{user_mention(requester_id)} has been approved to join "
        f"{role_mention(role_id)} for {_seasons(seasons)}."
    )


def denied_for_approver(requester_id: str, role_id: str, seasons: int, approver_id: str) -> str:
    return (
        f"{user_mention(requester_id)}'s request to join {role_mention(role_id)} "
        f"for {_seasons(seasons)} denied by {user_mention(approver_id)}."
    )


def denied_for_requester(requester_id: str, role_id: str, seasons: int) -> str:
    return (
        f"{user_mention(requester_id)}'s request to join {role_mention(role_id)} "
        f"for {_seasons(seasons)} has been denied."
    )


def expired_for_approver() -> str:
    return "The confirmation request has timed out."


def expired_for_requester() -> str:
    return "Your confirmation request has timed out."


def transfer_record(requester_id: str, role_id: str, seasons: int, approver_id: str) -> str:
    """Audit-channel record of an approved transfer."""
    return "\n".join([
        f":bust_in_silhouette: Free Agent :arrow_right: {role_mention(role_id)}",
        f"> {user_mention(requester_id)}",
        f"> for {_seasons(seasons)}.",
        f"*(from {user_mention(approver_id)})*",
    ])
