"""Abstract base classes for the messaging gateway and membership directory.

Swap the in-process message board for a real chat platform (or the SQL
directory for a platform's role API) by implementing these interfaces.
"""

from abc import ABC, abstractmethod

from app.schemas.transfer import DecisionControl, MessageHandle


class GatewayError(RuntimeError):
    """Raised when the messaging gateway cannot post or edit a message."""


class DirectoryError(RuntimeError):
    """Raised when the membership directory cannot be read or mutated."""


class MessagingGateway(ABC):
    """Contract that any messaging transport must satisfy."""

    @abstractmethod
    async def send_message(
        self,
        channel_id: str,
        content: str,
        *,
        controls: list[DecisionControl] | None = None,
    ) -> MessageHandle:
        """Post a message (optionally with decision controls) and return its handle."""

    @abstractmethod
    async def edit_message(
        self,
        handle: MessageHandle,
        content: str,
        *,
        controls: list[DecisionControl] | None = None,
    ) -> None:
        """Rewrite a posted message. ``controls=None`` removes all controls."""

    @abstractmethod
    async def send_private(self, user_id: str, channel_id: str, content: str) -> None:
        """Reply to a single user only (ephemeral reply)."""


class MembershipDirectory(ABC):
    """Contract for reading and mutating role membership."""

    @abstractmethod
    async def has_role(self, user_id: str, role_id: str) -> bool:
        """Return True if the user currently holds the role."""

    @abstractmethod
    async def add_role(self, user_id: str, role_id: str) -> None:
        """Grant a role to a user."""

    @abstractmethod
    async def remove_role(self, user_id: str, role_id: str) -> None:
        """Revoke a role from a user."""

    @abstractmethod
    async def has_manage_authority(self, user_id: str) -> bool:
        """Return True if the user may manage roles (i.e. approve transfers)."""
