"""Membership directory backed by the local database."""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.adapters.base import DirectoryError, MembershipDirectory
from app.services import member_service

logger = logging.getLogger(__name__)


class SqlMembershipDirectory(MembershipDirectory):
    """Each call runs in its own session, so every call is independently atomic."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def has_role(self, user_id: str, role_id: str) -> bool:
        try:
            async with self._session_factory() as db:
                return await member_service.has_role(db, user_id, role_id)
        except SQLAlchemyError as exc:
            raise DirectoryError(f"Role lookup failed for {user_id}: {exc}") from exc

    async def add_role(self, user_id: str, role_id: str) -> None:
        try:
            async with self._session_factory() as db:
                added = await member_service.add_role(db, user_id, role_id)
        except SQLAlchemyError as exc:
            raise DirectoryError(f"Could not add role {role_id} to {user_id}: {exc}") from exc
        if not added:
            raise DirectoryError(f"Unknown member {user_id}")

    async def remove_role(self, user_id: str, role_id: str) -> None:
        try:
            async with self._session_factory() as db:
                removed = await member_service.remove_role(db, user_id, role_id)
        except SQLAlchemyError as exc:
            raise DirectoryError(f"Could not remove role {role_id} from {user_id}: {exc}") from exc
        if not removed:
            logger.debug("Member %s did not hold role %s", user_id, role_id)

    async def has_manage_authority(self, user_id: str) -> bool:
        try:
            async with self._session_factory() as db:
                return await member_service.can_manage_roles(db, user_id)
        except SQLAlchemyError as exc:
            raise DirectoryError(f"Authority lookup failed for {user_id}: {exc}") from exc
