"""Member service — role membership backed by the database."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.member import Member, RoleAssignment
from app.schemas.member import MemberUpsert


async def get_member(db: AsyncSession, user_id: str) -> Member | None:
    stmt = (
        select(Member)
        .options(selectinload(Member.roles))
        .where(Member.id == user_id)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def upsert_member(db: AsyncSession, user_id: str, data: MemberUpsert) -> Member:
    member = await get_member(db, user_id)
    if not member:
        member = Member(id=user_id, roles=[])
        db.add(member)

    member.display_name = data.display_name
    member.can_manage_roles = data.can_manage_roles
    if data.role_ids is not None:
        wanted = set(data.role_ids)
        member.roles = [r for r in member.roles if r.role_id in wanted]
        held = {r.role_id for r in member.roles}
        for role_id in sorted(wanted - held):
            member.roles.append(RoleAssignment(role_id=role_id))

    await db.commit()
    return await get_member(db, user_id)  # type: ignore[return-value]


async def has_role(db: AsyncSession, user_id: str, role_id: str) -> bool:
    stmt = select(RoleAssignment.id).where(
        RoleAssignment.member_id == user_id, RoleAssignment.role_id == role_id
    )
    result = await db.execute(stmt)
    return result.first() is not None


async def add_role(db: AsyncSession, user_id: str, role_id: str) -> bool:
    """Grant a role. Returns False if the member does not exist."""
    member = await db.get(Member, user_id)
    if not member:
        return False
    if not await has_role(db, user_id, role_id):
        db.add(RoleAssignment(member_id=user_id, role_id=role_id))
        await db.commit()
    return True


async def remove_role(db: AsyncSession, user_id: str, role_id: str) -> bool:
    """Revoke a role. Returns False if the member did not hold it."""
    result = await db.execute(
        delete(RoleAssignment).where(
            RoleAssignment.member_id == user_id, RoleAssignment.role_id == role_id
        )
    )
    await db.commit()
    return result.rowcount > 0


async def can_manage_roles(db: AsyncSession, user_id: str) -> bool:
    member = await db.get(Member, user_id)
    return bool(member and member.can_manage_roles)
