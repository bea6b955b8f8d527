"""Membership directory endpoints — seed members and adjust their roles."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.member import MemberResponse, MemberUpsert
from app.services import member_service

router = APIRouter()


@router.get("/{user_id}", response_model=MemberResponse)
async def get_member(user_id: str, db: AsyncSession = Depends(get_db)):
    member = await member_service.get_member(db, user_id)
    if not member:
        raise HTTPException(status_code=404, detail="Member not found")
    return member


@router.put("/{user_id}", response_model=MemberResponse)
async def upsert_member(user_id: str, data: MemberUpsert, db: AsyncSession = Depends(get_db)):
    return await member_service.upsert_member(db, user_id, data)


@router.post("/{user_id}/roles/{role_id}", response_model=MemberResponse)
async def add_role(user_id: str, role_id: str, db: AsyncSession = Depends(get_db)):
    if not await member_service.add_role(db, user_id, role_id):
        raise HTTPException(status_code=404, detail="Member not found")
    return await member_service.get_member(db, user_id)


@router.delete("/{user_id}/roles/{role_id}", status_code=204)
async def remove_role(user_id: str, role_id: str, db: AsyncSession = Depends(get_db)):
    removed = await member_service.remove_role(db, user_id, role_id)
    if not removed:
        raise HTTPException(status_code=404, detail="Role assignment not found")
