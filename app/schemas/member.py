"""Member request/response schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class MemberUpsert(BaseModel):
    display_name: str = Field("", max_length=128)
    can_manage_roles: bool = False
    role_ids: list[str] | None = None  # None = leave roles untouched


class MemberResponse(BaseModel):
    id: str
    display_name: str
    can_manage_roles: bool
    role_ids: list[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
