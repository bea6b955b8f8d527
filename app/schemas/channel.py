"""Message board schemas — posted messages and private replies."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from app.schemas.transfer import DecisionControl


class BoardMessage(BaseModel):
    id: str
    channel_id: str
    content: str
    controls: list[DecisionControl] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    edited_at: datetime | None = None


class PrivateMessage(BaseModel):
    user_id: str
    channel_id: str
    content: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
