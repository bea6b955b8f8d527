"""Player registry schemas."""

from enum import StrEnum

from pydantic import BaseModel, Field


class RegisterOutcome(StrEnum):
    REGISTERED = "registered"
    ALREADY_REGISTERED = "already_registered"
    FAILED = "failed"


REGISTER_MESSAGES: dict[RegisterOutcome, str] = {
    RegisterOutcome.REGISTERED: "You have been registered successfully!",
    RegisterOutcome.ALREADY_REGISTERED: "You are already registered!",
    RegisterOutcome.FAILED: "Failed to register you. Please try again later.",
}


class PlayerRegister(BaseModel):
    user_id: str = Field(..., pattern=r"^\d+$", max_length=32)
    username: str = Field(..., min_length=1, max_length=64)
    steam_link: str = Field(..., min_length=1, max_length=512)


class RegisterResult(BaseModel):
    outcome: RegisterOutcome
    message: str
