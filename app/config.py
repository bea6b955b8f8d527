"""RosterDesk configuration — loaded from environment / .env file."""

from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApprovalConfig(BaseModel):
    """Fixed identities and limits the approval workflow depends on."""

    model_config = {"frozen": True}

    confirmation_channel_id: str
    approval_channel_id: str
    transfer_log_channel_id: str
    free_agent_role_id: str
    allowed_team_role_ids: frozenset[str]
    decision_window_seconds: float = Field(default=60.0, gt=0)
    min_seasons: int = 1
    max_seasons: int = 5


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="ROSTERDESK_", extra="ignore")

    env: str = "development"
    database_url: str = "sqlite+aiosqlite:///./rosterdesk.db"

    # Flat-file registry + export (players.json / teams.json)
    data_dir: Path = Path(".")

    # Channel and role identities
    confirmation_channel_id: str = "1334160136796770307"
    approval_channel_id: str = "1335708929560150078"
    transfer_log_channel_id: str = "1334160298323611730"
    free_agent_role_id: str = "1335707059638767736"
    allowed_team_role_ids: list[str] = ["1335707053607616646", "1335707058921803937"]

    # Decision window
    decision_window_seconds: float = 60.0
    min_seasons: int = 1
    max_seasons: int = 5

    # Chat gateway (the in-process message board is used when unset)
    chat_gateway_url: str = ""
    chat_gateway_token: str = ""

    @property
    def players_path(self) -> Path:
        return self.data_dir / "players.json"

    @property
    def teams_path(self) -> Path:
        return self.data_dir / "teams.json"

    def approval_config(self) -> ApprovalConfig:
        return ApprovalConfig(
            confirmation_channel_id=self.confirmation_channel_id,
            approval_channel_id=self.approval_channel_id,
            transfer_log_channel_id=self.transfer_log_channel_id,
            free_agent_role_id=self.free_agent_role_id,
            allowed_team_role_ids=frozenset(self.allowed_team_role_ids),
            decision_window_seconds=self.decision_window_seconds,
            min_seasons=self.min_seasons,
            max_seasons=self.max_seasons,
        )


settings = Settings()
