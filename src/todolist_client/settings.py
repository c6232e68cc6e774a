"""Application settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from todolist_client.auth.models import ChallengePolicy

DEFAULT_SCOPES = [
    "api://todolist-api/ToDoList.Read",
    "api://todolist-api/ToDoList.ReadWrite",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TODOLIST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    client_id: str | None = None
    authority: str = "https://login.microsoftonline.com/common"
    api_endpoint: str = "https://localhost:44351/api/todolist"
    api_scopes: list[str] = DEFAULT_SCOPES

    # Stored challenges are never expired by default
    challenge_policy: ChallengePolicy = ChallengePolicy.KEEP

    request_timeout: float = 30.0
    # Seconds to wait for the browser sign-in, None waits forever
    interactive_timeout: int | None = 300

    # Storage location, None = $XDG_DATA_HOME/todolist-client
    data_dir: Path | None = None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
