"""Authentication data models."""

from enum import Enum

from pydantic import BaseModel, Field


class InteractionErrorCode(str, Enum):
    """Error codes reported by interactive token acquisition."""

    POPUP_WINDOW_ERROR = "popup_window_error"
    EMPTY_WINDOW_ERROR = "empty_window_error"
    TIMEOUT = "timeout"


# Failures that mean the popup never got a chance to run
POPUP_BLOCKED_CODES = frozenset(
    {InteractionErrorCode.POPUP_WINDOW_ERROR.value, InteractionErrorCode.EMPTY_WINDOW_ERROR.value}
)


class ChallengePolicy(str, Enum):
    """What happens to a stored claims challenge after a successful retry."""

    KEEP = "keep"
    CLEAR_AFTER_RETRY = "clear_after_retry"


class Account(BaseModel):
    """Signed-in account as reported by the identity library."""

    home_account_id: str
    username: str | None = None
    environment: str | None = None


class TokenRequest(BaseModel):
    """Parameters for silent token acquisition."""

    account: Account
    scopes: list[str]
    claims: str | None = None


class AccessToken(BaseModel):
    """Bearer token returned by the identity library."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int | None = None
    scopes: list[str] = Field(default_factory=list)

    @property
    def authorization(self) -> str:
        """Value for the Authorization header."""
        return f"Bearer {self.access_token}"
