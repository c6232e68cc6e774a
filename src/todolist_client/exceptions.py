"""Exception hierarchy for todolist-client."""


class TodoListError(Exception):
    """Base exception for all todolist-client errors."""


class AuthError(TodoListError):
    """Base exception for authentication errors."""


class AuthenticationStateError(AuthError):
    """No active account is set on the identity client."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "No active account! Verify a user has signed in with `todo auth login`."
        )


class TokenAcquisitionError(AuthError):
    """Silent token acquisition failed."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.code = code
        super().__init__(message)


class InteractiveAuthError(AuthError):
    """Interactive (popup or redirect) token acquisition failed."""

    def __init__(self, code: str, message: str | None = None) -> None:
        self.code = code
        super().__init__(message or f"Interactive authentication failed: {code}")


class ChallengeError(AuthError):
    """Base exception for claims challenge problems."""


class ChallengeParseError(ChallengeError):
    """WWW-Authenticate header does not carry a usable claims challenge."""


class UnknownChallengeError(ChallengeError):
    """401 response without a WWW-Authenticate header."""

    def __init__(self) -> None:
        super().__init__("401 response carried no www-authenticate header")


class TransportError(TodoListError):
    """HTTP request could not be completed."""


class ResponseDecodeError(TodoListError):
    """Response body is not valid JSON."""


class ConfigurationError(TodoListError):
    """Required setting is missing."""

    def __init__(self, setting: str) -> None:
        self.setting = setting
        super().__init__(
            f"{setting} is not configured. Set the TODOLIST_{setting.upper()} environment variable."
        )
