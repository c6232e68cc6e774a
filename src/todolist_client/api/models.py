"""Request and result models for the todo list API."""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from todolist_client.exceptions import TodoListError

UNKNOWN_HEADER = {"error": "unknown header"}


class RequestOptions(BaseModel):
    """A pending API call, kept verbatim so it can be replayed."""

    method: str
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None

    def url_for(self, resource_id: str | int | None = None) -> str:
        """URL of the collection, or of a single item when resource_id is given."""
        if resource_id is None or resource_id == "":
            return self.url
        return f"{self.url.rstrip('/')}/{resource_id}"

    def with_token(self, access_token: str) -> "RequestOptions":
        """Copy of these options carrying a different bearer token."""
        headers = {k: v for k, v in self.headers.items() if k.lower() != "authorization"}
        headers["Authorization"] = f"Bearer {access_token}"
        return self.model_copy(update={"headers": headers})


@dataclass(frozen=True)
class ApiResult:
    """Outcome of an API call.

    value holds the decoded JSON body on success. A failure always carries the
    error and may still carry a value (the unknown-header sentinel).
    """

    value: Any = None
    error: TodoListError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any) -> "ApiResult":
        return cls(value=value)

    @classmethod
    def failure(cls, error: TodoListError, value: Any = None) -> "ApiResult":
        return cls(value=value, error=error)

    def unwrap(self) -> Any:
        """Return the value, raising the error on failure."""
        if self.error is not None:
            raise self.error
        return self.value
