"""Constants and builders shared by the tests."""

import httpx

ENDPOINT = "https://api.example.com/api/todolist"
SCOPES = ["api://todolist-api/ToDoList.ReadWrite"]

# base64 of {"abc":true}
CHALLENGE = "eyJhYmMiOnRydWV9"
DECODED_CLAIMS = '{"abc":true}'
CHALLENGE_HEADER = f'Bearer realm="x", claims="{CHALLENGE}",error="insufficient_claims"'


def challenge_response(header: str | None = CHALLENGE_HEADER) -> httpx.Response:
    """401 response, optionally with a WWW-Authenticate header."""
    headers = {"WWW-Authenticate": header} if header is not None else {}
    return httpx.Response(401, headers=headers)
