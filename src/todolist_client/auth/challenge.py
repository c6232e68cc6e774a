"""WWW-Authenticate parsing for claims challenges.

A resource server that wants a token with extra claims (for example after a
conditional access policy demands MFA) answers 401 with a header like::

    WWW-Authenticate: Bearer realm="", authorization_uri="https://login.microsoftonline.com/common/oauth2/authorize",
                      error="insufficient_claims", claims="eyJhY2Nlc3NfdG9rZW4iOnsiYWNycyI6...In19fQ=="

The header is tokenized per RFC 7235 (auth-scheme followed by either a token68
or comma separated auth-params whose values are tokens or quoted-strings).
Unquoted values are read up to the next comma or whitespace, since some servers
send bare URIs.
"""

import base64
import binascii
import logging
import re
from dataclasses import dataclass, field

from todolist_client.exceptions import ChallengeParseError

logger = logging.getLogger(__name__)

CLAIMS_PARAM = "claims"

_TOKEN = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
_VALUE = re.compile(r"[^\s,\"]+")
_TOKEN68 = re.compile(r"[A-Za-z0-9\-._~+/]+=*(?=[ \t]*(?:,|$))")
_WHITESPACE = " \t"


@dataclass
class AuthChallenge:
    """A single challenge from a WWW-Authenticate header."""

    scheme: str
    params: dict[str, str] = field(default_factory=dict)
    token68: str | None = None

    def get(self, name: str) -> str | None:
        """Get an auth-param by case-insensitive name."""
        return self.params.get(name.lower())


class _Scanner:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self) -> str:
        return self.text[self.pos] if not self.at_end() else ""

    def skip(self, chars: str) -> None:
        while not self.at_end() and self.text[self.pos] in chars:
            self.pos += 1

    def match(self, pattern: re.Pattern[str]) -> str | None:
        m = pattern.match(self.text, self.pos)
        if not m:
            return None
        self.pos = m.end()
        return m.group(0)

    def read_quoted(self) -> str:
        """Read a quoted-string starting at the opening quote."""
        start = self.pos
        self.pos += 1
        chars: list[str] = []
        while not self.at_end():
            char = self.text[self.pos]
            if char == "\\":
                self.pos += 1
                if self.at_end():
                    break
                chars.append(self.text[self.pos])
            elif char == '"':
                self.pos += 1
                return "".join(chars)
            else:
                chars.append(char)
            self.pos += 1
        raise ChallengeParseError(f"Unterminated quoted string at position {start}")

    def error(self, what: str) -> ChallengeParseError:
        return ChallengeParseError(f"{what} at position {self.pos} in WWW-Authenticate header")


def parse_www_authenticate(header: str) -> list[AuthChallenge]:
    """Parse a WWW-Authenticate header value into its challenges.

    Args:
        header: Raw header value.

    Returns:
        Challenges in header order.

    Raises:
        ChallengeParseError: If the header is empty or malformed.
    """
    scanner = _Scanner(header)
    challenges: list[AuthChallenge] = []
    current: AuthChallenge | None = None

    while True:
        scanner.skip(_WHITESPACE + ",")
        if scanner.at_end():
            break

        name = scanner.match(_TOKEN)
        if name is None:
            raise scanner.error(f"Unexpected character {scanner.peek()!r}")

        scanner.skip(_WHITESPACE)
        if current is not None and scanner.peek() == "=":
            scanner.pos += 1
            scanner.skip(_WHITESPACE)
            if scanner.peek() == '"':
                value = scanner.read_quoted()
            else:
                value = scanner.match(_VALUE)
                if value is None:
                    raise scanner.error(f"Missing value for parameter {name!r}")
            current.params[name.lower()] = value
            continue

        if scanner.peek() == "=":
            raise scanner.error(f"Parameter {name!r} before any auth-scheme")

        current = AuthChallenge(scheme=name)
        challenges.append(current)
        current.token68 = scanner.match(_TOKEN68)

    if not challenges:
        raise ChallengeParseError("Empty WWW-Authenticate header")
    return challenges


def extract_claims_challenge(header: str) -> str:
    """Extract the raw (base64) claims challenge from a WWW-Authenticate header.

    Bearer challenges are preferred when several schemes are offered.

    Raises:
        ChallengeParseError: If the header is malformed or has no claims parameter.
    """
    challenges = parse_www_authenticate(header)
    ordered = sorted(challenges, key=lambda c: c.scheme.lower() != "bearer")
    for challenge in ordered:
        claims = challenge.get(CLAIMS_PARAM)
        if claims:
            logger.debug("Found claims challenge in %s challenge", challenge.scheme)
            return claims
    raise ChallengeParseError("WWW-Authenticate header has no claims parameter")


def decode_claims(challenge: str) -> str:
    """Decode a base64 claims challenge into the claims JSON string.

    Accepts standard and URL-safe alphabets, with or without padding.

    Raises:
        ChallengeParseError: If the challenge is not valid base64 text.
    """
    normalized = challenge.strip().rstrip("=").translate(str.maketrans("-_", "+/"))
    normalized += "=" * (-len(normalized) % 4)
    try:
        return base64.b64decode(normalized, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ChallengeParseError(f"Claims challenge is not valid base64: {e}") from e
