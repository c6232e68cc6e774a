"""Authentication: token acquisition and claims challenge recovery."""

from todolist_client.auth.challenge import decode_claims, extract_claims_challenge
from todolist_client.auth.handler import ChallengeHandler
from todolist_client.auth.models import AccessToken, Account, ChallengePolicy, TokenRequest
from todolist_client.auth.provider import TokenProvider
from todolist_client.auth.storage import ChallengeStore, FileChallengeStore, MemoryChallengeStore

__all__ = [
    "AccessToken",
    "Account",
    "ChallengeHandler",
    "ChallengePolicy",
    "ChallengeStore",
    "FileChallengeStore",
    "MemoryChallengeStore",
    "TokenProvider",
    "TokenRequest",
    "decode_claims",
    "extract_claims_challenge",
]
