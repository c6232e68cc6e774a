"""Persistent storage for claims challenges and the MSAL token cache."""

import logging
import os
from pathlib import Path
from typing import Protocol

import aiofiles
import msal
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

APP_DIR = "todolist-client"
CHALLENGES_FILE = "challenges.json"
TOKEN_CACHE_FILE = "msal_cache.json"


def _get_data_dir(data_dir: Path | None = None) -> Path:
    """Get the directory holding persisted auth state.

    Uses data_dir if given, else XDG_DATA_HOME, else ~/.local/share/todolist-client
    """
    if data_dir is not None:
        return data_dir
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        base = Path(xdg_data)
    else:
        base = Path.home() / ".local" / "share"
    return base / APP_DIR


async def _write_private(path: Path, content: str) -> None:
    """Write a file atomically with owner-only permissions."""
    path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)

    temp_path = path.with_suffix(".tmp")
    async with aiofiles.open(temp_path, "w") as f:
        await f.write(content)

    temp_path.chmod(0o600)
    temp_path.rename(path)


class ChallengeStore(Protocol):
    """Key-value store mapping an HTTP method to a base64 claims challenge."""

    async def get(self, method: str) -> str | None: ...

    async def set(self, method: str, challenge: str) -> None: ...

    async def delete(self, method: str) -> None: ...

    async def clear(self) -> None: ...

    async def items(self) -> dict[str, str]: ...


def _key(method: str) -> str:
    return method.upper()


class MemoryChallengeStore:
    """Challenge store scoped to the lifetime of the object."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._challenges = {_key(k): v for k, v in (initial or {}).items()}

    async def get(self, method: str) -> str | None:
        return self._challenges.get(_key(method))

    async def set(self, method: str, challenge: str) -> None:
        self._challenges[_key(method)] = challenge

    async def delete(self, method: str) -> None:
        self._challenges.pop(_key(method), None)

    async def clear(self) -> None:
        self._challenges.clear()

    async def items(self) -> dict[str, str]:
        return dict(self._challenges)


class StoredChallenges(BaseModel):
    """On-disk format of the challenge store."""

    challenges: dict[str, str] = Field(default_factory=dict)


class FileChallengeStore:
    """Challenge store persisted as JSON, shared by every process of the user.

    Writes are load-modify-save without locking. Two overlapping requests that
    receive a challenge for the same method race and the last write wins.
    """

    def __init__(self, path: Path | None = None):
        self.path = path or _get_data_dir() / CHALLENGES_FILE

    async def _load(self) -> StoredChallenges:
        if not self.path.exists():
            return StoredChallenges()

        try:
            async with aiofiles.open(self.path) as f:
                content = await f.read()
            return StoredChallenges.model_validate_json(content)
        except (ValidationError, OSError, ValueError) as e:
            logger.warning("Failed to load challenge store from %s: %s", self.path, e)
            return StoredChallenges()

    async def _save(self, stored: StoredChallenges) -> None:
        await _write_private(self.path, stored.model_dump_json(indent=2))

    async def get(self, method: str) -> str | None:
        stored = await self._load()
        return stored.challenges.get(_key(method))

    async def set(self, method: str, challenge: str) -> None:
        stored = await self._load()
        stored.challenges[_key(method)] = challenge
        await self._save(stored)
        logger.debug("Stored claims challenge for %s", _key(method))

    async def delete(self, method: str) -> None:
        stored = await self._load()
        if stored.challenges.pop(_key(method), None) is not None:
            await self._save(stored)

    async def clear(self) -> None:
        await self._save(StoredChallenges())

    async def items(self) -> dict[str, str]:
        stored = await self._load()
        return dict(stored.challenges)


async def load_token_cache(data_dir: Path | None = None) -> msal.SerializableTokenCache:
    """Load the MSAL token cache from disk. Returns empty cache if not found."""
    cache = msal.SerializableTokenCache()
    cache_path = _get_data_dir(data_dir) / TOKEN_CACHE_FILE

    if not cache_path.exists():
        return cache

    try:
        async with aiofiles.open(cache_path) as f:
            cache.deserialize(await f.read())
    except (OSError, ValueError) as e:
        logger.warning("Failed to load token cache from %s: %s", cache_path, e)
        return msal.SerializableTokenCache()
    return cache


async def save_token_cache(
    cache: msal.SerializableTokenCache, data_dir: Path | None = None
) -> None:
    """Save the MSAL token cache to disk if it changed."""
    if not cache.has_state_changed:
        return
    await _write_private(_get_data_dir(data_dir) / TOKEN_CACHE_FILE, cache.serialize())


async def clear_token_cache(data_dir: Path | None = None) -> None:
    """Remove the MSAL token cache file."""
    cache_path = _get_data_dir(data_dir) / TOKEN_CACHE_FILE
    if cache_path.exists():
        cache_path.unlink()
