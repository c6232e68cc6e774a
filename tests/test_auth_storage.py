"""Tests for challenge and token cache storage."""

import json
import os
import stat
from pathlib import Path
from unittest.mock import patch

import msal
import pytest

from todolist_client.auth.storage import (
    APP_DIR,
    CHALLENGES_FILE,
    TOKEN_CACHE_FILE,
    FileChallengeStore,
    MemoryChallengeStore,
    _get_data_dir,
    clear_token_cache,
    load_token_cache,
    save_token_cache,
)


class TestGetDataDir:
    """Test _get_data_dir helper."""

    def test_explicit_dir_wins(self, tmp_path):
        """An explicit data_dir is used as is."""
        assert _get_data_dir(tmp_path) == tmp_path

    def test_returns_xdg_path(self):
        """Uses XDG_DATA_HOME when set."""
        with patch.dict(os.environ, {"XDG_DATA_HOME": "/custom/data"}, clear=False):
            assert _get_data_dir() == Path("/custom/data") / APP_DIR

    def test_uses_default_when_no_xdg(self):
        """Falls back to ~/.local/share."""
        with (
            patch.dict(os.environ, {}, clear=True),
            patch("pathlib.Path.home", return_value=Path("/home/user")),
        ):
            assert _get_data_dir() == Path("/home/user/.local/share") / APP_DIR


class TestMemoryChallengeStore:
    """Test MemoryChallengeStore."""

    @pytest.mark.asyncio
    async def test_get_missing(self):
        """Unknown method returns None."""
        assert await MemoryChallengeStore().get("PUT") is None

    @pytest.mark.asyncio
    async def test_set_get_case_insensitive(self):
        """Methods are normalized to upper case."""
        store = MemoryChallengeStore()
        await store.set("put", "abc")
        assert await store.get("PUT") == "abc"
        assert await store.items() == {"PUT": "abc"}

    @pytest.mark.asyncio
    async def test_set_overwrites(self):
        """One challenge per method, last one wins."""
        store = MemoryChallengeStore({"PUT": "old"})
        await store.set("PUT", "new")
        assert await store.items() == {"PUT": "new"}

    @pytest.mark.asyncio
    async def test_delete_and_clear(self):
        """delete removes one entry, clear removes all."""
        store = MemoryChallengeStore({"PUT": "a", "POST": "b"})
        await store.delete("PUT")
        await store.delete("PATCH")
        assert await store.items() == {"POST": "b"}
        await store.clear()
        assert await store.items() == {}


class TestFileChallengeStore:
    """Test FileChallengeStore."""

    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, tmp_path):
        """No file means no challenges."""
        store = FileChallengeStore(tmp_path / CHALLENGES_FILE)
        assert await store.get("PUT") is None
        assert await store.items() == {}

    @pytest.mark.asyncio
    async def test_set_persists(self, tmp_path):
        """Challenges survive a new store instance."""
        path = tmp_path / "sub" / CHALLENGES_FILE
        await FileChallengeStore(path).set("DELETE", "abc")

        assert await FileChallengeStore(path).get("delete") == "abc"
        content = json.loads(path.read_text())
        assert content == {"challenges": {"DELETE": "abc"}}

    @pytest.mark.asyncio
    async def test_preserves_other_methods(self, tmp_path):
        """Setting one method keeps the others."""
        store = FileChallengeStore(tmp_path / CHALLENGES_FILE)
        await store.set("PUT", "a")
        await store.set("POST", "b")
        await store.set("PUT", "c")
        assert await store.items() == {"PUT": "c", "POST": "b"}

    @pytest.mark.asyncio
    async def test_sets_file_permissions(self, tmp_path):
        """Store file is owner read/write only."""
        path = tmp_path / CHALLENGES_FILE
        await FileChallengeStore(path).set("PUT", "a")
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    @pytest.mark.asyncio
    async def test_corrupt_file_is_empty(self, tmp_path):
        """Corrupt file reads as empty."""
        path = tmp_path / CHALLENGES_FILE
        path.write_text("invalid json {{{")
        assert await FileChallengeStore(path).items() == {}

    @pytest.mark.asyncio
    async def test_delete(self, tmp_path):
        """delete removes a single method."""
        store = FileChallengeStore(tmp_path / CHALLENGES_FILE)
        await store.set("PUT", "a")
        await store.set("POST", "b")
        await store.delete("PUT")
        assert await store.items() == {"POST": "b"}

    @pytest.mark.asyncio
    async def test_clear(self, tmp_path):
        """clear removes everything."""
        store = FileChallengeStore(tmp_path / CHALLENGES_FILE)
        await store.set("PUT", "a")
        await store.clear()
        assert await store.items() == {}

    def test_default_path(self):
        """Default path lives under the XDG data dir."""
        with patch.dict(os.environ, {"XDG_DATA_HOME": "/custom/data"}, clear=False):
            store = FileChallengeStore()
        assert store.path == Path("/custom/data") / APP_DIR / CHALLENGES_FILE


class TestTokenCache:
    """Test MSAL token cache persistence."""

    @pytest.mark.asyncio
    async def test_missing_file_returns_empty_cache(self, tmp_path):
        """No file yields a fresh cache."""
        cache = await load_token_cache(tmp_path)
        assert isinstance(cache, msal.SerializableTokenCache)

    @pytest.mark.asyncio
    async def test_unchanged_cache_not_written(self, tmp_path):
        """Saving an unchanged cache writes nothing."""
        cache = msal.SerializableTokenCache()
        await save_token_cache(cache, tmp_path)
        assert not (tmp_path / TOKEN_CACHE_FILE).exists()

    @pytest.mark.asyncio
    async def test_changed_cache_round_trips(self, tmp_path):
        """A changed cache is written privately and loads back."""
        cache = msal.SerializableTokenCache()
        cache.has_state_changed = True
        await save_token_cache(cache, tmp_path)

        path = tmp_path / TOKEN_CACHE_FILE
        assert path.exists()
        assert stat.S_IMODE(path.stat().st_mode) == 0o600
        loaded = await load_token_cache(tmp_path)
        assert loaded.has_state_changed is False

    @pytest.mark.asyncio
    async def test_corrupt_cache_returns_empty(self, tmp_path):
        """Corrupt cache file yields a fresh cache."""
        (tmp_path / TOKEN_CACHE_FILE).write_text("not json")
        cache = await load_token_cache(tmp_path)
        assert isinstance(cache, msal.SerializableTokenCache)

    @pytest.mark.asyncio
    async def test_clear_removes_file(self, tmp_path):
        """clear_token_cache deletes the file."""
        path = tmp_path / TOKEN_CACHE_FILE
        path.write_text("{}")
        await clear_token_cache(tmp_path)
        assert not path.exists()
        await clear_token_cache(tmp_path)
