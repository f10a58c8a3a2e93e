"""Tests for repository/token.py (AccessTokenRepository)."""

from __future__ import annotations

import stat

import pytest

from ghbrowse.models import AccessToken
from ghbrowse.repository.token import AccessTokenRepository


class TestAccessTokenRepository:
    """Tests for storing, loading and clearing the access token."""

    def test_save_and_load(self, tmp_path):
        """A saved token loads back."""
        tokens = AccessTokenRepository(tmp_path / "credentials" / "token.json")

        tokens.save(AccessToken(value="ghp_abc"))

        assert tokens.load() == AccessToken(value="ghp_abc")

    def test_file_is_private(self, tmp_path):
        """The token file is only readable by its owner."""
        path = tmp_path / "token.json"

        AccessTokenRepository(path).save(AccessToken(value="ghp_abc"))

        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_default_path_in_config_dir(self, config_dirs):
        """Without a path the token lives under the config dir."""
        tokens = AccessTokenRepository()

        assert tokens.path == config_dirs / "config" / "credentials" / "token.json"

    def test_empty_token_rejected(self, tmp_path):
        """Empty tokens are refused."""
        with pytest.raises(ValueError):
            AccessTokenRepository(tmp_path / "token.json").save(AccessToken(value=""))

    def test_missing_file(self, tmp_path):
        """No file, no token."""
        assert AccessTokenRepository(tmp_path / "token.json").load() is None

    def test_insecure_file_ignored(self, tmp_path, caplog):
        """A token readable by others is not used."""
        path = tmp_path / "token.json"
        tokens = AccessTokenRepository(path)
        tokens.save(AccessToken(value="ghp_abc"))
        path.chmod(0o644)

        assert tokens.load() is None
        assert "readable by other users" in caplog.text

    def test_corrupt_file_ignored(self, tmp_path, caplog):
        """A file that is not a token is ignored with a warning."""
        path = tmp_path / "token.json"
        path.write_bytes(b"not json")
        path.chmod(0o600)

        assert AccessTokenRepository(path).load() is None
        assert "not a valid token file" in caplog.text

    def test_clear(self, tmp_path):
        """clear() removes the token and reports whether one existed."""
        tokens = AccessTokenRepository(tmp_path / "token.json")
        tokens.save(AccessToken(value="ghp_abc"))

        assert tokens.clear() is True
        assert tokens.load() is None
        assert tokens.clear() is False
