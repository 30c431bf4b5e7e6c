"""Tests for configuration and token storage."""

import json
from unittest.mock import patch

from eventtasks.config import Config, Tokens, load_config, parse_expiry


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "missing.conf")
        assert config == Config()

    def test_reads_basecamp_settings(self, tmp_path):
        """Keys are case-insensitive, quotes and inline comments are stripped."""
        config_file = tmp_path / "eventtasks.conf"
        config_file.write_text(
            "# Basecamp app\n"
            "BASECAMP_CLIENT_ID=abc123\n"
            'basecamp_client_secret="s3cr#t"\n'
            "basecamp_account_id = 999  # account\n"
            "basecamp_project_id=42\n"
            "basecamp_todoset_id=7\n"
            "user_agent='Planner (ops@example.com)'\n"
        )

        config = load_config(config_file)

        assert config.basecamp_client_id == "abc123"
        assert config.basecamp_client_secret == "s3cr#t"
        assert config.basecamp_account_id == "999"
        assert config.basecamp_project_id == "42"
        assert config.basecamp_todoset_id == "7"
        assert config.user_agent == "Planner (ops@example.com)"

    def test_unknown_keys_and_junk_lines_ignored(self, tmp_path):
        config_file = tmp_path / "eventtasks.conf"
        config_file.write_text("colour=blue\nnot a setting\n\ndata_dir=/tmp/et\n")

        config = load_config(config_file)

        assert config.data_dir == "/tmp/et"

    def test_uses_default_path(self, tmp_path):
        config_file = tmp_path / "eventtasks.conf"
        config_file.write_text("basecamp_project_id=5\n")
        with patch("eventtasks.config.CONFIG_FILE", config_file):
            assert load_config().basecamp_project_id == "5"


class TestDataDir:
    def test_explicit_dir(self, tmp_path):
        config = Config(data_dir=str(tmp_path / "store"))
        assert config.resolved_data_dir() == tmp_path / "store"

    def test_default_dir(self, tmp_path):
        with patch("eventtasks.config.DATA_DIR", tmp_path / "data"):
            assert Config().resolved_data_dir() == tmp_path / "data"


class TestParseExpiry:
    def test_zulu_timestamp(self):
        assert parse_expiry("2025-01-15T10:00:00Z") == 1736935200

    def test_offset_timestamp(self):
        assert parse_expiry("2025-01-15T12:00:00+02:00") == 1736935200

    def test_empty(self):
        assert parse_expiry("") == 0


class TestTokens:
    def test_no_token_is_expired(self):
        assert Tokens().is_expired(now=0) is True

    def test_unknown_expiry_is_not_expired(self):
        assert Tokens(access_token="t").is_expired(now=10**10) is False

    def test_margin(self):
        tokens = Tokens(access_token="t", expires_at=1000)
        assert tokens.is_expired(now=600) is False
        assert tokens.is_expired(now=800, margin=300) is True
        assert tokens.is_expired(now=1000) is True

    def test_save_and_load(self, tmp_path):
        token_file = tmp_path / "config" / ".tokens.json"
        with patch("eventtasks.config.TOKEN_FILE", token_file):
            Tokens("access", "refresh", 1736935200).save()
            loaded = Tokens.load()

        assert loaded == Tokens("access", "refresh", 1736935200)
        assert json.loads(token_file.read_text())["refresh_token"] == "refresh"
        assert token_file.stat().st_mode & 0o777 == 0o600

    def test_load_missing_file(self, tmp_path):
        with patch("eventtasks.config.TOKEN_FILE", tmp_path / "none.json"):
            assert Tokens.load() == Tokens()

    def test_load_corrupt_file(self, tmp_path):
        token_file = tmp_path / ".tokens.json"
        token_file.write_text("{oops")
        with patch("eventtasks.config.TOKEN_FILE", token_file):
            assert Tokens.load() == Tokens()
