"""Configuration management for eventtasks."""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

EVENTTASKS_HOME = Path(os.environ.get("EVENTTASKS_HOME", Path.home() / "eventtasks"))
CONFIG_FILE = EVENTTASKS_HOME / "config" / "eventtasks.conf"
TOKEN_FILE = EVENTTASKS_HOME / "config" / ".tokens.json"
DATA_DIR = EVENTTASKS_HOME / "data"


@dataclass
class Config:
    """eventtasks configuration."""

    basecamp_client_id: str = ""
    basecamp_client_secret: str = ""
    basecamp_redirect_uri: str = "http://localhost:8080/callback"
    basecamp_account_id: str = ""
    basecamp_project_id: str = ""
    basecamp_todoset_id: str = ""
    # Basecamp rejects requests without a contact in the User-Agent
    user_agent: str = "eventtasks (admin@example.com)"
    data_dir: str = ""

    def resolved_data_dir(self) -> Path:
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return DATA_DIR


def parse_expiry(value: str) -> int:
    """Convert an ISO 8601 timestamp like '2025-01-15T10:00:00Z' to unix seconds."""
    if not value:
        return 0
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


@dataclass
class Tokens:
    """OAuth tokens for Basecamp."""

    access_token: str = ""
    refresh_token: str = ""
    expires_at: int = 0

    def is_expired(self, now: float, margin: int = 0) -> bool:
        """True if there is no token or it expires within margin seconds."""
        if not self.access_token:
            return True
        if not self.expires_at:
            return False
        return now >= self.expires_at - margin

    def save(self) -> None:
        """Write tokens to TOKEN_FILE, readable by the owner only."""
        TOKEN_FILE.parent.mkdir(parents=True, exist_ok=True)
        TOKEN_FILE.write_text(json.dumps(asdict(self)))
        TOKEN_FILE.chmod(0o600)

    @classmethod
    def load(cls) -> "Tokens":
        """Read TOKEN_FILE. A missing or unreadable file gives empty tokens."""
        if not TOKEN_FILE.exists():
            return cls()
        try:
            data = json.loads(TOKEN_FILE.read_text())
        except json.JSONDecodeError:
            logger.warning(f"Ignoring unreadable token file {TOKEN_FILE}")
            return cls()
        return cls(**{f.name: data[f.name] for f in fields(cls) if f.name in data})


def _unquote(value: str) -> str:
    """Strip surrounding quotes, or an inline '# comment' from unquoted values."""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from eventtasks.conf."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "basecamp_client_id":
                config.basecamp_client_id = value
            case "basecamp_client_secret":
                config.basecamp_client_secret = value
            case "basecamp_redirect_uri":
                config.basecamp_redirect_uri = value
            case "basecamp_account_id":
                config.basecamp_account_id = value
            case "basecamp_project_id":
                config.basecamp_project_id = value
            case "basecamp_todoset_id":
                config.basecamp_todoset_id = value
            case "user_agent":
                config.user_agent = value
            case "data_dir":
                config.data_dir = value
            case _:
                logger.warning(f"Unknown config key: {key}")

    return config
