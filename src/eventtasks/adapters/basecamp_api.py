"""Basecamp API adapter - OAuth and to-do creation over HTTP."""

import logging
import time
import webbrowser
from typing import Callable

import requests

from eventtasks.config import Config, Tokens, load_config, parse_expiry
from eventtasks.core.checklist import ChecklistItem
from eventtasks.core.event import Event

logger = logging.getLogger(__name__)

API_BASE = "https://3.basecampapi.com"
OAUTH_AUTHORIZE_URL = "https://launchpad.37signals.com/authorization/new"
OAUTH_TOKEN_URL = "https://launchpad.37signals.com/authorization/token"
AUTHORIZATION_URL = "https://launchpad.37signals.com/authorization.json"

# Launchpad tokens last two weeks unless the response says otherwise
DEFAULT_TOKEN_LIFETIME = 14 * 24 * 3600
REFRESH_MARGIN = 300

PROJECT_SETTINGS = ("basecamp_account_id", "basecamp_project_id", "basecamp_todoset_id")


class AuthenticationError(Exception):
    """Missing credentials, or Launchpad refused a token request."""


def request_token(
    config: Config,
    grant: str,
    post: Callable[..., requests.Response] | None = None,
    **params: str,
) -> dict:
    """
    Call the Launchpad token endpoint.

    grant is "web_server" (exchange an authorization code) or "refresh".
    Extra keyword arguments are sent as query parameters.
    """
    post = post or requests.post
    resp = post(
        OAUTH_TOKEN_URL,
        params={
            "type": grant,
            "client_id": config.basecamp_client_id,
            "client_secret": config.basecamp_client_secret,
            "redirect_uri": config.basecamp_redirect_uri,
            **params,
        },
    )
    if resp.status_code != 200:
        logger.error(f"Basecamp {grant} token request returned {resp.status_code}")
        raise AuthenticationError(f"Basecamp {grant} token request failed: {resp.text}")
    return resp.json()


def _apply_grant(tokens: Tokens, grant: dict) -> None:
    tokens.access_token = grant["access_token"]
    tokens.refresh_token = grant.get("refresh_token") or tokens.refresh_token
    tokens.expires_at = int(time.time()) + grant.get("expires_in", DEFAULT_TOKEN_LIFETIME)


class BasecampAdapter:
    """
    Basecamp 3 API adapter.

    Implements TaskTracker protocol. Each checklist push becomes one to-do
    list in the configured project. The access token is refreshed on demand.
    """

    def __init__(self, config: Config | None = None, tokens: Tokens | None = None):
        self.config = config or load_config()
        self.tokens = tokens or Tokens.load()
        self._session = requests.Session()

    def is_authenticated(self) -> bool:
        return not self.tokens.is_expired(time.time())

    def _ensure_valid_token(self) -> None:
        if not self.tokens.access_token:
            raise AuthenticationError("No access token. Run 'eventtasks auth' first.")
        if self.tokens.is_expired(time.time(), margin=REFRESH_MARGIN):
            self._refresh_token()

    def _refresh_token(self) -> None:
        if not self.tokens.refresh_token:
            raise AuthenticationError("No refresh token. Run 'eventtasks auth' first.")

        grant = request_token(
            self.config,
            "refresh",
            post=self._session.post,
            refresh_token=self.tokens.refresh_token,
        )
        _apply_grant(self.tokens, grant)
        self.tokens.save()
        logger.info("Refreshed Basecamp access token")

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.tokens.access_token}",
            "User-Agent": self.config.user_agent,
            "Content-Type": "application/json",
        }

    def _post(self, path: str, payload: dict) -> dict:
        """POST to the account-scoped API; HTTP errors raise requests.HTTPError."""
        self._ensure_valid_token()
        url = f"{API_BASE}/{self.config.basecamp_account_id}{path}"
        response = self._session.post(url, headers=self._headers(), json=payload)
        response.raise_for_status()
        return response.json()

    def _require_project(self) -> None:
        missing = [name.upper() for name in PROJECT_SETTINGS if not getattr(self.config, name)]
        if missing:
            raise AuthenticationError(f"Missing Basecamp settings: {', '.join(missing)}")

    def create_todolist(self, name: str, description: str = "") -> dict:
        """Create a to-do list in the configured project."""
        project = self.config.basecamp_project_id
        todoset = self.config.basecamp_todoset_id
        return self._post(
            f"/buckets/{project}/todosets/{todoset}/todolists.json",
            {"name": name, "description": description},
        )

    def create_todo(self, todolist_id: int | str, item: ChecklistItem) -> dict:
        project = self.config.basecamp_project_id
        return self._post(
            f"/buckets/{project}/todolists/{todolist_id}/todos.json",
            {
                "content": item.title,
                "description": item.description,
                "starts_on": item.starts_on.isoformat(),
                "due_on": item.due_on.isoformat(),
            },
        )

    def push_checklist(self, event: Event, items: list[ChecklistItem]) -> list[str]:
        """Create a to-do list named after the event with one to-do per item."""
        self._require_project()
        description = f"Location: {event.location}" if event.location else ""
        todolist = self.create_todolist(event.name or f"Event {event.id}", description)
        logger.info(f"Created Basecamp to-do list {todolist['id']} for event {event.id}")

        created = [str(self.create_todo(todolist["id"], item)["id"]) for item in items]
        logger.info(f"Pushed {len(created)} to-dos for event {event.id}")
        return created


def fetch_authorization(access_token: str) -> dict:
    """Look up the identity, accounts and expiry behind a token."""
    resp = requests.get(
        AUTHORIZATION_URL,
        headers={"Authorization": f"Bearer {access_token}"},
    )
    if resp.status_code != 200:
        raise AuthenticationError(f"Authorization lookup failed: {resp.text}")
    return resp.json()


def authorize(config: Config | None = None) -> Tokens:
    """
    Interactive OAuth web-server flow.

    Opens the Launchpad consent page, reads the pasted code from stdin and
    stores the resulting tokens. The identity must own at least one account.
    """
    config = config or load_config()
    if not (config.basecamp_client_id and config.basecamp_client_secret):
        raise AuthenticationError(
            "Missing Basecamp credentials. Add them to config/eventtasks.conf"
        )

    consent_url = (
        f"{OAUTH_AUTHORIZE_URL}?type=web_server"
        f"&client_id={config.basecamp_client_id}"
        f"&redirect_uri={config.basecamp_redirect_uri}"
    )
    print("Opening Basecamp in your browser...")
    webbrowser.open(consent_url)
    print("\nThe redirect page may fail to load; that is expected.")
    print("Copy the 'code' value from its URL.\n")

    code = input("Code: ").strip()
    if not code:
        raise AuthenticationError("No code provided")

    tokens = Tokens()
    _apply_grant(tokens, request_token(config, "web_server", code=code))

    identity = fetch_authorization(tokens.access_token)
    if identity.get("expires_at"):
        tokens.expires_at = parse_expiry(identity["expires_at"])
    if not identity.get("accounts"):
        raise AuthenticationError("This Basecamp identity has no accounts")

    tokens.save()
    print(f"Authorized for {len(identity['accounts'])} Basecamp account(s).")
    return tokens
