"""
Client Module

Local counterpart of the browser app: a persisted configuration object with
explicit load/save, a thin HTTP client for the OctoPulse API, and a
command-line entry point.
"""
import argparse
import json
import logging
import sys
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

from octopulse import config

logger = logging.getLogger(__name__)

DEFAULT_STATE_PATH = Path.home() / ".octopulse.json"


@dataclass
class ClientState:
    """
    What the client remembers between runs. Loaded from and saved to a JSON
    file; events are kept exactly as the server returned them.
    """

    is_configured: bool = False
    user_id: Optional[str] = None
    selected_repo: Optional[str] = None
    webhook_url: Optional[str] = None
    events: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def load(cls, path: Path) -> "ClientState":
        path = Path(path)
        if not path.exists():
            return cls()
        with open(path, "r") as f:
            data = json.load(f)
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)

    def save(self, path: Path):
        path = Path(path)
        path.parent.mkdir(exist_ok=True, parents=True)
        with open(path, "w") as f:
            json.dump(asdict(self), f, indent=2)

    def add_event(self, event: Dict[str, Any]):
        self.events.insert(0, event)

    def reset(self):
        # the user id survives a reset
        self.is_configured = False
        self.selected_repo = None
        self.webhook_url = None
        self.events = []


class ClientError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class OctoPulseClient:
    """HTTP client for the OctoPulse API."""

    def __init__(self, base_url: str, timeout: float = config.HTTP_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{config.API_PREFIX}{path}"
        try:
            response = requests.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise ClientError(f"Request to {url} failed: {e}") from e
        try:
            body = response.json()
        except ValueError:
            raise ClientError(
                f"Unexpected response from {url}", response.status_code
            ) from None
        if response.status_code >= 400 or not body.get("success"):
            raise ClientError(
                body.get("error") or f"Request failed: {response.status_code}",
                response.status_code,
            )
        return body.get("data")

    def list_repositories(self, token: str) -> List[Dict[str, Any]]:
        return self._request("POST", "/github/repos", json={"token": token})

    def register(self, selected_repo: str, subscription: Dict[str, Any]) -> str:
        data = self._request(
            "POST",
            "/settings",
            json={"selectedRepo": selected_repo, "subscription": subscription},
        )
        return data["userId"]

    def fetch_events(self, user_id: str) -> List[Dict[str, Any]]:
        return self._request("GET", f"/events/{user_id}")

    def webhook_url(self, user_id: str) -> str:
        return f"{self.base_url}{config.API_PREFIX}/webhook/{user_id}"


def complete_setup(
    client: OctoPulseClient,
    state: ClientState,
    selected_repo: str,
    subscription: Dict[str, Any],
) -> ClientState:
    """Register with the server and record the result in the local state."""
    user_id = client.register(selected_repo, subscription)
    state.user_id = user_id
    state.selected_repo = selected_repo
    state.webhook_url = client.webhook_url(user_id)
    state.is_configured = True
    return state


def refresh_events(client: OctoPulseClient, state: ClientState) -> ClientState:
    if not state.user_id:
        return state
    state.events = client.fetch_events(state.user_id)
    return state


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="OctoPulse command-line client.")
    parser.add_argument(
        "--server",
        default=f"http://localhost:{config.PORT}",
        help="Base URL of the OctoPulse server.",
    )
    parser.add_argument(
        "--state",
        type=Path,
        default=DEFAULT_STATE_PATH,
        help="Where the client configuration is stored.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    repos = sub.add_parser("repos", help="List repositories visible to a GitHub token.")
    repos.add_argument("--token", required=True, help="GitHub personal access token.")

    setup = sub.add_parser("setup", help="Register a repository and push subscription.")
    setup.add_argument("--repo", required=True, help="Repository full name (owner/name).")
    setup.add_argument(
        "--subscription",
        type=Path,
        required=True,
        help="JSON file holding the browser's PushSubscription.",
    )

    sub.add_parser("events", help="Fetch and print recent events.")
    sub.add_parser("reset", help="Forget the configured repository and events.")
    return parser


def main(argv=None) -> int:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    args = build_parser().parse_args(argv)
    client = OctoPulseClient(args.server)
    state = ClientState.load(args.state)

    try:
        if args.command == "repos":
            for repo in client.list_repositories(args.token):
                print(repo["full_name"])
        elif args.command == "setup":
            try:
                with open(args.subscription, "r") as f:
                    subscription = json.load(f)
            except (OSError, ValueError) as e:
                logger.error(f"Could not read subscription file {args.subscription}: {e}")
                return 1
            complete_setup(client, state, args.repo, subscription)
            state.save(args.state)
            print(f"Configured {state.selected_repo}")
            print(f"Webhook URL: {state.webhook_url}")
        elif args.command == "events":
            if not state.is_configured:
                logger.error("Not configured yet. Run 'setup' first.")
                return 1
            refresh_events(client, state)
            state.save(args.state)
            if not state.events:
                print("No events yet")
            for event in state.events:
                print(f"{event['timestamp']}  {event['title']}  {event['body']}")
        elif args.command == "reset":
            state.reset()
            state.save(args.state)
    except ClientError as e:
        logger.error(f"{e} (status={e.status_code})")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
