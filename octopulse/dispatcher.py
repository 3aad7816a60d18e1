"""
Webhook Dispatcher

Maps a GitHub webhook (event header + payload) onto at most one
notification record.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple

from octopulse.schemas import WebhookPayload

logger = logging.getLogger(__name__)

ANY_ACTION = None


@dataclass(frozen=True)
class NotificationRecord:
    id: str
    type: str
    title: str
    body: str
    timestamp: str


def _star(payload: WebhookPayload) -> Optional[Tuple[str, str, str]]:
    if not (payload.repo_full_name and payload.sender_login):
        return None
    return (
        "star",
        "New Star!",
        f"Your repository {payload.repo_full_name} received a new star "
        f"from @{payload.sender_login}.",
    )


def _fork(payload: WebhookPayload) -> Optional[Tuple[str, str, str]]:
    if not (payload.repo_full_name and payload.sender_login):
        return None
    # forks are shown with the follower icon
    return (
        "follower",
        "New Fork!",
        f"@{payload.sender_login} forked your repository {payload.repo_full_name}.",
    )


def _follow(payload: WebhookPayload) -> Optional[Tuple[str, str, str]]:
    if not payload.sender_login:
        return None
    return (
        "follower",
        "New Follower!",
        f"You have a new follower: @{payload.sender_login}.",
    )


# (X-GitHub-Event, action) -> builder; ANY_ACTION matches every action
DISPATCH_TABLE: Dict[Tuple[str, Optional[str]], Callable] = {
    ("star", "created"): _star,
    ("watch", "started"): _star,  # GitHub's legacy name for starring
    ("fork", ANY_ACTION): _fork,
    ("follow", "created"): _follow,
}


def _now_iso() -> str:
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def dispatch(event_type: Optional[str], raw_payload: Any) -> Optional[NotificationRecord]:
    """
    Produce the notification for a webhook delivery, or None when the
    event/action pair is not mapped or the payload lacks the fields the
    notification needs.
    """
    payload = WebhookPayload.decode(raw_payload)
    builder = DISPATCH_TABLE.get((event_type, payload.action)) or DISPATCH_TABLE.get(
        (event_type, ANY_ACTION)
    )
    if builder is None:
        return None

    built = builder(payload)
    if built is None:
        logger.debug(f"Payload for '{event_type}' is missing sender or repository")
        return None

    type_, title, body = built
    return NotificationRecord(
        id=str(uuid.uuid4()),
        type=type_,
        title=title,
        body=body,
        timestamp=_now_iso(),
    )
