"""
API Module

Setup, repository listing, event listing and the GitHub webhook receiver.
"""
import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from octopulse import config
from octopulse.database import get_session
from octopulse.dispatcher import dispatch
from octopulse.github import GitHubAPIError, list_repositories
from octopulse.push import PushSender, get_push_sender
from octopulse.schemas import (
    GitHubEvent,
    PushSubscription,
    RepoListRequest,
    SettingsCreate,
    SettingsCreated,
    VapidPublicKey,
    WebhookAck,
    dump_list,
    envelope,
)
from octopulse.store import SettingsStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/settings")
def create_settings(body: SettingsCreate, session: Session = Depends(get_session)):
    """
    Complete setup: store the chosen repository and push subscription under a
    freshly generated user id.
    """
    if not body.selected_repo or not body.subscription:
        raise HTTPException(status_code=400, detail="Missing required settings fields.")
    try:
        subscription = PushSubscription.model_validate(body.subscription)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Missing required settings fields.")

    settings = SettingsStore(session).create(body.selected_repo, subscription.to_dict())
    return envelope(SettingsCreated(user_id=settings.id).model_dump(by_alias=True))


@router.post("/github/repos")
def get_github_repos(body: RepoListRequest):
    """Proxy the token owner's repository list from GitHub."""
    if not body.token:
        raise HTTPException(status_code=400, detail="GitHub token is required.")
    try:
        repos = list_repositories(body.token)
    except GitHubAPIError as e:
        if e.status_code is None:
            raise HTTPException(
                status_code=400,
                detail="Failed to process request for GitHub repositories.",
            )
        raise HTTPException(
            status_code=e.status_code,
            detail="Failed to fetch repositories from GitHub.",
        )
    return envelope(dump_list(repos))


@router.get("/events/{user_id}")
def get_events(user_id: str, session: Session = Depends(get_session)):
    store = SettingsStore(session)
    if not store.exists(user_id):
        raise HTTPException(status_code=404, detail="User not found")
    events = [GitHubEvent.model_validate(ev) for ev in store.get_events(user_id)]
    return envelope(dump_list(events))


@router.get("/push/public-key")
def get_push_public_key():
    """VAPID application server key the browser subscribes with."""
    return envelope(
        VapidPublicKey(public_key=config.VAPID_PUBLIC_KEY).model_dump(by_alias=True)
    )


def _record_webhook(store, sender, user_id, event_type, payload):
    settings = store.get(user_id)
    if settings is None:
        logger.warning(f"No settings found for user: {user_id}")
        return False

    record = dispatch(event_type, payload)
    if record is None:
        return True

    store.add_event(user_id, record)
    result = sender.send(settings.subscription, record.title, record.body)
    if result.success:
        logger.info(f"Push sent to user {user_id}: {record.title}")
    else:
        logger.warning(f"Push to user {user_id} failed: {result.error}")
    return True


@router.post("/webhook/{user_id}")
async def receive_webhook(
    user_id: str,
    request: Request,
    session: Session = Depends(get_session),
    sender: PushSender = Depends(get_push_sender),
):
    """
    GitHub webhook receiver. Known users always get a 200 acknowledgement,
    whether or not the delivery produced an event.
    """
    event_type = request.headers.get("X-GitHub-Event")
    logger.info(f"Webhook received for user: {user_id}, event: {event_type}")

    raw = await request.body()
    try:
        payload = json.loads(raw) if raw else {}
    except ValueError:
        payload = {}

    found = await run_in_threadpool(
        _record_webhook, SettingsStore(session), sender, user_id, event_type, payload
    )
    if not found:
        raise HTTPException(status_code=404, detail="User configuration not found.")
    return JSONResponse(envelope(WebhookAck(message="Webhook received").model_dump()))
