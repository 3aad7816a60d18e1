"""
Push Module

Delivers a notification to a stored browser push subscription.
"""
import functools
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from pywebpush import WebPushException, webpush

from octopulse import config

logger = logging.getLogger(__name__)


@dataclass
class PushResult:
    success: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


class PushSender:
    """Interface for push transports."""

    def send(self, subscription: Dict[str, Any], title: str, body: str) -> PushResult:
        raise NotImplementedError


class LoggingPushSender(PushSender):
    """Logs the notification instead of delivering it."""

    def send(self, subscription, title, body):
        logger.info(
            f"Push (not delivered): title={title!r} body={body!r} "
            f"endpoint={subscription.get('endpoint')}"
        )
        return PushResult(success=True)


class WebPushSender(PushSender):
    """Sends notifications through the browser's push service using VAPID."""

    def __init__(self, private_key: str, subject: str):
        self.private_key = private_key
        self.claims = {"sub": subject}

    def send(self, subscription, title, body):
        data = json.dumps({"title": title, "body": body})
        try:
            response = webpush(
                subscription_info=subscription,
                data=data,
                vapid_private_key=self.private_key,
                vapid_claims=dict(self.claims),
            )
        except WebPushException as e:
            status = e.response.status_code if e.response is not None else None
            logger.error(f"Push to {subscription.get('endpoint')} failed: {str(e)}")
            return PushResult(success=False, status_code=status, error=str(e))
        except requests.RequestException as e:
            logger.error(f"Push to {subscription.get('endpoint')} failed: {str(e)}")
            return PushResult(success=False, error=str(e))
        return PushResult(success=True, status_code=getattr(response, "status_code", None))


@functools.lru_cache(maxsize=None)
def get_push_sender() -> PushSender:
    """Web Push when a VAPID private key is configured, logging otherwise."""
    if config.VAPID_PRIVATE_KEY:
        return WebPushSender(config.VAPID_PRIVATE_KEY, config.VAPID_SUBJECT)
    logger.warning(
        "No VAPID private key provided. Push notifications will only be logged. "
        "Set the VAPID_PRIVATE_KEY environment variable to deliver them."
    )
    return LoggingPushSender()
