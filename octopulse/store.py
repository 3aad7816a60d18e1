"""
Settings Store

Create-once settings records keyed by a generated user id, each owning an
append-only list of events.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from octopulse.dispatcher import NotificationRecord
from octopulse.models import Event, UserSettings

logger = logging.getLogger(__name__)


class SettingsStore:
    """Settings/event persistence on top of a SQLAlchemy session."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, selected_repo: str, subscription: Dict[str, Any]) -> UserSettings:
        settings = UserSettings(
            id=str(uuid.uuid4()),
            selected_repo=selected_repo,
            subscription=subscription,
            created_at=datetime.now(timezone.utc),
        )
        self.session.add(settings)
        self.session.commit()
        logger.info(f"Saved settings for user: {settings.id}")
        return settings

    def get(self, user_id: str) -> Optional[UserSettings]:
        return self.session.get(UserSettings, user_id)

    def exists(self, user_id: str) -> bool:
        return self.get(user_id) is not None

    def get_events(self, user_id: str) -> List[Event]:
        """All events for the user, newest first."""
        return list(
            self.session.execute(
                select(Event).where(Event.user_id == user_id).order_by(Event.seq.desc())
            ).scalars()
        )

    def add_event(self, user_id: str, record: NotificationRecord) -> Event:
        # a plain INSERT: concurrent deliveries for one user do not overwrite each other
        event = Event(
            id=record.id,
            user_id=user_id,
            type=record.type,
            title=record.title,
            body=record.body,
            timestamp=record.timestamp,
        )
        self.session.add(event)
        self.session.commit()
        return event
