"""
Database Models

This module defines the database models for the application.
"""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class UserSettings(Base):
    """Settings record: a generated user id, a monitored repository and a push subscription."""

    __tablename__ = "user_settings"

    id = Column(String, primary_key=True, index=True)
    selected_repo = Column(String, nullable=False)
    subscription = Column(JSON, nullable=False)
    created_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<UserSettings(id={self.id}, selected_repo={self.selected_repo})>"


class Event(Base):
    """Notification record produced by a webhook delivery."""

    __tablename__ = "events"

    # insertion order; timestamps can collide within one clock tick
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String, unique=True, index=True, nullable=False)
    user_id = Column(String, ForeignKey("user_settings.id"), index=True, nullable=False)
    type = Column(String, nullable=False)
    title = Column(String, nullable=False)
    body = Column(Text, nullable=False)
    timestamp = Column(String, nullable=False)  # ISO-8601, UTC

    def __repr__(self):
        return f"<Event(id={self.id}, type={self.type}, user_id={self.user_id})>"
