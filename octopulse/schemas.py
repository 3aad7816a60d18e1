"""
API Schemas

Pydantic models for request bodies, response records and the webhook
payload fields the dispatcher reads.
"""
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

EventType = Literal["star", "follower"]


class PushSubscriptionKeys(BaseModel):
    model_config = ConfigDict(extra="allow")

    p256dh: str
    auth: str


class PushSubscription(BaseModel):
    """A browser-issued Push API subscription, stored exactly as received."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    endpoint: str
    expiration_time: Optional[Union[int, float]] = Field(default=None, alias="expirationTime")
    keys: PushSubscriptionKeys

    def to_dict(self) -> Dict[str, Any]:
        """Convert subscription to the format needed by pywebpush."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class SettingsCreate(BaseModel):
    """Body of POST /api/settings; both fields are checked by the route."""

    model_config = ConfigDict(populate_by_name=True)

    selected_repo: Optional[str] = Field(default=None, alias="selectedRepo")
    subscription: Optional[Dict[str, Any]] = None


class SettingsCreated(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")


class RepoListRequest(BaseModel):
    token: Optional[str] = None


class GitHubRepo(BaseModel):
    id: int
    full_name: str


class GitHubEvent(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    type: EventType
    title: str
    body: str
    timestamp: str


class VapidPublicKey(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    public_key: Optional[str] = Field(default=None, alias="publicKey")


class WebhookAck(BaseModel):
    message: str


# Webhook payloads: only the fields the dispatcher reads, all optional.


class _Account(BaseModel):
    model_config = ConfigDict(extra="ignore")

    login: Optional[str] = None


class _Repository(BaseModel):
    model_config = ConfigDict(extra="ignore")

    full_name: Optional[str] = None


class WebhookPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    action: Optional[str] = None
    sender: Optional[_Account] = None
    repository: Optional[_Repository] = None

    @property
    def sender_login(self) -> Optional[str]:
        return self.sender.login if self.sender else None

    @property
    def repo_full_name(self) -> Optional[str]:
        return self.repository.full_name if self.repository else None

    @classmethod
    def decode(cls, raw: Any) -> "WebhookPayload":
        """
        Decode an arbitrary JSON value. Anything that is not a mapping of the
        expected shape decodes to an empty payload, which matches no event.
        """
        if not isinstance(raw, dict):
            return cls()
        try:
            return cls.model_validate(raw)
        except ValidationError:
            return cls()


def envelope(data: Any) -> Dict[str, Any]:
    """Success envelope shared by every route."""
    return {"success": True, "data": data}


def dump_list(items: List[BaseModel]) -> List[Dict[str, Any]]:
    return [item.model_dump(by_alias=True) for item in items]
