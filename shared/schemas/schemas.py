"""
shared/schemas/schemas.py
Pydantic v2 schemas for dispatch outcomes and the HTTP surface.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ── Base ──────────────────────────────────────────────────────

class BaseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class MessageResponse(BaseSchema):
    message: str


# ── Auth ──────────────────────────────────────────────────────

class TokenClaims(BaseSchema):
    identity_key: str
    supervisor: bool = False


# ── Dispatch ──────────────────────────────────────────────────

class Channel(str, Enum):
    SMS = "sms"
    EMAIL = "email"
    WEBPUSH = "webpush"


class OutcomeStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"


class ChannelOutcome(BaseModel):
    channel: Channel
    status: OutcomeStatus
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == OutcomeStatus.SENT


class DispatchResult(BaseModel):
    """Per-recipient aggregate of channel outcomes."""

    contact_key: str
    outcomes: List[ChannelOutcome] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(o.ok for o in self.outcomes)

    @property
    def failures(self) -> List[ChannelOutcome]:
        return [o for o in self.outcomes if not o.ok]

    def outcome(self, channel: Channel) -> Optional[ChannelOutcome]:
        for o in self.outcomes:
            if o.channel == channel:
                return o
        return None


# ── Bulk Reminder ─────────────────────────────────────────────

class BulkReminderQuery(BaseSchema):
    tutor: bool = False
    pupil: bool = False
    token: Optional[str] = None
    location: Optional[str] = None
    day: Optional[str] = None


class ReminderFailure(BaseSchema):
    contact_key: str
    channel: Channel
    reason: Optional[str] = None


class BulkReminderResponse(BaseSchema):
    tutors: List[str] = Field(default_factory=list)
    pupils: List[str] = Field(default_factory=list)
    appts: List[Dict[str, Any]] = Field(default_factory=list)
    failures: List[ReminderFailure] = Field(default_factory=list)


# ── Triggers ──────────────────────────────────────────────────

class TriggerEvent(BaseSchema):
    """A change-feed event: the changed document plus its path parameters."""

    data: Dict[str, Any] = Field(default_factory=dict)
    params: Dict[str, str] = Field(default_factory=dict)


class TriggerAccepted(BaseSchema):
    trigger: str
    task_id: Optional[str] = None
