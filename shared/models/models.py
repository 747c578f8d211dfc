"""
shared/models/models.py
Typed domain records for the tutoring marketplace.

Records are owned by the surrounding application and stored in Firestore as
camelCase documents. They are validated here, where they enter this service;
attribute names are snake_case with aliases matching the stored field names.
"""

from enum import Enum as PyEnum
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PrivateAttr


# ── Enumerations ──────────────────────────────────────────────

class Gender(str, PyEnum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


# ── Base ──────────────────────────────────────────────────────

class Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    _document: Optional[dict] = PrivateAttr(default=None)

    @classmethod
    def from_document(cls, data: dict):
        """Validate a stored document and keep it as it was stored."""
        record = cls.model_validate(data)
        record._document = dict(data)
        return record

    @property
    def document(self) -> dict:
        """The stored document this record was read from, unknown fields included."""
        if self._document is not None:
            return self._document
        return self.to_document()

    def to_document(self) -> dict:
        """Dump back to the stored (aliased) shape."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


def _coerce_gender(value: Any) -> Any:
    if value is None or isinstance(value, Gender):
        return value
    try:
        return Gender(value)
    except ValueError:
        return Gender.OTHER


GenderField = Annotated[Optional[Gender], BeforeValidator(_coerce_gender)]


# ── People ────────────────────────────────────────────────────

class Profile(Record):
    """A registered user, stored at users/{email}."""

    email: str = Field(min_length=1)
    name: str
    phone: Optional[str] = None
    gender: GenderField = None
    role: Optional[str] = Field(None, alias="type")
    fcm_tokens: List[str] = Field(default_factory=list, alias="fcmTokens")

    @property
    def contact_key(self) -> str:
        return self.email


class ProfileRef(Record):
    """The partial profile copy embedded in requests, chats and appointments."""

    email: str = Field(min_length=1)
    name: str = ""
    phone: Optional[str] = None
    gender: GenderField = None
    role: Optional[str] = Field(None, alias="type")

    @property
    def contact_key(self) -> str:
        return self.email


# ── Scheduling ────────────────────────────────────────────────

class Location(Record):
    id: str
    name: str


class TimeSlot(Record):
    day: str
    start: str = Field(alias="from")
    end: str = Field("", alias="to")


class Participants(Record):
    from_user: ProfileRef = Field(alias="fromUser")
    to_user: ProfileRef = Field(alias="toUser")


class Appointment(Record):
    subject: str
    location: Location
    time: TimeSlot
    participants: Participants = Field(alias="for")


class Request(Record):
    from_user: ProfileRef = Field(alias="fromUser")
    to_user: ProfileRef = Field(alias="toUser")
    subject: str
    time: Optional[TimeSlot] = None
    location: Optional[Location] = None
    status: Optional[str] = None


class ApprovedRequest(Record):
    request: Request = Field(alias="for")
    approved_by: ProfileRef = Field(alias="approvedBy")


# ── Messaging ─────────────────────────────────────────────────

class Chat(Record):
    chatters: List[ProfileRef] = Field(default_factory=list)
    chatter_emails: List[str] = Field(default_factory=list, alias="chatterEmails")
    created_by: ProfileRef = Field(alias="createdBy")

    @property
    def contact_keys(self) -> List[str]:
        """Chatter contact keys, preferring the flat email list when present."""
        if self.chatter_emails:
            return list(self.chatter_emails)
        return [c.contact_key for c in self.chatters]


class ChatMessage(Record):
    sent_by: ProfileRef = Field(alias="sentBy")
    body: str = Field(alias="message")
    chat_id: Optional[str] = Field(None, alias="chatId")


class Feedback(Record):
    from_user: ProfileRef = Field(alias="from")
    message: str
