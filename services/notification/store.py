"""
services/notification/store.py
Read access to the marketplace's records.

The service never writes here. Every document is validated into a typed
record on the way in; malformed documents are rejected on point lookups and
skipped (with a warning) on scans.
"""

import logging
from typing import List, Optional, Protocol, Type, TypeVar

from pydantic import ValidationError

from shared.models.models import Appointment, Chat, Profile, Record
from shared.utils.errors import InvalidRecord, RecordNotFound

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)


class RecordStore(Protocol):
    async def get_profile(self, contact_key: str) -> Profile: ...

    async def get_chat(self, chat_id: str) -> Chat: ...

    async def find_appointments(self, location_id: str, day: str) -> List[Appointment]: ...


def parse_record(model: Type[R], collection: str, key: Optional[str], data: Optional[dict]) -> R:
    """Validate a raw document, raising InvalidRecord instead of ValidationError."""
    try:
        return model.from_document(data or {})
    except ValidationError as e:
        raise InvalidRecord(collection, key, f"{e.error_count()} validation error(s)") from e


def same_day(stored: str, requested: str) -> bool:
    return stored.strip().casefold() == requested.strip().casefold()


class FirestoreRecordStore:
    """RecordStore backed by Cloud Firestore (async client)."""

    USERS = "users"
    CHATS = "chats"
    APPOINTMENTS = "appointments"

    def __init__(self, client):
        self.db = client

    @classmethod
    def from_app(cls, app=None) -> "FirestoreRecordStore":
        from firebase_admin import firestore_async

        return cls(firestore_async.client(app))

    async def _get(self, model: Type[R], collection: str, key: str) -> R:
        snap = await self.db.collection(collection).document(key).get()
        if not snap.exists:
            raise RecordNotFound(collection, key)
        return parse_record(model, collection, key, snap.to_dict())

    async def get_profile(self, contact_key: str) -> Profile:
        return await self._get(Profile, self.USERS, contact_key)

    async def get_chat(self, chat_id: str) -> Chat:
        return await self._get(Chat, self.CHATS, chat_id)

    async def find_appointments(self, location_id: str, day: str) -> List[Appointment]:
        """
        All appointments (across every user's subcollection) at a location on a day.

        Firestore only filters by exact value, so the day is matched
        case-insensitively here after filtering by location.
        """
        from google.cloud.firestore_v1.base_query import FieldFilter

        query = self.db.collection_group(self.APPOINTMENTS).where(
            filter=FieldFilter("location.id", "==", location_id)
        )
        appts: List[Appointment] = []
        async for doc in query.stream():
            try:
                appt = parse_record(Appointment, self.APPOINTMENTS, doc.id, doc.to_dict())
            except InvalidRecord as e:
                logger.warning(f"Skipping appointment: {e}")
                continue
            if same_day(appt.time.day, day):
                appts.append(appt)
        return appts
