"""
tests/conftest.py
Shared fixtures: in-memory record store, recording transports, and an
HTTP client against the ASGI app with the collaborators swapped in.
"""

import os

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("AUTH_BACKEND", "jwt")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("TRIGGER_SECRET", "test-trigger-secret")

from typing import Dict, List, Optional  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from config.settings import get_settings  # noqa: E402
from services.notification.container import NotificationServices, get_services  # noqa: E402
from services.notification.dispatcher import NotificationDispatcher  # noqa: E402
from services.notification.store import parse_record, same_day  # noqa: E402
from shared.middleware.auth import JwtTokenVerifier  # noqa: E402
from shared.models.models import Appointment, Chat, Profile  # noqa: E402
from shared.utils.errors import InvalidRecord, RecordNotFound, TransportFailure  # noqa: E402
from shared.utils.security import create_access_token  # noqa: E402


# ── Fakes ─────────────────────────────────────────────────────

class InMemoryRecordStore:
    """RecordStore over plain dicts shaped like the Firestore documents."""

    def __init__(self):
        self.users: Dict[str, dict] = {}
        self.chats: Dict[str, dict] = {}
        self.appointments: List[dict] = []
        self.profile_reads: List[str] = []

    def add_user(self, email: str, name: str, phone: Optional[str] = "+15550000000", **extra) -> dict:
        doc = {"email": email, "name": name, "phone": phone, **extra}
        self.users[email] = doc
        return doc

    async def get_profile(self, contact_key: str) -> Profile:
        self.profile_reads.append(contact_key)
        if contact_key not in self.users:
            raise RecordNotFound("users", contact_key)
        return parse_record(Profile, "users", contact_key, self.users[contact_key])

    async def get_chat(self, chat_id: str) -> Chat:
        if chat_id not in self.chats:
            raise RecordNotFound("chats", chat_id)
        return parse_record(Chat, "chats", chat_id, self.chats[chat_id])

    async def find_appointments(self, location_id: str, day: str) -> List[Appointment]:
        appts = []
        for doc in self.appointments:
            try:
                appt = parse_record(Appointment, "appointments", None, doc)
            except InvalidRecord:
                continue
            if appt.location.id == location_id and same_day(appt.time.day, day):
                appts.append(appt)
        return appts


class RecordingSms:
    def __init__(self):
        self.sent: List[tuple] = []
        self.fail_for: set = set()

    async def send(self, phone: str, body: str) -> None:
        if phone in self.fail_for:
            raise TransportFailure("sms", "carrier rejected")
        self.sent.append((phone, body))


class RecordingEmail:
    def __init__(self):
        self.sent: List[tuple] = []
        self.fail_for: set = set()

    async def send(self, template_name, profile, data=None) -> None:
        if profile.contact_key in self.fail_for:
            raise TransportFailure("email", "mailbox unavailable")
        self.sent.append((template_name, profile.contact_key, data))


class RecordingWebpush:
    def __init__(self):
        self.sent: List[tuple] = []
        self.fail_for: set = set()

    async def send(self, destination_key: str, title: str, body: str) -> None:
        if destination_key in self.fail_for:
            raise TransportFailure("webpush", "no registered push tokens")
        self.sent.append((destination_key, title, body))


# ── Helpers ───────────────────────────────────────────────────

def supervisor_token(email: str = "supervisor@tutorbook.app") -> str:
    return create_access_token(email, supervisor=True)


def auth_headers(email: str, supervisor: bool = True) -> dict:
    return {"Authorization": f"Bearer {create_access_token(email, supervisor=supervisor)}"}


def make_appointment(
    tutor: str,
    pupil: str,
    subject: str = "Algebra 1",
    location_id: str = "gunn",
    location_name: str = "Gunn Library",
    day: str = "Monday",
    start: str = "2:45 PM",
    end: str = "3:45 PM",
) -> dict:
    return {
        "subject": subject,
        "location": {"id": location_id, "name": location_name},
        "time": {"day": day, "from": start, "to": end},
        "for": {
            "toUser": {"email": tutor, "name": tutor.split("@")[0].title(), "type": "Tutor"},
            "fromUser": {"email": pupil, "name": pupil.split("@")[0].title(), "type": "Pupil"},
        },
    }


# ── Fixtures ──────────────────────────────────────────────────

@pytest.fixture
def store() -> InMemoryRecordStore:
    store = InMemoryRecordStore()
    store.add_user("supervisor@tutorbook.app", "Sam Supervisor", "+15550000001", type="Supervisor")
    return store


@pytest.fixture
def sms() -> RecordingSms:
    return RecordingSms()


@pytest.fixture
def email() -> RecordingEmail:
    return RecordingEmail()


@pytest.fixture
def webpush() -> RecordingWebpush:
    return RecordingWebpush()


@pytest.fixture
def services(store, sms, email, webpush) -> NotificationServices:
    return NotificationServices(
        settings=get_settings(),
        store=store,
        verifier=JwtTokenVerifier(),
        dispatcher=NotificationDispatcher(sms=sms, email=email, webpush=webpush),
    )


@pytest_asyncio.fixture
async def client(services):
    from main import app

    app.dependency_overrides[get_services] = lambda: services
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
