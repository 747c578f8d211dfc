"""
services/notification/container.py
The collaborators every handler works with, bundled so they can be injected
(production wiring here, in-memory fakes in tests).
"""

from dataclasses import dataclass
from functools import lru_cache

from config.settings import Settings, get_settings
from services.notification.dispatcher import NotificationDispatcher
from services.notification.store import RecordStore
from shared.middleware.auth import TokenVerifier


@dataclass
class NotificationServices:
    settings: Settings
    store: RecordStore
    verifier: TokenVerifier
    dispatcher: NotificationDispatcher


def build_services(settings: Settings) -> NotificationServices:
    """Wire the production collaborators: Firestore, Firebase/JWT auth, Twilio, Resend, FCM."""
    from config.firebase import get_firebase_app
    from services.notification.store import FirestoreRecordStore
    from services.notification.transports import (
        FcmWebpushTransport,
        ResendEmailTransport,
        TwilioSmsTransport,
    )
    from shared.middleware.auth import FirebaseTokenVerifier, JwtTokenVerifier

    app = get_firebase_app()
    store = FirestoreRecordStore.from_app(app)

    if settings.AUTH_BACKEND == "jwt":
        verifier = JwtTokenVerifier()
    else:
        verifier = FirebaseTokenVerifier(app)

    dispatcher = NotificationDispatcher(
        sms=TwilioSmsTransport(settings),
        email=ResendEmailTransport(settings),
        webpush=FcmWebpushTransport(store, app),
    )
    return NotificationServices(settings=settings, store=store, verifier=verifier, dispatcher=dispatcher)


@lru_cache()
def get_services() -> NotificationServices:
    """FastAPI dependency / worker accessor for the process-wide collaborators."""
    return build_services(get_settings())
