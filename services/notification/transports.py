"""
services/notification/transports.py
Outbound delivery: Twilio SMS, Resend email, FCM web push.

A transport either returns normally (sent) or raises TransportFailure.
Provider exceptions never escape as anything else.
"""

import logging
import re
from typing import Any, Mapping, Optional, Protocol

from config.settings import Settings
from services.notification.formatter import APP_URL, render, render_email_html
from shared.models.models import Profile
from shared.utils.errors import RecordNotFound, TransportFailure

logger = logging.getLogger(__name__)


class SmsTransport(Protocol):
    async def send(self, phone: str, body: str) -> None: ...


class EmailTransport(Protocol):
    async def send(
        self, template_name: str, profile: Profile, data: Optional[Mapping[str, Any]] = None
    ) -> None: ...


class WebpushTransport(Protocol):
    async def send(self, destination_key: str, title: str, body: str) -> None: ...


def normalize_phone(phone: str, default_country_code: str = "+1") -> str:
    """E.164-ish: keep digits, prefix the default country code when none given."""
    digits = re.sub(r"\D", "", phone or "")
    if not digits:
        raise ValueError(f"Invalid phone number: {phone!r}")
    if phone.strip().startswith("+"):
        return f"+{digits}"
    return f"{default_country_code}{digits}"


# ── SMS ───────────────────────────────────────────────────────

class TwilioSmsTransport:
    """Send SMS via Twilio."""

    def __init__(self, settings: Settings, client=None):
        self.settings = settings
        self._client = client

    @property
    def client(self):
        if self._client is None:
            from twilio.rest import Client
            self._client = Client(self.settings.TWILIO_ACCOUNT_SID, self.settings.TWILIO_AUTH_TOKEN)
        return self._client

    async def send(self, phone: str, body: str) -> None:
        try:
            to = normalize_phone(phone, self.settings.SMS_DEFAULT_COUNTRY_CODE)
        except ValueError as e:
            raise TransportFailure("sms", str(e))

        from twilio.base.exceptions import TwilioException

        try:
            self.client.messages.create(
                body=body,
                from_=self.settings.TWILIO_FROM_NUMBER,
                to=to,
            )
        except TwilioException as e:
            logger.warning(f"SMS send failed: {e}")
            raise TransportFailure("sms", str(e))


# ── Email ─────────────────────────────────────────────────────

class ResendEmailTransport:
    """Send transactional email via Resend, rendering the named template."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def send(
        self, template_name: str, profile: Profile, data: Optional[Mapping[str, Any]] = None
    ) -> None:
        import resend
        from resend.exceptions import ResendError

        message = render(template_name, data)
        resend.api_key = self.settings.RESEND_API_KEY
        try:
            resend.Emails.send({
                "from": f"{self.settings.EMAIL_FROM_NAME} <{self.settings.EMAIL_FROM}>",
                "to": [f"{profile.name} <{profile.email}>"],
                "subject": message.subject,
                "html": render_email_html(message),
            })
        except ResendError as e:
            logger.warning(f"Email send failed: {e}")
            raise TransportFailure("email", str(e))


# ── Web Push ──────────────────────────────────────────────────

class FcmWebpushTransport:
    """Send web push via Firebase Cloud Messaging to every token a user registered."""

    def __init__(self, store, app=None):
        self.store = store
        self.app = app

    async def send(self, destination_key: str, title: str, body: str) -> None:
        from firebase_admin import exceptions, messaging

        try:
            profile = await self.store.get_profile(destination_key)
        except RecordNotFound as e:
            raise TransportFailure("webpush", str(e))
        if not profile.fcm_tokens:
            raise TransportFailure("webpush", "no registered push tokens")

        message = messaging.MulticastMessage(
            tokens=profile.fcm_tokens,
            notification=messaging.Notification(title=title, body=body),
            webpush=messaging.WebpushConfig(
                fcm_options=messaging.WebpushFCMOptions(link=APP_URL),
            ),
        )
        try:
            response = messaging.send_each_for_multicast(message, app=self.app)
        except (exceptions.FirebaseError, ValueError) as e:
            logger.warning(f"FCM push failed: {e}")
            raise TransportFailure("webpush", str(e))

        if response.success_count == 0:
            raise TransportFailure("webpush", f"all {response.failure_count} token(s) rejected")
        if response.failure_count:
            logger.info(
                f"FCM push to {destination_key}: {response.failure_count} of "
                f"{len(profile.fcm_tokens)} token(s) rejected"
            )
