"""
services/notification/dispatcher.py
Central notification dispatcher.

For one recipient, each requested channel is tried in turn and yields an
explicit outcome. A failed channel never stops the remaining channels or
the remaining recipients; nothing is retried.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from services.notification.transports import EmailTransport, SmsTransport, WebpushTransport
from shared.models.models import Profile
from shared.schemas.schemas import Channel, ChannelOutcome, DispatchResult, OutcomeStatus
from shared.utils.errors import TransportFailure

logger = logging.getLogger(__name__)


@dataclass
class NotificationContent:
    """What to say on each channel. ``sms`` falls back to ``body``."""

    title: str
    body: str
    sms: Optional[str] = None
    email_template: Optional[str] = None
    email_data: Dict[str, Any] = field(default_factory=dict)


class NotificationDispatcher:
    def __init__(self, sms: SmsTransport, email: EmailTransport, webpush: WebpushTransport):
        self.sms = sms
        self.email = email
        self.webpush = webpush

    async def _send(self, channel: Channel, recipient: Profile, content: NotificationContent) -> None:
        if channel == Channel.SMS:
            if not recipient.phone:
                raise TransportFailure(channel.value, "no phone number on profile")
            await self.sms.send(recipient.phone, content.sms or content.body)
        elif channel == Channel.EMAIL:
            if not content.email_template:
                raise TransportFailure(channel.value, "no email template")
            await self.email.send(content.email_template, recipient, content.email_data)
        elif channel == Channel.WEBPUSH:
            await self.webpush.send(recipient.contact_key, content.title, content.body)

    async def dispatch(
        self,
        recipient: Profile,
        channels: Sequence[Channel],
        content: NotificationContent,
    ) -> DispatchResult:
        # Unknown channels raise ValueError before anything is sent.
        channels = [Channel(c) for c in channels]
        result = DispatchResult(contact_key=recipient.contact_key)

        for channel in channels:
            try:
                await self._send(channel, recipient, content)
            except TransportFailure as e:
                logger.warning(f"{channel.value} to {recipient.contact_key} failed: {e.reason}")
                outcome = ChannelOutcome(channel=channel, status=OutcomeStatus.FAILED, reason=e.reason)
            except Exception as e:
                logger.exception(f"{channel.value} to {recipient.contact_key} raised unexpectedly")
                outcome = ChannelOutcome(channel=channel, status=OutcomeStatus.FAILED, reason=str(e))
            else:
                outcome = ChannelOutcome(channel=channel, status=OutcomeStatus.SENT)
            result.outcomes.append(outcome)

        return result

    async def dispatch_many(
        self,
        recipients: Iterable[Profile],
        channels: Sequence[Channel],
        content: NotificationContent,
    ) -> List[DispatchResult]:
        return [await self.dispatch(r, channels, content) for r in recipients]
