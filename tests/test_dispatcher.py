"""
tests/test_dispatcher.py
Tests for per-channel outcome aggregation in the notification dispatcher.
"""

import pytest

from services.notification.dispatcher import NotificationContent, NotificationDispatcher
from shared.models.models import Profile
from shared.schemas.schemas import Channel, OutcomeStatus


def _profile(email: str, phone="+15551230000") -> Profile:
    return Profile(email=email, name=email.split("@")[0].title(), phone=phone)


@pytest.mark.asyncio
async def test_all_channels_sent(services, sms, email, webpush):
    recipient = _profile("tina@tutorbook.app")
    content = NotificationContent(title="Hi", body="Body", sms="Short", email_template="welcome")

    result = await services.dispatcher.dispatch(
        recipient, [Channel.SMS, Channel.EMAIL, Channel.WEBPUSH], content
    )

    assert result.ok
    assert [o.channel for o in result.outcomes] == [Channel.SMS, Channel.EMAIL, Channel.WEBPUSH]
    assert sms.sent == [("+15551230000", "Short")]
    assert email.sent == [("welcome", "tina@tutorbook.app", {})]
    assert webpush.sent == [("tina@tutorbook.app", "Hi", "Body")]


@pytest.mark.asyncio
async def test_sms_failure_does_not_stop_webpush_or_other_recipients(services, sms, webpush):
    first = _profile("first@tutorbook.app", phone="+15550000009")
    second = _profile("second@tutorbook.app", phone="+15550000010")
    sms.fail_for.add("+15550000009")

    results = await services.dispatcher.dispatch_many(
        [first, second], [Channel.SMS, Channel.WEBPUSH], NotificationContent(title="T", body="B")
    )

    assert not results[0].ok
    assert results[0].outcome(Channel.SMS).status == OutcomeStatus.FAILED
    assert results[0].outcome(Channel.SMS).reason == "carrier rejected"
    assert results[0].outcome(Channel.WEBPUSH).status == OutcomeStatus.SENT
    assert results[1].ok
    assert sms.sent == [("+15550000010", "B")]
    assert [k for k, _, _ in webpush.sent] == ["first@tutorbook.app", "second@tutorbook.app"]


@pytest.mark.asyncio
async def test_missing_phone_is_a_failed_outcome(services, sms):
    result = await services.dispatcher.dispatch(
        _profile("nophone@tutorbook.app", phone=None), [Channel.SMS], NotificationContent(title="T", body="B")
    )
    assert result.failures[0].reason == "no phone number on profile"
    assert sms.sent == []


@pytest.mark.asyncio
async def test_email_without_template_fails(services, email):
    result = await services.dispatcher.dispatch(
        _profile("tina@tutorbook.app"), [Channel.EMAIL], NotificationContent(title="T", body="B")
    )
    assert result.failures[0].channel == Channel.EMAIL
    assert email.sent == []


class ExplodingSms:
    async def send(self, phone, body):
        raise RuntimeError("socket closed")


@pytest.mark.asyncio
async def test_unexpected_transport_error_is_collected(email, webpush):
    dispatcher = NotificationDispatcher(sms=ExplodingSms(), email=email, webpush=webpush)

    result = await dispatcher.dispatch(
        _profile("tina@tutorbook.app"), [Channel.SMS, Channel.WEBPUSH], NotificationContent(title="T", body="B")
    )

    assert result.outcome(Channel.SMS).reason == "socket closed"
    assert result.outcome(Channel.WEBPUSH).ok


@pytest.mark.asyncio
async def test_channels_accept_plain_strings(services, webpush):
    result = await services.dispatcher.dispatch(
        _profile("tina@tutorbook.app"), ["webpush"], NotificationContent(title="T", body="B")
    )
    assert result.ok
    assert len(webpush.sent) == 1


@pytest.mark.asyncio
async def test_unknown_channel_is_rejected_before_sending(services, sms, webpush):
    with pytest.raises(ValueError):
        await services.dispatcher.dispatch(
            _profile("tina@tutorbook.app"), [Channel.SMS, "fax", Channel.WEBPUSH], NotificationContent(title="T", body="B")
        )
    assert sms.sent == []
    assert webpush.sent == []
