"""
services/trigger/handlers.py
Background handlers fired when a watched record is created.

Nobody waits on these, so a handler never raises: every failure is logged
and the handler returns whatever dispatch results it did produce.
"""

import functools
import logging
from typing import Awaitable, Callable, Dict, List, Mapping

from services.notification.container import NotificationServices
from services.notification.dispatcher import NotificationContent
from services.notification.formatter import render
from services.notification.recipients import Role, resolve_recipients
from services.notification.store import parse_record
from shared.models.models import ApprovedRequest, Chat, ChatMessage, Feedback, Profile, Request
from shared.schemas.schemas import Channel, DispatchResult
from shared.utils.errors import InvalidRecord, RecordNotFound

logger = logging.getLogger(__name__)

TriggerHandler = Callable[[dict, Mapping[str, str], NotificationServices], Awaitable[List[DispatchResult]]]


def background_trigger(func: TriggerHandler) -> TriggerHandler:
    """Log instead of raising; a background failure has no one to report to."""

    @functools.wraps(func)
    async def wrapper(data, params, services) -> List[DispatchResult]:
        try:
            results = await func(data, params, services)
        except (InvalidRecord, RecordNotFound) as e:
            logger.error(f"{func.__name__}: {e}")
            return []
        except Exception:
            logger.exception(f"{func.__name__} failed")
            return []
        for result in results:
            for failure in result.failures:
                logger.warning(
                    f"{func.__name__}: {failure.channel.value} to {result.contact_key} failed: {failure.reason}"
                )
        return results

    return wrapper


async def _load_profiles(keys: List[str], services: NotificationServices) -> List[Profile]:
    profiles = []
    for key in keys:
        try:
            profiles.append(await services.store.get_profile(key))
        except (RecordNotFound, InvalidRecord) as e:
            logger.warning(f"Skipping recipient {key}: {e}")
    return profiles


# ── users/{email} ─────────────────────────────────────────────

@background_trigger
async def user_created(data, params, services) -> List[DispatchResult]:
    """SMS and email welcome for a new user."""
    profile = parse_record(Profile, "users", params.get("user"), data)
    logger.info(f"Sending {profile.name} <{profile.email}> welcome notifications...")

    welcome = render("welcome")
    result = await services.dispatcher.dispatch(
        profile,
        [Channel.EMAIL, Channel.SMS],
        NotificationContent(
            title=welcome.subject,
            body=welcome.body,
            email_template="welcome",
            email_data={"profile": profile},
        ),
    )
    logger.info(f"Sent {profile.name} <{profile.email}> welcome notifications.")
    return [result]


# ── chats/{chat}/messages/{message} ───────────────────────────

@background_trigger
async def message_created(data, params, services) -> List[DispatchResult]:
    """Web push and SMS to everyone on the chat except the sender."""
    message = parse_record(ChatMessage, "messages", params.get("message"), data)
    chat_id = params.get("chat") or message.chat_id
    if not chat_id:
        raise InvalidRecord("messages", params.get("message"), "no chat id")
    chat = await services.store.get_chat(chat_id)

    keys = resolve_recipients([chat], [Role.CHATTER], actor=message.sent_by.contact_key)
    alert = render("message-alert", {"message": message})
    return await services.dispatcher.dispatch_many(
        await _load_profiles(keys, services),
        [Channel.WEBPUSH, Channel.SMS],
        NotificationContent(title=alert.subject, body=alert.body, sms=alert.sms),
    )


# ── chats/{chat} ──────────────────────────────────────────────

@background_trigger
async def chat_created(data, params, services) -> List[DispatchResult]:
    """Web push and SMS to every other member of a new chat."""
    chat = parse_record(Chat, "chats", params.get("chat"), data)
    keys = resolve_recipients([chat], [Role.CHATTER], actor=chat.created_by.contact_key)
    invite = render("chat-invite", {"chat": chat})
    return await services.dispatcher.dispatch_many(
        await _load_profiles(keys, services),
        [Channel.WEBPUSH, Channel.SMS],
        NotificationContent(title=invite.subject, body=invite.body),
    )


# ── feedback/{id} ─────────────────────────────────────────────

@background_trigger
async def feedback_created(data, params, services) -> List[DispatchResult]:
    """SMS the team about new feedback."""
    feedback = parse_record(Feedback, "feedback", params.get("feedback"), data)
    settings = services.settings
    team = Profile(
        email=settings.EMAIL_FROM,
        name=settings.EMAIL_FROM_NAME,
        phone=settings.FEEDBACK_PHONE_NUMBER,
    )
    alert = render("feedback-alert", {"feedback": feedback})
    result = await services.dispatcher.dispatch(
        team, [Channel.SMS], NotificationContent(title=alert.subject, body=alert.body)
    )
    return [result]


# ── users/{user}/requestsIn/{request} ─────────────────────────

@background_trigger
async def request_in_created(data, params, services) -> List[DispatchResult]:
    """SMS and email to the tutor who received a lesson request."""
    request = parse_record(Request, "requestsIn", params.get("request"), data)
    user = await services.store.get_profile(params.get("user") or request.to_user.contact_key)

    summary = render("request", {"request": request})
    result = await services.dispatcher.dispatch(
        user,
        [Channel.SMS, Channel.EMAIL],
        NotificationContent(
            title=summary.subject,
            body=summary.body,
            email_template="request",
            email_data={"request": request},
        ),
    )
    logger.info(f"Sent request notification to {user.name} <{user.email}> <{user.phone}>.")
    return [result]


# ── users/{user}/approvedRequestsOut/{request} ────────────────

@background_trigger
async def approved_out_created(data, params, services) -> List[DispatchResult]:
    """SMS and email to the pupil whose lesson request was approved."""
    approved = parse_record(ApprovedRequest, "approvedRequestsOut", params.get("request"), data)
    user = await services.store.get_profile(
        params.get("user") or approved.request.from_user.contact_key
    )

    summary = render("approved-appointment", {"approved_request": approved})
    result = await services.dispatcher.dispatch(
        user,
        [Channel.SMS, Channel.EMAIL],
        NotificationContent(
            title=summary.subject,
            body=summary.body,
            email_template="approved-appointment",
            email_data={"approved_request": approved},
        ),
    )
    logger.info(f"Sent appt notification to {user.name} <{user.email}> <{user.phone}>.")
    return [result]


# ── Not implemented yet ───────────────────────────────────────

def not_implemented(name: str) -> TriggerHandler:
    async def handler(data, params, services) -> List[DispatchResult]:
        logger.warning(f"{name}: this notification function has not been implemented yet.")
        return []

    handler.__name__ = name
    return handler


# pendingClockIns / pendingClockOuts: sms, webpush to the clock-in/out recipient
clock_in = not_implemented("clock_in")
clock_out = not_implemented("clock_out")
# modifiedRequestsIn / canceledRequestsIn: sms, webpush to the tutor
modified_request_in = not_implemented("modified_request_in")
canceled_request_in = not_implemented("canceled_request_in")
# modifiedRequestsOut / rejectedRequestsOut: sms, webpush to the pupil
modified_request_out = not_implemented("modified_request_out")
rejected_request_out = not_implemented("rejected_request_out")
# modifiedAppointments / canceledAppointments: sms, webpush, email to the other attendee
modified_appt = not_implemented("modified_appt")
canceled_appt = not_implemented("canceled_appt")


TRIGGER_HANDLERS: Dict[str, TriggerHandler] = {
    "user": user_created,
    "message": message_created,
    "chat": chat_created,
    "feedback": feedback_created,
    "clockIn": clock_in,
    "clockOut": clock_out,
    "requestIn": request_in_created,
    "modifiedIn": modified_request_in,
    "canceledIn": canceled_request_in,
    "approvedOut": approved_out_created,
    "rejectedOut": rejected_request_out,
    "modifiedOut": modified_request_out,
    "modifiedAppt": modified_appt,
    "canceledAppt": canceled_appt,
}
