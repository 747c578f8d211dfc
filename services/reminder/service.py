"""
services/reminder/service.py
Supervisor-triggered SMS reminders for every appointment at a location on a day.
"""

import logging
from typing import List

from services.notification.container import NotificationServices
from services.notification.dispatcher import NotificationContent
from services.notification.formatter import render
from services.notification.recipients import Role, index_recipients
from shared.models.models import Appointment, Profile
from shared.schemas.schemas import (
    BulkReminderQuery,
    BulkReminderResponse,
    Channel,
    ReminderFailure,
)
from shared.utils.errors import (
    InvalidCredential,
    InvalidRecord,
    InvalidRequest,
    RecordNotFound,
    Unauthorized,
)

logger = logging.getLogger(__name__)


async def _authorize(query: BulkReminderQuery, services: NotificationServices) -> Profile:
    if not query.token:
        logger.warning("Request did not send a supervisor authentication token.")
        raise Unauthorized("Missing supervisor authentication token.")
    try:
        claims = await services.verifier.verify(query.token)
    except InvalidCredential as e:
        logger.warning(f"Request sent an invalid authentication token: {e}")
        raise Unauthorized("Invalid supervisor authentication token.")
    if not claims.supervisor:
        logger.warning("Request did not send a valid supervisor authentication token.")
        raise Unauthorized("Invalid supervisor authentication token.")

    try:
        return await services.store.get_profile(claims.identity_key)
    except (RecordNotFound, InvalidRecord) as e:
        logger.warning(f"Supervisor profile unavailable: {e}")
        raise Unauthorized("Supervisor profile not found.")


async def _remind(
    contact_key: str,
    appt: Appointment,
    supervisor: Profile,
    services: NotificationServices,
) -> List[ReminderFailure]:
    try:
        recipient = await services.store.get_profile(contact_key)
    except (RecordNotFound, InvalidRecord) as e:
        logger.warning(f"Cannot remind {contact_key}: {e}")
        return [ReminderFailure(contact_key=contact_key, channel=Channel.SMS, reason=str(e))]

    message = render("appointment-reminder", {"appointment": appt, "supervisor": supervisor})
    result = await services.dispatcher.dispatch(
        recipient,
        [Channel.SMS],
        NotificationContent(title=message.subject, body=message.body),
    )
    return [
        ReminderFailure(contact_key=contact_key, channel=o.channel, reason=o.reason)
        for o in result.failures
    ]


async def handle_bulk_reminder(
    query: BulkReminderQuery,
    services: NotificationServices,
) -> BulkReminderResponse:
    """
    Send one SMS reminder per distinct tutor and/or pupil with an appointment
    at ``query.location`` on ``query.day``.

    Checks run in order and the first failure wins:
    1. at least one of ``tutor`` / ``pupil`` is set (InvalidRequest)
    2. the credential verifies and carries the supervisor claim (Unauthorized)
    3. ``location`` and ``day`` are given (InvalidRequest)

    A recipient is messaged at most once per side per call, using the first
    appointment they appear in. Failed sends are reported, not raised.
    """
    if not query.tutor and not query.pupil:
        logger.warning("Request did not send any notifications.")
        raise InvalidRequest("Please specify who to send notifications to.")

    supervisor = await _authorize(query, services)

    if not query.location or not query.day:
        raise InvalidRequest("Please specify a location and a day.")

    appts = await services.store.find_appointments(query.location, query.day)
    response = BulkReminderResponse(appts=[appt.document for appt in appts])

    sides = []
    if query.tutor:
        sides.append((Role.TO_USER, response.tutors))
    if query.pupil:
        sides.append((Role.FROM_USER, response.pupils))

    for role, notified in sides:
        for contact_key, appt in index_recipients(appts, [role]).items():
            notified.append(contact_key)
            response.failures.extend(await _remind(contact_key, appt, supervisor, services))

    logger.info(
        f"{supervisor.name} sent reminders for {len(appts)} appointment(s) at "
        f"{query.location} on {query.day}: {len(response.tutors)} tutor(s), "
        f"{len(response.pupils)} pupil(s), {len(response.failures)} failure(s)"
    )
    return response
