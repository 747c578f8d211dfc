"""
services/reminder/router.py
HTTP surface for the supervisor's bulk appointment reminder.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from services.notification.container import NotificationServices, get_services
from services.reminder.service import handle_bulk_reminder
from shared.middleware.auth import get_raw_token
from shared.schemas.schemas import BulkReminderQuery, BulkReminderResponse
from shared.utils.errors import InvalidRequest, Unauthorized

router = APIRouter(tags=["Reminders"])


@router.get("/appt", response_model=BulkReminderResponse)
async def appointment_reminders(
    tutor: bool = Query(False, description="Remind each appointment's tutor (toUser)"),
    pupil: bool = Query(False, description="Remind each appointment's pupil (fromUser)"),
    location: Optional[str] = Query(None, description="Location ID"),
    day: Optional[str] = Query(None, description="Weekday name, any casing"),
    token: Optional[str] = Depends(get_raw_token),
    services: NotificationServices = Depends(get_services),
):
    """Text every tutor and/or pupil with an appointment at a location on a day."""
    query = BulkReminderQuery(tutor=tutor, pupil=pupil, token=token, location=location, day=day)
    try:
        return await handle_bulk_reminder(query, services)
    except InvalidRequest as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Unauthorized as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
