"""
services/trigger/router.py
Change-feed webhook: the record store posts each created document here and
the matching handler runs in the background on the notifications queue.
"""

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status

from config.settings import Settings, get_settings
from services.trigger.registry import resolve_trigger
from shared.schemas.schemas import TriggerAccepted, TriggerEvent
from shared.utils.errors import UnknownTrigger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/triggers", tags=["Triggers"])


def verify_trigger_secret(
    x_trigger_secret: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    expected = settings.TRIGGER_SECRET
    if not expected or not x_trigger_secret or not hmac.compare_digest(expected, x_trigger_secret):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid trigger secret",
        )


def enqueue_trigger(trigger: str, event: TriggerEvent) -> Optional[str]:
    """Hand the event to the Celery worker. Returns the task id."""
    from tasks.trigger_tasks import handle_trigger

    result = handle_trigger.delay(trigger, event.data, event.params)
    return result.id


@router.post(
    "/{trigger}",
    response_model=TriggerAccepted,
    status_code=status.HTTP_202_ACCEPTED,
    dependencies=[Depends(verify_trigger_secret)],
)
async def receive_trigger(trigger: str, event: TriggerEvent):
    try:
        resolve_trigger(trigger)
    except UnknownTrigger:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown trigger: {trigger}")

    task_id = enqueue_trigger(trigger, event)
    logger.info(f"Queued {trigger} trigger (task {task_id})")
    return TriggerAccepted(trigger=trigger, task_id=task_id)
