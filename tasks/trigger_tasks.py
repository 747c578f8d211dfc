"""
tasks/trigger_tasks.py
Celery task that runs a trigger handler for one change-feed event.

Usage from a route:
    from tasks.trigger_tasks import handle_trigger
    handle_trigger.delay("user", data, {"user": email})
"""

import asyncio
import logging

from services.notification.container import get_services
from services.trigger.registry import run_trigger
from tasks.celery_app import celery_app

logger = logging.getLogger(__name__)

# One loop per worker process; the async Firestore client is bound to it.
_loop = None


def _run(coro):
    global _loop
    if _loop is None or _loop.is_closed():
        _loop = asyncio.new_event_loop()
    return _loop.run_until_complete(coro)


@celery_app.task(name="tasks.trigger_tasks.handle_trigger", ignore_result=False)
def handle_trigger(trigger: str, data: dict, params: dict = None) -> dict:
    """
    Run one trigger handler to completion. No retry: a failed send is
    terminal and only shows up in the logs and the returned summary.
    """
    try:
        results = _run(run_trigger(trigger, data, params or {}, get_services()))
    except Exception as e:
        logger.exception(f"Trigger {trigger} could not run")
        return {"trigger": trigger, "recipients": 0, "failed": [], "error": str(e)}

    summary = {
        "trigger": trigger,
        "recipients": len(results),
        "failed": [r.contact_key for r in results if not r.ok],
    }
    logger.info(f"Trigger {trigger} handled: {summary}")
    return summary
