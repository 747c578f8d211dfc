"""Trigger handler registry."""

from typing import List, Mapping

from services.notification.container import NotificationServices
from services.trigger.handlers import TRIGGER_HANDLERS, TriggerHandler
from shared.schemas.schemas import DispatchResult
from shared.utils.errors import UnknownTrigger


def resolve_trigger(name: str) -> TriggerHandler:
    handler = TRIGGER_HANDLERS.get(name)
    if not handler:
        raise UnknownTrigger(name)
    return handler


async def run_trigger(
    name: str,
    data: dict,
    params: Mapping[str, str],
    services: NotificationServices,
) -> List[DispatchResult]:
    return await resolve_trigger(name)(data, params, services)
