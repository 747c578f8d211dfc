"""
services/notification/recipients.py
Recipient resolution: which distinct contact keys a set of records should notify.
"""

from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence


class Role(str, Enum):
    TO_USER = "toUser"      # the tutor on an appointment/request
    FROM_USER = "fromUser"  # the pupil
    CHATTER = "chatter"     # anyone on a chat


def _candidates(record: Any, roles: Sequence[Role]) -> Iterator[str]:
    for role in roles:
        if role == Role.CHATTER:
            yield from getattr(record, "contact_keys", [])
            continue
        holder = getattr(record, "participants", record)
        ref = getattr(holder, "to_user" if role == Role.TO_USER else "from_user", None)
        if ref is not None:
            yield ref.contact_key


def _normalize(key: str) -> str:
    return key.strip().lower()


def index_recipients(
    records: Iterable[Any],
    roles: Sequence[Role],
    actor: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Map each distinct contact key to the first record it appears in.

    Keys are compared case-insensitively and keep their first-seen spelling;
    the insertion order of the result is the order of first encounter.
    The actor's own key is never included.
    """
    excluded = _normalize(actor) if actor else None
    seen = set()
    index: Dict[str, Any] = {}
    for record in records:
        for key in _candidates(record, roles):
            if not key:
                continue
            normalized = _normalize(key)
            if normalized == excluded or normalized in seen:
                continue
            seen.add(normalized)
            index[key] = record
    return index


def resolve_recipients(
    records: Iterable[Any],
    roles: Sequence[Role] = (Role.TO_USER, Role.FROM_USER),
    actor: Optional[str] = None,
) -> List[str]:
    """Distinct contact keys for ``roles`` across ``records``, minus ``actor``."""
    return list(index_recipients(records, roles, actor))
