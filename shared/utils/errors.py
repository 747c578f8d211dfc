"""
shared/utils/errors.py
Exception types raised across the notification service.
"""

from typing import Optional


class NotificationError(Exception):
    """Base class for all notification service errors."""


# ── Bulk reminder validation ──────────────────────────────────

class InvalidRequest(NotificationError):
    """The caller asked for something that cannot be served (e.g. no recipient class)."""


class Unauthorized(NotificationError):
    """Missing, invalid or non-supervisor credential."""


# ── Collaborators ─────────────────────────────────────────────

class InvalidCredential(NotificationError):
    """Raised by a token verifier when a credential does not verify."""


class TransportFailure(NotificationError):
    """A single channel send to a single recipient failed."""

    def __init__(self, channel: str, reason: str):
        self.channel = channel
        self.reason = reason
        super().__init__(f"{channel}: {reason}")


class RecordNotFound(NotificationError):
    def __init__(self, collection: str, key: str):
        self.collection = collection
        self.key = key
        super().__init__(f"{collection}/{key} not found")


class InvalidRecord(NotificationError):
    """A stored record failed validation at the boundary."""

    def __init__(self, collection: str, key: Optional[str], detail: str):
        self.collection = collection
        self.key = key
        super().__init__(f"{collection}/{key or '?'} is malformed: {detail}")


# ── Lookups ───────────────────────────────────────────────────

class UnknownTemplate(NotificationError, KeyError):
    pass


class UnknownTrigger(NotificationError, KeyError):
    pass
