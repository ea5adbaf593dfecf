"""Domain-specific exceptions — framework-independent.

Every failure of a lifecycle operation is a ``LifecycleError`` subclass with a
stable ``kind`` string, so callers can explain *why* an action failed instead
of receiving a bare boolean.
"""

from datetime import datetime, timedelta
from typing import Any


class LifecycleError(Exception):
    """Base class for all typed lifecycle failures."""

    kind: str = "lifecycle_error"

    def __init__(self, message: str, snapshot: dict[str, Any] | None = None):
        self.message = message
        self.snapshot = snapshot
        super().__init__(message)


class EntityNotFoundError(LifecycleError):
    """Raised when a requested entity does not exist."""

    kind = "not_found"

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class InvalidTransitionError(LifecycleError):
    """Raised when an event is not legal from the article's current status."""

    kind = "invalid_transition"

    def __init__(
        self,
        current_status: str,
        event: str,
        reason: str | None = None,
        snapshot: dict[str, Any] | None = None,
    ):
        self.current_status = current_status
        self.event = event
        self.reason = reason
        message = f"Cannot {event} an article in status '{current_status}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, snapshot)


class PermissionDeniedError(LifecycleError):
    """Raised when ownership or a plan capability check fails."""

    kind = "permission_denied"

    def __init__(
        self,
        actor_id: str,
        action: str,
        reason: str,
        snapshot: dict[str, Any] | None = None,
    ):
        self.actor_id = actor_id
        self.action = action
        self.reason = reason
        super().__init__(f"User '{actor_id}' may not {action}: {reason}", snapshot)


class RetentionExpiredError(LifecycleError):
    """Raised when restoring a trashed article after its retention window."""

    kind = "retention_expired"

    def __init__(
        self,
        article_id: str,
        purge_after: datetime,
        now: datetime,
        snapshot: dict[str, Any] | None = None,
    ):
        self.article_id = article_id
        self.purge_after = purge_after
        self.expired_for: timedelta = now - purge_after
        super().__init__(
            f"Cannot restore article '{article_id}': retention window expired "
            f"{_humanize(self.expired_for)} ago",
            snapshot,
        )


class StaleStateError(LifecycleError):
    """Raised when an optimistic-concurrency commit lost a race.

    Never retried inside the core: the caller must re-read the article and
    decide again, because the original precondition may no longer hold.
    """

    kind = "stale_state"

    def __init__(
        self,
        article_id: str,
        expected_revision: int,
        snapshot: dict[str, Any] | None = None,
    ):
        self.article_id = article_id
        self.expected_revision = expected_revision
        super().__init__(
            f"Article '{article_id}' changed since revision {expected_revision}; "
            "re-read and retry",
            snapshot,
        )


class StorageUnavailableError(LifecycleError):
    """Raised on transient infrastructure failure. Safe to retry."""

    kind = "storage_unavailable"

    def __init__(self, operation: str, cause: Exception | None = None):
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Storage unavailable during {operation}{detail}")


def _humanize(delta: timedelta) -> str:
    if delta.days >= 1:
        return f"{delta.days} day{'s' if delta.days != 1 else ''}"
    hours = int(delta.total_seconds() // 3600)
    if hours >= 1:
        return f"{hours} hour{'s' if hours != 1 else ''}"
    minutes = int(delta.total_seconds() // 60)
    if minutes >= 1:
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    seconds = max(int(delta.total_seconds()), 0)
    return f"{seconds} second{'s' if seconds != 1 else ''}"
