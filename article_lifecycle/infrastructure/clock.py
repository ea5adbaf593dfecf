"""System clock adapter."""

from datetime import datetime, timezone

from article_lifecycle.application.interfaces import Clock


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
