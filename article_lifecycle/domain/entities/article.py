"""Domain entities — pure Python business objects, no framework dependencies."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from article_lifecycle.domain.entities.article_version import ContentSnapshot
from article_lifecycle.domain.exceptions import InvalidTransitionError, RetentionExpiredError


class ArticleStatus(str, Enum):
    """Lifecycle states of an article. ``draft`` is the only initial state."""

    DRAFT = "draft"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"
    TRASHED = "trashed"


@dataclass
class Article:
    """Core domain entity representing an authored article.

    The transition methods below are the state machine: each one validates the
    current status, applies the timestamp effects and bumps ``updated_at``.
    Persisting the result is the repository's job (compare-and-set on
    ``revision``).
    """

    owner_id: str
    title: str
    content: str
    tags: tuple[str, ...] = field(default_factory=tuple)
    slug: str = ""
    excerpt: str | None = None
    id: str | None = None
    status: ArticleStatus = ArticleStatus.DRAFT
    scheduled_publish_at: datetime | None = None
    published_at: datetime | None = None
    deleted_at: datetime | None = None
    current_version_number: int = 1
    revision: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # ── Content ─────────────────────────────────────────────────────

    def update_details(self, slug: str | None = None, excerpt: str | None = None) -> None:
        """Replace the unversioned listing fields. Empty slugs are re-derived from the title."""
        if slug is not None:
            self.slug = slugify(slug) or slugify(self.title)
        if excerpt is not None:
            self.excerpt = excerpt or None

    def snapshot(self) -> ContentSnapshot:
        return ContentSnapshot(title=self.title, content=self.content, tags=tuple(self.tags))

    def apply_content(self, snapshot: ContentSnapshot, now: datetime) -> int:
        """Copy content fields from a snapshot and claim the next version number."""
        self.title = snapshot.title
        self.content = snapshot.content
        self.tags = tuple(snapshot.tags)
        self.current_version_number += 1
        self.updated_at = now
        return self.current_version_number

    # ── Transitions ─────────────────────────────────────────────────

    def schedule(self, at: datetime, now: datetime) -> None:
        self._require("schedule", ArticleStatus.DRAFT)
        if at <= now:
            raise InvalidTransitionError(
                self.status.value,
                "schedule",
                reason=f"publish time {at.isoformat()} is not in the future",
                snapshot=self.state_snapshot(),
            )
        self.status = ArticleStatus.SCHEDULED
        self.scheduled_publish_at = at
        self.updated_at = now

    def unschedule(self, now: datetime) -> None:
        self._require("unschedule", ArticleStatus.SCHEDULED)
        self.status = ArticleStatus.DRAFT
        self.scheduled_publish_at = None
        self.updated_at = now

    def auto_publish(self, now: datetime) -> None:
        self._require("auto-publish", ArticleStatus.SCHEDULED)
        if self.scheduled_publish_at is not None and now < self.scheduled_publish_at:
            raise InvalidTransitionError(
                self.status.value,
                "auto-publish",
                reason="scheduled publish time has not arrived",
                snapshot=self.state_snapshot(),
            )
        self.status = ArticleStatus.PUBLISHED
        self.scheduled_publish_at = None
        if self.published_at is None:
            self.published_at = now
        self.updated_at = now

    def publish(self, now: datetime) -> None:
        self._require("publish", ArticleStatus.DRAFT)
        self.status = ArticleStatus.PUBLISHED
        if self.published_at is None:
            self.published_at = now
        self.updated_at = now

    def unpublish(self, now: datetime) -> None:
        # published_at is kept for audit
        self._require("unpublish", ArticleStatus.PUBLISHED)
        self.status = ArticleStatus.DRAFT
        self.updated_at = now

    def soft_delete(self, now: datetime) -> None:
        self._require(
            "delete",
            ArticleStatus.DRAFT,
            ArticleStatus.SCHEDULED,
            ArticleStatus.PUBLISHED,
        )
        self.status = ArticleStatus.TRASHED
        self.deleted_at = now
        self.scheduled_publish_at = None
        self.updated_at = now

    def restore(self, now: datetime, retention_window: timedelta) -> None:
        """Bring a trashed article back to draft while its window is open.

        ``deleted_at + retention_window`` is the last instant a restore succeeds.
        """
        self._require("restore", ArticleStatus.TRASHED)
        purge_after = self.purge_after(retention_window)
        if purge_after is not None and now > purge_after:
            raise RetentionExpiredError(
                article_id=str(self.id),
                purge_after=purge_after,
                now=now,
                snapshot=self.state_snapshot(),
            )
        self.status = ArticleStatus.DRAFT
        self.deleted_at = None
        self.updated_at = now

    def ensure_purgeable(self) -> None:
        self._require("purge", ArticleStatus.TRASHED)

    # ── Retention ───────────────────────────────────────────────────

    def purge_after(self, retention_window: timedelta) -> datetime | None:
        if self.deleted_at is None:
            return None
        return self.deleted_at + retention_window

    def is_purge_due(self, now: datetime, retention_window: timedelta) -> bool:
        purge_after = self.purge_after(retention_window)
        return (
            self.status == ArticleStatus.TRASHED
            and purge_after is not None
            and purge_after <= now
        )

    # ── Helpers ─────────────────────────────────────────────────────

    def state_snapshot(self) -> dict[str, Any]:
        """Status and timestamps, attached to errors for the caller."""
        return {
            "id": self.id,
            "status": self.status.value,
            "scheduled_publish_at": _iso(self.scheduled_publish_at),
            "published_at": _iso(self.published_at),
            "deleted_at": _iso(self.deleted_at),
            "current_version_number": self.current_version_number,
            "revision": self.revision,
        }

    def _require(self, event: str, *allowed: ArticleStatus) -> None:
        if self.status not in allowed:
            raise InvalidTransitionError(
                self.status.value,
                event,
                snapshot=self.state_snapshot(),
            )


@dataclass(frozen=True)
class DeletionRecord:
    """Retention view of a trashed article."""

    article_id: str
    deleted_at: datetime
    purge_after: datetime

    def remaining(self, now: datetime) -> timedelta:
        return max(self.purge_after - now, timedelta(0))


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def slugify(text: str) -> str:
    """Lowercase ASCII words joined by hyphens: ``"Hello, World!"`` -> ``"hello-world"``."""
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")[:255]
