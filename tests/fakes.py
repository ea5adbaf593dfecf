"""In-memory fakes of the repository ports and the clock."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from article_lifecycle.application.interfaces import (
    ArticleRepository,
    Clock,
    CollaboratorRepository,
    VersionRepository,
)
from article_lifecycle.application.services import ArticleLifecycleService
from article_lifecycle.domain.entities import (
    ActingUser,
    Article,
    ArticleStatus,
    ArticleVersion,
    Collaborator,
    ContentSnapshot,
    Plan,
    VersionMetadata,
)
from article_lifecycle.domain.exceptions import StaleStateError

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class FrozenClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = T0):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, delta: timedelta) -> None:
        self.current += delta


class FakeVersionRepository(VersionRepository):
    """In-memory append-only version store."""

    def __init__(self):
        self._versions: dict[str, list[ArticleVersion]] = {}

    async def append(
        self,
        article_id: str,
        snapshot: ContentSnapshot,
        created_by: str,
        change_description: str | None = None,
        created_at: datetime | None = None,
    ) -> ArticleVersion:
        history = self._versions.setdefault(article_id, [])
        version = ArticleVersion(
            article_id=article_id,
            version_number=len(history) + 1,
            snapshot=snapshot,
            created_at=created_at or T0,
            created_by=created_by,
            change_description=change_description,
        )
        history.append(version)
        return version

    async def get(self, article_id: str, version_number: int) -> ArticleVersion | None:
        for version in self._versions.get(article_id, []):
            if version.version_number == version_number:
                return version
        return None

    async def list(self, article_id: str) -> list[VersionMetadata]:
        return [v.metadata() for v in reversed(self._versions.get(article_id, []))]

    def drop(self, article_id: str) -> None:
        self._versions.pop(article_id, None)


class FakeCollaboratorRepository(CollaboratorRepository):

    def __init__(self):
        self._rows: dict[tuple[str, str], Collaborator] = {}

    async def get(self, article_id: str, user_id: str) -> Collaborator | None:
        return self._rows.get((article_id, user_id))

    async def list_for_article(self, article_id: str) -> list[Collaborator]:
        return [c for (aid, _), c in self._rows.items() if aid == article_id]

    async def upsert(self, collaborator: Collaborator) -> Collaborator:
        key = (collaborator.article_id, collaborator.user_id)
        existing = self._rows.get(key)
        if existing is not None:
            existing.role = collaborator.role
            return existing
        self._rows[key] = collaborator
        return collaborator

    async def delete(self, article_id: str, user_id: str) -> bool:
        return self._rows.pop((article_id, user_id), None) is not None

    def drop(self, article_id: str) -> None:
        for key in [k for k in self._rows if k[0] == article_id]:
            del self._rows[key]


class FakeArticleRepository(ArticleRepository):
    """In-memory fake with compare-and-set semantics.

    Reads hand out copies and yield to the event loop afterwards, so two
    concurrent callers can both observe the same revision.
    """

    def __init__(
        self,
        versions: FakeVersionRepository,
        collaborators: FakeCollaboratorRepository,
    ):
        self._articles: dict[str, Article] = {}
        self._next_id = 1
        self._versions = versions
        self._collaborators = collaborators

    async def get_by_id(self, article_id: str) -> Article | None:
        stored = self._articles.get(article_id)
        article = replace(stored) if stored else None
        await asyncio.sleep(0)
        return article

    async def create(self, article: Article) -> Article:
        article.id = f"art-{self._next_id}"
        self._next_id += 1
        self._articles[article.id] = replace(article)
        return article

    async def save(self, article: Article, expected_revision: int) -> Article:
        stored = self._articles.get(article.id)
        if stored is None or stored.revision != expected_revision:
            raise StaleStateError(article.id, expected_revision)
        article.revision = expected_revision + 1
        self._articles[article.id] = replace(article)
        return article

    async def purge(self, article_id: str, expected_revision: int) -> None:
        stored = self._articles.get(article_id)
        if stored is None or stored.revision != expected_revision:
            raise StaleStateError(article_id, expected_revision)
        del self._articles[article_id]
        self._versions.drop(article_id)
        self._collaborators.drop(article_id)

    async def list_by_owner(
        self,
        owner_id: str,
        status: ArticleStatus | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Article]:
        rows = [
            replace(a)
            for a in self._articles.values()
            if a.owner_id == owner_id and (status is None or a.status == status)
        ]
        return rows[skip : skip + limit]

    async def count_by_owner(self, owner_id: str) -> int:
        return sum(1 for a in self._articles.values() if a.owner_id == owner_id)

    async def list_due_for_publish(self, now: datetime, limit: int = 100) -> list[str]:
        return [
            a.id
            for a in self._articles.values()
            if a.status == ArticleStatus.SCHEDULED and a.scheduled_publish_at <= now
        ][:limit]

    async def list_due_for_purge(self, deleted_before: datetime, limit: int = 100) -> list[str]:
        return [
            a.id
            for a in self._articles.values()
            if a.status == ArticleStatus.TRASHED and a.deleted_at <= deleted_before
        ][:limit]


# ── Actors ──────────────────────────────────────────────────────────

FREE_USER = ActingUser(id="alice", plan=Plan.FREE)
PRO_USER = ActingUser(id="bob", plan=Plan.PRO)
PRO_EDITOR = ActingUser(id="carol", plan=Plan.PRO)
FREE_EDITOR = ActingUser(id="dave", plan=Plan.FREE)
ADMIN = ActingUser(id="root", plan=Plan.FREE, is_admin=True)


def scope_for(service: ArticleLifecycleService):
    """Sweeper service scope that always yields the same service."""

    @asynccontextmanager
    async def scope() -> AsyncIterator[ArticleLifecycleService]:
        yield service

    return scope
