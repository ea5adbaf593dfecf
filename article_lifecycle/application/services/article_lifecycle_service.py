"""Application service (use case) for the article lifecycle.

Every state-changing operation follows the same shape: load the article,
authorize the actor, apply the transition on the entity, then commit through
the repository's compare-and-set. Content-committing operations append to the
version store in the same transaction, after the compare-and-set succeeded.
"""

import logging
from datetime import datetime, timedelta, timezone

from article_lifecycle.application.interfaces import (
    ArticleRepository,
    Clock,
    CollaboratorRepository,
    VersionRepository,
)
from article_lifecycle.application.schemas import ArticleCreate, ContentUpdate
from article_lifecycle.domain.entities import (
    ActingUser,
    Article,
    ArticleStatus,
    ArticleVersion,
    Capability,
    Collaborator,
    CollaboratorRole,
    ContentSnapshot,
    DeletionRecord,
    VersionMetadata,
    slugify,
)
from article_lifecycle.domain.exceptions import (
    EntityNotFoundError,
    PermissionDeniedError,
    StaleStateError,
)
from article_lifecycle.domain.policy import actor_can, can_view

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_WINDOW = timedelta(days=30)


class ArticleLifecycleService:
    """Orchestrates lifecycle transitions. Depends on repository ports (DI)."""

    def __init__(
        self,
        articles: ArticleRepository,
        versions: VersionRepository,
        collaborators: CollaboratorRepository,
        clock: Clock,
        retention_window: timedelta = DEFAULT_RETENTION_WINDOW,
        article_limit: int = 5,
    ):
        self._articles = articles
        self._versions = versions
        self._collaborators = collaborators
        self._clock = clock
        self._retention_window = retention_window
        self._article_limit = article_limit

    @property
    def retention_window(self) -> timedelta:
        return self._retention_window

    def now(self) -> datetime:
        return self._clock.now()

    # ── Creation & reads ────────────────────────────────────────────

    async def create_article(self, actor: ActingUser, data: ArticleCreate) -> Article:
        """Create a draft owned by the actor, with version 1."""
        if not actor_can(actor, Capability.UNLIMITED_ARTICLES):
            owned = await self._articles.count_by_owner(actor.id)
            if owned >= self._article_limit:
                raise PermissionDeniedError(
                    actor.id,
                    "create an article",
                    f"plan '{actor.plan.value}' is limited to {self._article_limit} articles",
                )

        now = self._clock.now()
        article = Article(
            owner_id=actor.id,
            title=data.title,
            content=data.content,
            tags=tuple(data.tags),
            slug=slugify(data.slug or "") or slugify(data.title),
            excerpt=data.excerpt or None,
            created_at=now,
            updated_at=now,
        )
        article = await self._articles.create(article)
        await self._versions.append(
            article.id,
            article.snapshot(),
            created_by=actor.id,
            change_description="Initial version",
            created_at=now,
        )
        logger.info("Article %s created by %s", article.id, actor.id)
        return article

    async def get_article(self, article_id: str, actor: ActingUser | None = None) -> Article:
        article = await self._load(article_id)
        await self._require_view_access(article, actor)
        return article

    async def list_articles(
        self,
        actor: ActingUser,
        status: ArticleStatus | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Article]:
        return await self._articles.list_by_owner(actor.id, status=status, skip=skip, limit=limit)

    async def list_trash(self, actor: ActingUser) -> list[tuple[Article, DeletionRecord]]:
        """The actor's trashed articles with their purge deadlines."""
        trashed = await self._articles.list_by_owner(actor.id, status=ArticleStatus.TRASHED)
        return [(article, self.deletion_record(article)) for article in trashed]

    def deletion_record(self, article: Article) -> DeletionRecord:
        if article.deleted_at is None:
            raise ValueError(f"Article {article.id} is not trashed")
        return DeletionRecord(
            article_id=article.id,
            deleted_at=article.deleted_at,
            purge_after=article.deleted_at + self._retention_window,
        )

    # ── Versions ────────────────────────────────────────────────────

    async def list_versions(
        self, article_id: str, actor: ActingUser | None = None
    ) -> list[VersionMetadata]:
        """Version history, newest first. Empty once the article is purged."""
        article = await self._articles.get_by_id(article_id)
        if article is not None:
            await self._require_view_access(article, actor)
        return await self._versions.list(article_id)

    async def get_version(
        self, article_id: str, version_number: int, actor: ActingUser | None = None
    ) -> ArticleVersion:
        article = await self._load(article_id)
        await self._require_view_access(article, actor)
        version = await self._versions.get(article_id, version_number)
        if version is None:
            raise EntityNotFoundError("ArticleVersion", f"{article_id}#{version_number}")
        return version

    async def save_content(
        self, article_id: str, data: ContentUpdate, actor: ActingUser
    ) -> Article:
        """Commit edited content as a new version; status is unchanged."""
        article = await self._load(article_id)
        await self._require_write_access(article, actor, "edit this article")
        expected = article.revision
        return await self._commit(
            article,
            expected,
            actor,
            "save",
            snapshot=_merge(article, data),
            change_description=data.change_description,
            details=data,
        )

    async def restore_version(
        self, article_id: str, version_number: int, actor: ActingUser
    ) -> Article:
        """Append a new version cloning an old one. History is never rewritten."""
        article = await self._load(article_id)
        await self._require_write_access(article, actor, "restore a version")
        self._require_capability(actor, Capability.VERSION_HISTORY, "restore a version", article)
        version = await self._versions.get(article_id, version_number)
        if version is None:
            raise EntityNotFoundError("ArticleVersion", f"{article_id}#{version_number}")

        expected = article.revision
        return await self._commit(
            article,
            expected,
            actor,
            "restore version",
            snapshot=version.snapshot,
            change_description=f"Restored from version {version_number}",
        )

    # ── Status transitions ──────────────────────────────────────────

    async def schedule(
        self,
        article_id: str,
        publish_at: datetime,
        actor: ActingUser,
        content: ContentUpdate | None = None,
    ) -> Article:
        article = await self._load(article_id)
        self._require_owner_or_admin(article, actor, "schedule this article")
        self._require_capability(
            actor, Capability.SCHEDULED_PUBLISHING, "schedule publishing", article
        )
        expected = article.revision
        article.schedule(ensure_utc(publish_at), self._clock.now())
        return await self._commit(
            article,
            expected,
            actor,
            "schedule",
            snapshot=_merge(article, content) if content is not None else None,
            change_description=content.change_description if content is not None else None,
            details=content,
        )

    async def unschedule(self, article_id: str, actor: ActingUser) -> Article:
        article = await self._load(article_id)
        self._require_owner_or_admin(article, actor, "unschedule this article")
        expected = article.revision
        article.unschedule(self._clock.now())
        return await self._commit(article, expected, actor, "unschedule")

    async def auto_publish(self, article_id: str, actor: ActingUser) -> Article:
        """System-initiated promotion of a due scheduled article."""
        article = await self._load(article_id)
        if not actor.is_system:
            raise PermissionDeniedError(
                actor.id,
                "auto-publish",
                "reserved for the scheduled publisher",
                article.state_snapshot(),
            )
        expected = article.revision
        article.auto_publish(self._clock.now())
        return await self._commit(article, expected, actor, "auto-publish")

    async def publish(
        self,
        article_id: str,
        actor: ActingUser,
        content: ContentUpdate | None = None,
    ) -> Article:
        article = await self._load(article_id)
        self._require_owner_or_admin(article, actor, "publish this article")
        expected = article.revision
        article.publish(self._clock.now())
        return await self._commit(
            article,
            expected,
            actor,
            "publish",
            snapshot=_merge(article, content) if content is not None else None,
            change_description=content.change_description if content is not None else None,
            details=content,
        )

    async def unpublish(self, article_id: str, actor: ActingUser) -> Article:
        article = await self._load(article_id)
        self._require_owner_or_admin(article, actor, "unpublish this article")
        expected = article.revision
        article.unpublish(self._clock.now())
        return await self._commit(article, expected, actor, "unpublish")

    async def soft_delete(self, article_id: str, actor: ActingUser) -> Article:
        article = await self._load(article_id)
        self._require_owner_or_admin(article, actor, "delete this article")
        expected = article.revision
        article.soft_delete(self._clock.now())
        return await self._commit(article, expected, actor, "delete")

    async def restore(self, article_id: str, actor: ActingUser) -> Article:
        article = await self._load(article_id)
        self._require_owner_or_admin(article, actor, "restore this article")
        expected = article.revision
        article.restore(self._clock.now(), self._retention_window)
        return await self._commit(article, expected, actor, "restore")

    async def purge(self, article_id: str, actor: ActingUser) -> None:
        """Permanently erase a trashed article with its versions and collaborators."""
        article = await self._load(article_id)
        self._require_owner_or_admin(article, actor, "permanently delete this article")
        article.ensure_purgeable()
        try:
            await self._articles.purge(article.id, article.revision)
        except StaleStateError as exc:
            raise await self._stale(exc) from exc
        logger.info("Article %s purged (actor=%s)", article.id, actor.id)

    # ── Sweeper queries ─────────────────────────────────────────────

    async def list_due_for_publish(self, limit: int = 100) -> list[str]:
        return await self._articles.list_due_for_publish(self._clock.now(), limit=limit)

    async def list_due_for_purge(self, limit: int = 100) -> list[str]:
        cutoff = self._clock.now() - self._retention_window
        return await self._articles.list_due_for_purge(cutoff, limit=limit)

    # ── Collaborators ───────────────────────────────────────────────

    async def list_collaborators(
        self, article_id: str, actor: ActingUser | None = None
    ) -> list[Collaborator]:
        article = await self._load(article_id)
        await self._require_view_access(article, actor)
        return await self._collaborators.list_for_article(article_id)

    async def add_collaborator(
        self,
        article_id: str,
        user_id: str,
        role: CollaboratorRole,
        actor: ActingUser,
    ) -> Collaborator:
        article = await self._load(article_id)
        self._require_owner_or_admin(article, actor, "manage collaborators")
        self._require_capability(
            actor, Capability.COLLABORATIVE_EDITING, "add collaborators", article
        )
        if user_id == article.owner_id:
            raise PermissionDeniedError(
                actor.id, "add a collaborator", "the owner cannot be a collaborator"
            )
        collaborator = Collaborator(
            article_id=article_id,
            user_id=user_id,
            role=role,
            added_at=self._clock.now(),
        )
        saved = await self._collaborators.upsert(collaborator)
        logger.info("Article %s: %s added as %s", article_id, user_id, role.value)
        return saved

    async def remove_collaborator(
        self, article_id: str, user_id: str, actor: ActingUser
    ) -> None:
        article = await self._load(article_id)
        self._require_owner_or_admin(article, actor, "manage collaborators")
        removed = await self._collaborators.delete(article_id, user_id)
        if not removed:
            raise EntityNotFoundError("Collaborator", f"{article_id}/{user_id}")

    # ── Internals ───────────────────────────────────────────────────

    async def _load(self, article_id: str) -> Article:
        article = await self._articles.get_by_id(article_id)
        if article is None:
            raise EntityNotFoundError("Article", article_id)
        return article

    async def _commit(
        self,
        article: Article,
        expected_revision: int,
        actor: ActingUser,
        event: str,
        snapshot: ContentSnapshot | None = None,
        change_description: str | None = None,
        details: ContentUpdate | None = None,
    ) -> Article:
        version_number = None
        if snapshot is not None:
            version_number = article.apply_content(snapshot, self._clock.now())
        if details is not None:
            article.update_details(details.slug, details.excerpt)

        try:
            saved = await self._articles.save(article, expected_revision)
        except StaleStateError as exc:
            raise await self._stale(exc) from exc

        if snapshot is not None:
            version = await self._versions.append(
                saved.id,
                snapshot,
                created_by=actor.id,
                change_description=change_description,
                created_at=self._clock.now(),
            )
            if version.version_number != version_number:
                # another writer appended outside the compare-and-set
                raise StaleStateError(saved.id, expected_revision, saved.state_snapshot())

        logger.info(
            "Article %s: %s -> %s (actor=%s, version=%d)",
            saved.id,
            event,
            saved.status.value,
            actor.id,
            saved.current_version_number,
        )
        return saved

    async def _stale(self, exc: StaleStateError) -> StaleStateError:
        """Re-read the article so the caller sees the state that won the race."""
        current = await self._articles.get_by_id(exc.article_id)
        return StaleStateError(
            exc.article_id,
            exc.expected_revision,
            current.state_snapshot() if current else None,
        )

    async def _collaborator_role(
        self, article: Article, actor: ActingUser | None
    ) -> CollaboratorRole | None:
        if actor is None:
            return None
        collaborator = await self._collaborators.get(article.id, actor.id)
        return collaborator.role if collaborator else None

    async def _require_view_access(self, article: Article, actor: ActingUser | None) -> None:
        role = None
        if article.status != ArticleStatus.PUBLISHED:
            role = await self._collaborator_role(article, actor)
        if not can_view(article, actor, role):
            raise PermissionDeniedError(
                actor.id if actor else "anonymous",
                "view this article",
                f"article is {article.status.value}",
            )

    def _require_owner_or_admin(self, article: Article, actor: ActingUser, action: str) -> None:
        if not actor.is_owner_or_admin(article.owner_id):
            raise PermissionDeniedError(
                actor.id, action, "only the owner or an admin may do this", article.state_snapshot()
            )

    def _require_capability(
        self,
        actor: ActingUser,
        capability: Capability,
        action: str,
        article: Article | None = None,
    ) -> None:
        if not actor_can(actor, capability):
            raise PermissionDeniedError(
                actor.id,
                action,
                f"plan '{actor.plan.value}' does not include {capability.value}",
                article.state_snapshot() if article else None,
            )

    async def _require_write_access(self, article: Article, actor: ActingUser, action: str) -> None:
        """Owner and admins may always write; editors need collaborative editing."""
        if actor.is_owner_or_admin(article.owner_id):
            return
        collaborator = await self._collaborators.get(article.id, actor.id)
        if collaborator is None or not collaborator.can_edit:
            raise PermissionDeniedError(
                actor.id, action, "not the owner or an editor", article.state_snapshot()
            )
        if not actor_can(actor, Capability.COLLABORATIVE_EDITING):
            reason = f"plan '{actor.plan.value}' does not include collaborative_editing"
            if article.status == ArticleStatus.PUBLISHED:
                reason = f"{reason}; only the owner may edit a published article"
            raise PermissionDeniedError(actor.id, action, reason, article.state_snapshot())


def _merge(article: Article, data: ContentUpdate) -> ContentSnapshot:
    return ContentSnapshot(
        title=data.title if data.title is not None else article.title,
        content=data.content if data.content is not None else article.content,
        tags=tuple(data.tags) if data.tags is not None else tuple(article.tags),
    )


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
