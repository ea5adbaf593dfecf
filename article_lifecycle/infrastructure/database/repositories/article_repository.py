"""Concrete repository implementation backed by SQLAlchemy."""

import uuid
from datetime import datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from article_lifecycle.application.interfaces import ArticleRepository
from article_lifecycle.domain.entities import Article, ArticleStatus
from article_lifecycle.domain.exceptions import StaleStateError
from article_lifecycle.infrastructure.database.errors import storage_guard
from article_lifecycle.infrastructure.database.models import (
    ArticleModel,
    ArticleVersionModel,
    CollaboratorModel,
)


class SQLAlchemyArticleRepository(ArticleRepository):
    """Implements the ArticleRepository port using SQLAlchemy async sessions.

    Writes are compare-and-set on ``revision``: the UPDATE/DELETE only matches
    the row if nobody committed since it was read. On PostgreSQL a concurrent
    writer blocks on the row lock and then matches zero rows.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_entity(self, model: ArticleModel) -> Article:
        """Map ORM model → domain entity."""
        return Article(
            id=model.id,
            owner_id=model.owner_id,
            status=ArticleStatus(model.status),
            title=model.title,
            content=model.content,
            tags=tuple(model.tags or ()),
            slug=model.slug,
            excerpt=model.excerpt,
            scheduled_publish_at=model.scheduled_publish_at,
            published_at=model.published_at,
            deleted_at=model.deleted_at,
            current_version_number=model.current_version_number,
            revision=model.revision,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Article) -> ArticleModel:
        """Map domain entity → ORM model (for creation)."""
        return ArticleModel(
            id=entity.id,
            owner_id=entity.owner_id,
            status=entity.status.value,
            title=entity.title,
            content=entity.content,
            tags=list(entity.tags),
            slug=entity.slug,
            excerpt=entity.excerpt,
            scheduled_publish_at=entity.scheduled_publish_at,
            published_at=entity.published_at,
            deleted_at=entity.deleted_at,
            current_version_number=entity.current_version_number,
            revision=entity.revision,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    async def get_by_id(self, article_id: str) -> Article | None:
        async with storage_guard("get article"):
            result = await self._session.execute(
                select(ArticleModel)
                .where(ArticleModel.id == article_id)
                .execution_options(populate_existing=True)
            )
            model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def create(self, article: Article) -> Article:
        if not article.id:
            article.id = str(uuid.uuid4())
        model = self._to_model(article)
        async with storage_guard("create article"):
            self._session.add(model)
            await self._session.flush()
        return self._to_entity(model)

    async def save(self, article: Article, expected_revision: int) -> Article:
        stmt = (
            update(ArticleModel)
            .where(
                ArticleModel.id == article.id,
                ArticleModel.revision == expected_revision,
            )
            .values(
                status=article.status.value,
                title=article.title,
                content=article.content,
                tags=list(article.tags),
                slug=article.slug,
                excerpt=article.excerpt,
                scheduled_publish_at=article.scheduled_publish_at,
                published_at=article.published_at,
                deleted_at=article.deleted_at,
                current_version_number=article.current_version_number,
                revision=expected_revision + 1,
                updated_at=article.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        async with storage_guard("save article"):
            result = await self._session.execute(stmt)
        if result.rowcount != 1:
            raise StaleStateError(str(article.id), expected_revision)
        article.revision = expected_revision + 1
        return article

    async def purge(self, article_id: str, expected_revision: int) -> None:
        async with storage_guard("purge article"):
            result = await self._session.execute(
                delete(ArticleModel)
                .where(
                    ArticleModel.id == article_id,
                    ArticleModel.revision == expected_revision,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise StaleStateError(article_id, expected_revision)
            # explicit for backends that do not enforce ON DELETE CASCADE
            await self._session.execute(
                delete(ArticleVersionModel).where(ArticleVersionModel.article_id == article_id)
            )
            await self._session.execute(
                delete(CollaboratorModel).where(CollaboratorModel.article_id == article_id)
            )

    async def list_by_owner(
        self,
        owner_id: str,
        status: ArticleStatus | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Article]:
        stmt = select(ArticleModel).where(ArticleModel.owner_id == owner_id)
        if status is not None:
            stmt = stmt.where(ArticleModel.status == status.value)
        stmt = stmt.order_by(ArticleModel.created_at.desc()).offset(skip).limit(limit)
        async with storage_guard("list articles"):
            result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    async def count_by_owner(self, owner_id: str) -> int:
        async with storage_guard("count articles"):
            result = await self._session.execute(
                select(func.count()).select_from(ArticleModel).where(ArticleModel.owner_id == owner_id)
            )
        return int(result.scalar_one())

    async def list_due_for_publish(self, now: datetime, limit: int = 100) -> list[str]:
        async with storage_guard("list due scheduled articles"):
            result = await self._session.execute(
                select(ArticleModel.id)
                .where(
                    ArticleModel.status == ArticleStatus.SCHEDULED.value,
                    ArticleModel.scheduled_publish_at <= now,
                )
                .order_by(ArticleModel.scheduled_publish_at.asc())
                .limit(limit)
            )
        return list(result.scalars().all())

    async def list_due_for_purge(self, deleted_before: datetime, limit: int = 100) -> list[str]:
        async with storage_guard("list expired trashed articles"):
            result = await self._session.execute(
                select(ArticleModel.id)
                .where(
                    ArticleModel.status == ArticleStatus.TRASHED.value,
                    ArticleModel.deleted_at <= deleted_before,
                )
                .order_by(ArticleModel.deleted_at.asc())
                .limit(limit)
            )
        return list(result.scalars().all())
