"""SQLAlchemy implementation of the append-only VersionRepository."""

from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from article_lifecycle.application.interfaces import VersionRepository
from article_lifecycle.domain.entities import ArticleVersion, ContentSnapshot, VersionMetadata
from article_lifecycle.domain.exceptions import StaleStateError
from article_lifecycle.infrastructure.database.errors import storage_guard
from article_lifecycle.infrastructure.database.models import ArticleVersionModel


class SQLAlchemyVersionRepository(VersionRepository):
    """Concrete version store. Only ever INSERTs and SELECTs."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def append(
        self,
        article_id: str,
        snapshot: ContentSnapshot,
        created_by: str,
        change_description: str | None = None,
        created_at: datetime | None = None,
    ) -> ArticleVersion:
        async with storage_guard("append version"):
            result = await self._session.execute(
                select(func.coalesce(func.max(ArticleVersionModel.version_number), 0))
                .where(ArticleVersionModel.article_id == article_id)
            )
            next_number = int(result.scalar_one()) + 1

            model = ArticleVersionModel(
                article_id=article_id,
                version_number=next_number,
                title=snapshot.title,
                content=snapshot.content,
                tags=list(snapshot.tags),
                created_by=created_by,
                change_description=change_description,
                created_at=created_at or datetime.now(timezone.utc),
            )
            self._session.add(model)
            try:
                await self._session.flush()
            except IntegrityError as exc:
                # (article_id, version_number) is unique: a concurrent append won
                raise StaleStateError(article_id, next_number - 1) from exc
        return self._to_domain(model)

    async def get(self, article_id: str, version_number: int) -> ArticleVersion | None:
        async with storage_guard("get version"):
            result = await self._session.execute(
                select(ArticleVersionModel).where(
                    ArticleVersionModel.article_id == article_id,
                    ArticleVersionModel.version_number == version_number,
                )
            )
            model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    async def list(self, article_id: str) -> list[VersionMetadata]:
        async with storage_guard("list versions"):
            result = await self._session.execute(
                select(ArticleVersionModel)
                .where(ArticleVersionModel.article_id == article_id)
                .order_by(ArticleVersionModel.version_number.desc())
            )
        return [self._to_domain(m).metadata() for m in result.scalars().all()]

    # ── Mapping ──────────────────────────────────────────────────────

    @staticmethod
    def _to_domain(model: ArticleVersionModel) -> ArticleVersion:
        return ArticleVersion(
            article_id=model.article_id,
            version_number=model.version_number,
            snapshot=ContentSnapshot(
                title=model.title,
                content=model.content,
                tags=tuple(model.tags or ()),
            ),
            created_at=model.created_at,
            created_by=model.created_by,
            change_description=model.change_description,
        )
