"""Integration tests for the SQLAlchemy repositories against a temporary SQLite file."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from article_lifecycle.application.schemas import ArticleCreate, ContentUpdate
from article_lifecycle.application.services import ArticleLifecycleService
from article_lifecycle.domain.entities import (
    Article,
    ArticleStatus,
    Collaborator,
    CollaboratorRole,
    ContentSnapshot,
)
from article_lifecycle.domain.exceptions import (
    EntityNotFoundError,
    StaleStateError,
    StorageUnavailableError,
)
from article_lifecycle.infrastructure.database import Base
from article_lifecycle.infrastructure.database.repositories import (
    SQLAlchemyArticleRepository,
    SQLAlchemyCollaboratorRepository,
    SQLAlchemyVersionRepository,
)
from article_lifecycle.infrastructure.database.session import build_engine, build_session_factory
from tests.fakes import PRO_USER, T0, FrozenClock


@asynccontextmanager
async def _database(tmp_path) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = build_engine(f"sqlite:///{tmp_path / 'lifecycle.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield build_session_factory(engine)
    finally:
        await engine.dispose()


def _service(session: AsyncSession, clock: FrozenClock) -> ArticleLifecycleService:
    return ArticleLifecycleService(
        articles=SQLAlchemyArticleRepository(session),
        versions=SQLAlchemyVersionRepository(session),
        collaborators=SQLAlchemyCollaboratorRepository(session),
        clock=clock,
        retention_window=timedelta(days=30),
    )


def _article(**overrides) -> Article:
    fields = dict(
        owner_id="bob",
        title="Title",
        content="Body",
        tags=("a", "b"),
        created_at=T0,
        updated_at=T0,
    )
    fields.update(overrides)
    return Article(**fields)


@pytest.mark.asyncio
async def test_create_and_get_round_trip(tmp_path):
    async with _database(tmp_path) as factory:
        async with factory() as session:
            created = await SQLAlchemyArticleRepository(session).create(
                _article(slug="title", excerpt="Short")
            )
            await session.commit()

        async with factory() as session:
            loaded = await SQLAlchemyArticleRepository(session).get_by_id(created.id)

    assert loaded is not None
    assert loaded.status == ArticleStatus.DRAFT
    assert loaded.tags == ("a", "b")
    assert loaded.slug == "title"
    assert loaded.excerpt == "Short"
    assert loaded.created_at == T0
    assert loaded.created_at.tzinfo is not None


@pytest.mark.asyncio
async def test_save_is_compare_and_set(tmp_path):
    async with _database(tmp_path) as factory:
        async with factory() as session:
            created = await SQLAlchemyArticleRepository(session).create(_article())
            await session.commit()

        async with factory() as first, factory() as second:
            a = await SQLAlchemyArticleRepository(first).get_by_id(created.id)
            b = await SQLAlchemyArticleRepository(second).get_by_id(created.id)
            await second.rollback()

            a.publish(T0)
            saved = await SQLAlchemyArticleRepository(first).save(a, expected_revision=0)
            await first.commit()
            assert saved.revision == 1

            b.soft_delete(T0)
            with pytest.raises(StaleStateError):
                await SQLAlchemyArticleRepository(second).save(b, expected_revision=0)

        async with factory() as session:
            current = await SQLAlchemyArticleRepository(session).get_by_id(created.id)

    assert current.status == ArticleStatus.PUBLISHED
    assert current.revision == 1


@pytest.mark.asyncio
async def test_versions_are_sequential_and_listed_newest_first(tmp_path):
    async with _database(tmp_path) as factory:
        async with factory() as session:
            article = await SQLAlchemyArticleRepository(session).create(_article())
            versions = SQLAlchemyVersionRepository(session)
            for body in ("one", "two", "three"):
                await versions.append(article.id, ContentSnapshot("T", body, ("x",)), created_by="bob")
            await session.commit()

        async with factory() as session:
            versions = SQLAlchemyVersionRepository(session)
            listed = await versions.list(article.id)
            second = await versions.get(article.id, 2)
            missing = await versions.get(article.id, 9)

    assert [v.version_number for v in listed] == [3, 2, 1]
    assert second.content == "two"
    assert second.tags == ("x",)
    assert missing is None


@pytest.mark.asyncio
async def test_purge_removes_versions_and_collaborators(tmp_path):
    async with _database(tmp_path) as factory:
        async with factory() as session:
            articles = SQLAlchemyArticleRepository(session)
            article = await articles.create(_article())
            await SQLAlchemyVersionRepository(session).append(
                article.id, article.snapshot(), created_by="bob"
            )
            await SQLAlchemyCollaboratorRepository(session).upsert(
                Collaborator(article_id=article.id, user_id="carol", added_at=T0)
            )
            await session.commit()

        async with factory() as session:
            articles = SQLAlchemyArticleRepository(session)
            with pytest.raises(StaleStateError):
                await articles.purge(article.id, expected_revision=5)
            await articles.purge(article.id, expected_revision=0)
            await session.commit()

        async with factory() as session:
            assert await SQLAlchemyArticleRepository(session).get_by_id(article.id) is None
            assert await SQLAlchemyVersionRepository(session).list(article.id) == []
            assert await SQLAlchemyCollaboratorRepository(session).list_for_article(article.id) == []


@pytest.mark.asyncio
async def test_due_queries_compare_aware_timestamps(tmp_path):
    async with _database(tmp_path) as factory:
        async with factory() as session:
            articles = SQLAlchemyArticleRepository(session)
            due = await articles.create(
                _article(status=ArticleStatus.SCHEDULED, scheduled_publish_at=T0)
            )
            await articles.create(
                _article(
                    status=ArticleStatus.SCHEDULED,
                    scheduled_publish_at=T0 + timedelta(hours=1),
                )
            )
            expired = await articles.create(
                _article(status=ArticleStatus.TRASHED, deleted_at=T0 - timedelta(days=31))
            )
            await articles.create(_article(status=ArticleStatus.TRASHED, deleted_at=T0))
            await session.commit()

            assert await articles.list_due_for_publish(T0) == [due.id]
            assert await articles.list_due_for_purge(T0 - timedelta(days=30)) == [expired.id]


@pytest.mark.asyncio
async def test_collaborator_upsert_and_delete(tmp_path):
    async with _database(tmp_path) as factory:
        async with factory() as session:
            article = await SQLAlchemyArticleRepository(session).create(_article())
            repo = SQLAlchemyCollaboratorRepository(session)

            await repo.upsert(
                Collaborator(article.id, "carol", CollaboratorRole.VIEWER, added_at=T0)
            )
            updated = await repo.upsert(
                Collaborator(article.id, "carol", CollaboratorRole.EDITOR, added_at=T0)
            )
            assert updated.role == CollaboratorRole.EDITOR
            assert len(await repo.list_for_article(article.id)) == 1

            assert await repo.delete(article.id, "carol") is True
            assert await repo.delete(article.id, "carol") is False
            assert await repo.get(article.id, "carol") is None


@pytest.mark.asyncio
async def test_service_lifecycle_over_sqlite(tmp_path):
    clock = FrozenClock()
    async with _database(tmp_path) as factory:
        async with factory() as session:
            service = _service(session, clock)
            article = await service.create_article(PRO_USER, ArticleCreate(title="Real", content="v1"))
            await service.save_content(article.id, ContentUpdate(content="v2"), PRO_USER)
            await service.restore_version(article.id, 1, PRO_USER)
            await service.soft_delete(article.id, PRO_USER)
            await session.commit()

        clock.advance(timedelta(days=30))
        async with factory() as session:
            service = _service(session, clock)
            assert await service.list_due_for_purge() == [article.id]
            await service.purge(article.id, PRO_USER)
            await session.commit()

        async with factory() as session:
            service = _service(session, clock)
            with pytest.raises(EntityNotFoundError):
                await service.get_article(article.id, PRO_USER)
            assert await service.list_versions(article.id, PRO_USER) == []


@pytest.mark.asyncio
async def test_unreachable_database_is_storage_unavailable(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'missing' / 'nowhere.db'}")
    try:
        async with build_session_factory(engine)() as session:
            with pytest.raises(StorageUnavailableError) as exc_info:
                await SQLAlchemyArticleRepository(session).get_by_id("anything")
    finally:
        await engine.dispose()

    assert exc_info.value.operation == "get article"
