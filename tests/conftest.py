"""Shared fixtures for unit tests."""

from datetime import timedelta

import pytest

from article_lifecycle.application.services import ArticleLifecycleService
from tests.fakes import (
    FakeArticleRepository,
    FakeCollaboratorRepository,
    FakeVersionRepository,
    FrozenClock,
)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def versions() -> FakeVersionRepository:
    return FakeVersionRepository()


@pytest.fixture
def collaborators() -> FakeCollaboratorRepository:
    return FakeCollaboratorRepository()


@pytest.fixture
def articles(versions, collaborators) -> FakeArticleRepository:
    return FakeArticleRepository(versions, collaborators)


@pytest.fixture
def service(articles, versions, collaborators, clock) -> ArticleLifecycleService:
    return ArticleLifecycleService(
        articles=articles,
        versions=versions,
        collaborators=collaborators,
        clock=clock,
        retention_window=timedelta(days=30),
        article_limit=5,
    )
