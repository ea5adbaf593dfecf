"""Unit tests for the ScheduledPublisher and RetentionScheduler sweepers."""

import asyncio
from datetime import datetime, timedelta

import pytest

from article_lifecycle.application.schemas import ArticleCreate
from article_lifecycle.application.services import (
    ArticleLifecycleService,
    RetentionScheduler,
    ScheduledPublisher,
)
from article_lifecycle.domain.entities import Article, ArticleStatus
from article_lifecycle.domain.exceptions import StorageUnavailableError
from tests.fakes import (
    FakeArticleRepository,
    PRO_USER,
    scope_for,
)


class ScriptedArticleRepository(FakeArticleRepository):
    """Fake whose reads can be made slow, flaky or broken per article."""

    def __init__(self, versions, collaborators):
        super().__init__(versions, collaborators)
        self.slow: set[str] = set()
        self.broken: set[str] = set()
        self.outages: dict[str, int] = {}
        self.ghosts: list[str] = []

    async def get_by_id(self, article_id: str) -> Article | None:
        if article_id in self.slow:
            await asyncio.sleep(10)
        if article_id in self.broken:
            raise RuntimeError("corrupt row")
        if self.outages.get(article_id, 0) > 0:
            self.outages[article_id] -= 1
            raise StorageUnavailableError("get article")
        return await super().get_by_id(article_id)

    async def list_due_for_publish(self, now: datetime, limit: int = 100) -> list[str]:
        return self.ghosts + await super().list_due_for_publish(now, limit)


@pytest.fixture
def articles(versions, collaborators) -> ScriptedArticleRepository:
    return ScriptedArticleRepository(versions, collaborators)


def _publisher(service: ArticleLifecycleService, **overrides) -> ScheduledPublisher:
    options = dict(
        interval_seconds=60,
        item_timeout_seconds=1,
        max_retries=3,
        retry_base_delay_seconds=0,
    )
    options.update(overrides)
    return ScheduledPublisher(scope_for(service), **options)


async def _scheduled(service, clock, minutes: int = 1) -> Article:
    article = await service.create_article(PRO_USER, ArticleCreate(title="Soon"))
    return await service.schedule(article.id, clock.now() + timedelta(minutes=minutes), PRO_USER)


@pytest.mark.asyncio
async def test_publisher_promotes_due_articles_only(service, clock):
    due = await _scheduled(service, clock, minutes=1)
    later = await _scheduled(service, clock, minutes=10)
    clock.advance(timedelta(minutes=1))

    report = await _publisher(service).run_once()

    assert report.candidates == 1
    assert report.succeeded == 1
    published = await service.get_article(due.id, PRO_USER)
    assert published.status == ArticleStatus.PUBLISHED
    assert published.published_at == clock.now()
    assert published.scheduled_publish_at is None
    assert (await service.get_article(later.id, PRO_USER)).status == ArticleStatus.SCHEDULED


@pytest.mark.asyncio
async def test_publisher_with_nothing_due(service, clock):
    await _scheduled(service, clock, minutes=5)
    report = await _publisher(service).run_once()
    assert report.candidates == 0
    assert report.succeeded == 0


@pytest.mark.asyncio
async def test_one_failing_article_does_not_abort_the_sweep(service, articles, clock):
    broken = await _scheduled(service, clock)
    healthy = await _scheduled(service, clock)
    articles.broken.add(broken.id)
    clock.advance(timedelta(minutes=1))

    report = await _publisher(service).run_once()

    assert report.failed == 1
    assert report.succeeded == 1
    assert (await service.get_article(healthy.id, PRO_USER)).status == ArticleStatus.PUBLISHED


@pytest.mark.asyncio
async def test_timed_out_article_is_deferred(service, articles, clock):
    slow = await _scheduled(service, clock)
    fast = await _scheduled(service, clock)
    articles.slow.add(slow.id)
    clock.advance(timedelta(minutes=1))

    report = await _publisher(service, item_timeout_seconds=0.05).run_once()

    assert report.timed_out == 1
    assert report.succeeded == 1
    assert (await service.get_article(fast.id, PRO_USER)).status == ArticleStatus.PUBLISHED

    # picked up again on the next sweep
    articles.slow.clear()
    assert (await _publisher(service).run_once()).succeeded == 1


@pytest.mark.asyncio
async def test_storage_outage_is_retried(service, articles, clock):
    article = await _scheduled(service, clock)
    articles.outages[article.id] = 2
    clock.advance(timedelta(minutes=1))

    report = await _publisher(service).run_once()

    assert report.succeeded == 1
    assert articles.outages[article.id] == 0


@pytest.mark.asyncio
async def test_storage_outage_gives_up_after_max_retries(service, articles, clock):
    article = await _scheduled(service, clock)
    articles.outages[article.id] = 10
    clock.advance(timedelta(minutes=1))

    report = await _publisher(service, max_retries=2).run_once()

    assert report.failed == 1
    # first attempt plus two retries
    assert articles.outages[article.id] == 7


@pytest.mark.asyncio
async def test_vanished_candidate_is_skipped(service, articles, clock):
    await _scheduled(service, clock)
    articles.ghosts.append("gone")
    clock.advance(timedelta(minutes=1))

    report = await _publisher(service).run_once()

    assert report.candidates == 2
    assert report.skipped == 1
    assert report.succeeded == 1


@pytest.mark.asyncio
async def test_retention_scheduler_waits_for_window(service, clock):
    article = await service.create_article(PRO_USER, ArticleCreate(title="Old"))
    await service.soft_delete(article.id, PRO_USER)
    scheduler = RetentionScheduler(scope_for(service), interval_seconds=300)

    clock.advance(timedelta(days=29, hours=23))
    assert (await scheduler.run_once()).candidates == 0

    clock.advance(timedelta(hours=1))
    report = await scheduler.run_once()

    assert report.succeeded == 1
    assert await service.list_versions(article.id) == []


@pytest.mark.asyncio
async def test_retention_scheduler_ignores_restored_articles(service, clock):
    article = await service.create_article(PRO_USER, ArticleCreate(title="Back"))
    await service.soft_delete(article.id, PRO_USER)
    await service.restore(article.id, PRO_USER)
    clock.advance(timedelta(days=31))

    report = await RetentionScheduler(scope_for(service), interval_seconds=300).run_once()

    assert report.candidates == 0
    assert (await service.get_article(article.id, PRO_USER)).status == ArticleStatus.DRAFT


@pytest.mark.asyncio
async def test_start_and_stop(service, clock):
    article = await _scheduled(service, clock)
    clock.advance(timedelta(minutes=1))
    publisher = _publisher(service, interval_seconds=0.01)

    await publisher.start()
    for _ in range(100):
        if (await service.get_article(article.id, PRO_USER)).status == ArticleStatus.PUBLISHED:
            break
        await asyncio.sleep(0.01)
    await publisher.stop()

    assert (await service.get_article(article.id, PRO_USER)).status == ArticleStatus.PUBLISHED


@pytest.mark.asyncio
async def test_failed_article_sits_out_so_newer_ones_run(service, articles, clock):
    broken = await _scheduled(service, clock)
    healthy = await _scheduled(service, clock)
    articles.broken.add(broken.id)
    clock.advance(timedelta(minutes=1))
    publisher = _publisher(service, batch_size=1, failure_cooldown_sweeps=1)

    first = await publisher.run_once()
    second = await publisher.run_once()
    third = await publisher.run_once()

    assert (first.candidates, first.failed) == (1, 1)
    assert (second.benched, second.succeeded) == (1, 1)
    assert (await service.get_article(healthy.id, PRO_USER)).status == ArticleStatus.PUBLISHED
    # back in rotation once the cooldown is over
    assert (third.candidates, third.failed, third.benched) == (1, 1, 0)
