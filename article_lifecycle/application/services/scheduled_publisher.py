"""Scheduled publisher — promotes due scheduled articles to published."""

from article_lifecycle.application.services.article_lifecycle_service import (
    ArticleLifecycleService,
)
from article_lifecycle.application.services.periodic_sweeper import PeriodicSweeper
from article_lifecycle.infrastructure.logging.colored_logger import SweepStage


class ScheduledPublisher(PeriodicSweeper):
    """Publishes every scheduled article whose publish time has arrived.

    An article goes live at most ``interval_seconds`` (plus the time of one
    sweep) after its scheduled time.
    """

    log_name = "article_lifecycle.sweepers.publisher"
    stage = SweepStage.PUBLISH

    async def _find_candidates(self, service: ArticleLifecycleService, limit: int) -> list[str]:
        return await service.list_due_for_publish(limit=limit)

    async def _apply(self, service: ArticleLifecycleService, article_id: str) -> None:
        await service.auto_publish(article_id, self._actor)
