"""Retention scheduler — permanently erases trashed articles past their window."""

from article_lifecycle.application.services.article_lifecycle_service import (
    ArticleLifecycleService,
)
from article_lifecycle.application.services.periodic_sweeper import PeriodicSweeper
from article_lifecycle.infrastructure.logging.colored_logger import SweepStage


class RetentionScheduler(PeriodicSweeper):
    """Purges every trashed article whose retention window has elapsed."""

    log_name = "article_lifecycle.sweepers.retention"
    stage = SweepStage.PURGE

    async def _find_candidates(self, service: ArticleLifecycleService, limit: int) -> list[str]:
        return await service.list_due_for_purge(limit=limit)

    async def _apply(self, service: ArticleLifecycleService, article_id: str) -> None:
        await service.purge(article_id, self._actor)
