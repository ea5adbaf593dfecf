from .article_lifecycle_service import ArticleLifecycleService
from .periodic_sweeper import PeriodicSweeper, ServiceScope, SweepReport
from .scheduled_publisher import ScheduledPublisher
from .retention_scheduler import RetentionScheduler

__all__ = [
    "ArticleLifecycleService",
    "PeriodicSweeper",
    "ServiceScope",
    "SweepReport",
    "ScheduledPublisher",
    "RetentionScheduler",
]
