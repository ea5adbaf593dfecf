"""Periodic sweeper — asyncio daemon base for system-initiated transitions."""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass

from article_lifecycle.application.services.article_lifecycle_service import (
    ArticleLifecycleService,
)
from article_lifecycle.domain.entities import ActingUser
from article_lifecycle.domain.exceptions import (
    EntityNotFoundError,
    InvalidTransitionError,
    StaleStateError,
    StorageUnavailableError,
)
from article_lifecycle.infrastructure.logging.colored_logger import SweepLogger, SweepStage

logger = logging.getLogger(__name__)

# Opens a service bound to its own transaction; commits on clean exit.
ServiceScope = Callable[[], AbstractAsyncContextManager[ArticleLifecycleService]]


@dataclass
class SweepReport:
    """Outcome counts of one sweep."""

    candidates: int = 0
    succeeded: int = 0
    skipped: int = 0
    timed_out: int = 0
    failed: int = 0
    benched: int = 0


class PeriodicSweeper(ABC):
    """Asyncio daemon that periodically finds due articles and transitions them.

    Runs as an asyncio.Task inside FastAPI's lifespan. Each article is handled
    in its own service scope (its own session and transaction) under a
    per-article timeout, so one slow or failing record never stalls the sweep.
    Storage outages are retried with exponential backoff; timeouts and lost
    races wait for the next sweep. An article that fails outright sits out the
    next ``failure_cooldown_sweeps`` sweeps, so records that keep failing cannot
    fill every batch ahead of newer due articles.
    """

    log_name = "article_lifecycle.sweepers"
    stage = SweepStage.SWEEP

    def __init__(
        self,
        service_scope: ServiceScope,
        interval_seconds: float,
        batch_size: int = 100,
        item_timeout_seconds: float = 10,
        max_retries: int = 3,
        retry_base_delay_seconds: float = 0.5,
        failure_cooldown_sweeps: int = 5,
    ) -> None:
        self._service_scope = service_scope
        self._interval = interval_seconds
        self._batch_size = batch_size
        self._item_timeout = item_timeout_seconds
        self._max_retries = max_retries
        self._retry_base_delay = retry_base_delay_seconds
        self._failure_cooldown = failure_cooldown_sweeps
        self._bench: dict[str, int] = {}  # article id -> sweeps left to sit out
        self._actor = ActingUser.system()
        self._log = SweepLogger(self.log_name)
        self._running = False
        self._stopping = False
        self._task: asyncio.Task | None = None

    @property
    def interval_seconds(self) -> float:
        return self._interval

    async def start(self) -> None:
        """Start the sweep loop."""
        self._running = True
        self._stopping = False
        self._task = asyncio.create_task(self._loop())
        logger.info("%s started (interval=%ss)", type(self).__name__, self._interval)

    async def stop(self) -> None:
        """Gracefully stop the sweep loop."""
        self._running = False
        self._stopping = True
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        logger.info("%s stopped", type(self).__name__)

    async def _loop(self) -> None:
        while self._running:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("%s sweep error", type(self).__name__)

            await asyncio.sleep(self._interval)

    async def run_once(self) -> SweepReport:
        """Execute one full scan-and-act cycle."""
        limit = self._batch_size + len(self._bench)
        async with self._service_scope() as service:
            found = await self._find_candidates(service, limit)

        benched = self._take_bench()
        candidates = [a for a in found if a not in benched][: self._batch_size]
        report = SweepReport(
            candidates=len(candidates), benched=sum(1 for a in found if a in benched)
        )
        if not candidates:
            return report

        self._log.step_start(self.stage, f"{len(candidates)} due article(s)")
        started = time.perf_counter()
        for article_id in candidates:
            if self._stopping:
                break
            outcome = await self._process(article_id)
            if outcome == "failed" and self._failure_cooldown > 0:
                self._bench[article_id] = self._failure_cooldown
            setattr(report, outcome, getattr(report, outcome) + 1)

        self._log.stats(
            succeeded=report.succeeded,
            skipped=report.skipped,
            timed_out=report.timed_out,
            failed=report.failed,
            benched=report.benched,
            elapsed=f"{time.perf_counter() - started:.2f}s",
        )
        return report

    def _take_bench(self) -> set[str]:
        """IDs sitting out this sweep; counts each one down by a sweep."""
        benched = set(self._bench)
        for article_id in benched:
            self._bench[article_id] -= 1
            if self._bench[article_id] <= 0:
                del self._bench[article_id]
        return benched

    async def _process(self, article_id: str) -> str:
        """Apply the transition to one article; returns a SweepReport field name."""
        attempt = 0
        while True:
            try:
                await asyncio.wait_for(self._apply_in_scope(article_id), self._item_timeout)
                self._log.step_complete(self.stage, article_id)
                return "succeeded"
            except asyncio.TimeoutError:
                self._log.step_warning(
                    SweepStage.TIMEOUT,
                    f"{article_id} exceeded {self._item_timeout}s; deferred to next sweep",
                )
                return "timed_out"
            except StorageUnavailableError as exc:
                attempt += 1
                if attempt > self._max_retries:
                    self._log.step_error(
                        self.stage, f"{article_id} failed after {self._max_retries} retries", exc
                    )
                    return "failed"
                delay = self._retry_base_delay * (2 ** (attempt - 1))
                self._log.step_warning(
                    SweepStage.RETRY,
                    f"{article_id} storage unavailable",
                    attempt=attempt,
                    delay=f"{delay:.2f}s",
                )
                await asyncio.sleep(delay)
            except (StaleStateError, InvalidTransitionError, EntityNotFoundError) as exc:
                # a concurrent caller got there first; nothing to do this sweep
                self._log.detail(f"{article_id} skipped", reason=exc.kind)
                return "skipped"
            except Exception as exc:
                self._log.step_error(self.stage, f"{article_id} failed", exc)
                logger.debug("Sweep failure detail", exc_info=True)
                return "failed"

    async def _apply_in_scope(self, article_id: str) -> None:
        async with self._service_scope() as service:
            await self._apply(service, article_id)

    @abstractmethod
    async def _find_candidates(self, service: ArticleLifecycleService, limit: int) -> list[str]:
        """IDs of up to ``limit`` articles due for this sweeper's transition, oldest first."""
        ...

    @abstractmethod
    async def _apply(self, service: ArticleLifecycleService, article_id: str) -> None:
        """Run the transition for one article."""
        ...
