"""Abstract repository interfaces (ports) — define the contract, not the implementation."""

from abc import ABC, abstractmethod
from datetime import datetime

from article_lifecycle.domain.entities import Article, ArticleStatus


class ArticleRepository(ABC):
    """Port for article persistence — implemented in the infrastructure layer."""

    @abstractmethod
    async def get_by_id(self, article_id: str) -> Article | None:
        """Retrieve a single article by its ID."""
        ...

    @abstractmethod
    async def create(self, article: Article) -> Article:
        """Persist a new article and return it with the generated ID."""
        ...

    @abstractmethod
    async def save(self, article: Article, expected_revision: int) -> Article:
        """Compare-and-set write of status, timestamps and content fields.

        Succeeds only if the stored revision still equals ``expected_revision``;
        the stored revision is then incremented and copied onto ``article``.
        Raises ``StaleStateError`` otherwise.
        """
        ...

    @abstractmethod
    async def purge(self, article_id: str, expected_revision: int) -> None:
        """Delete the article together with its versions and collaborators.

        Same compare-and-set rule as ``save``; raises ``StaleStateError`` if
        the article changed or is already gone.
        """
        ...

    @abstractmethod
    async def list_by_owner(
        self,
        owner_id: str,
        status: ArticleStatus | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Article]:
        """The owner's articles, newest first, optionally filtered by status."""
        ...

    @abstractmethod
    async def count_by_owner(self, owner_id: str) -> int:
        """Number of stored (not yet purged) articles of an owner."""
        ...

    @abstractmethod
    async def list_due_for_publish(self, now: datetime, limit: int = 100) -> list[str]:
        """IDs of scheduled articles whose publish time is at or before ``now``."""
        ...

    @abstractmethod
    async def list_due_for_purge(self, deleted_before: datetime, limit: int = 100) -> list[str]:
        """IDs of trashed articles deleted at or before ``deleted_before``."""
        ...
