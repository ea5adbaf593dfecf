"""Port for the append-only version store."""

from abc import ABC, abstractmethod
from datetime import datetime

from article_lifecycle.domain.entities import ArticleVersion, ContentSnapshot, VersionMetadata


class VersionRepository(ABC):
    """Stores immutable content snapshots per article.

    Entries are never edited or deleted individually; they disappear only
    when the owning article is purged.
    """

    @abstractmethod
    async def append(
        self,
        article_id: str,
        snapshot: ContentSnapshot,
        created_by: str,
        change_description: str | None = None,
        created_at: datetime | None = None,
    ) -> ArticleVersion:
        """Store a snapshot under the next sequential number for the article."""
        ...

    @abstractmethod
    async def get(self, article_id: str, version_number: int) -> ArticleVersion | None:
        """Point lookup of one version."""
        ...

    @abstractmethod
    async def list(self, article_id: str) -> list[VersionMetadata]:
        """Version metadata, newest first. Empty for unknown articles."""
        ...
