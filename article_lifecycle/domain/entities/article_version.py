"""Immutable content snapshots of an article."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ContentSnapshot:
    """The versioned content fields of an article, frozen at capture time."""

    title: str
    content: str
    tags: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ArticleVersion:
    """One appended entry of an article's version history. Never mutated."""

    article_id: str
    version_number: int
    snapshot: ContentSnapshot
    created_at: datetime
    created_by: str
    change_description: str | None = None

    @property
    def title(self) -> str:
        return self.snapshot.title

    @property
    def content(self) -> str:
        return self.snapshot.content

    @property
    def tags(self) -> tuple[str, ...]:
        return self.snapshot.tags

    def metadata(self) -> "VersionMetadata":
        return VersionMetadata(
            article_id=self.article_id,
            version_number=self.version_number,
            title=self.snapshot.title,
            created_at=self.created_at,
            created_by=self.created_by,
            change_description=self.change_description,
        )


@dataclass(frozen=True)
class VersionMetadata:
    """Version list entry — everything except the content body."""

    article_id: str
    version_number: int
    title: str
    created_at: datetime
    created_by: str
    change_description: str | None = None
