"""Pydantic DTOs (Data Transfer Objects) for the Article feature."""

from datetime import datetime

from pydantic import BaseModel, Field

from article_lifecycle.domain.entities import ArticleStatus, CollaboratorRole


class ArticleCreate(BaseModel):
    """Schema for creating a new article."""

    title: str = Field(..., min_length=1, max_length=255, examples=["Getting Started"])
    content: str = Field("", examples=["<p>First draft.</p>"])
    tags: list[str] = Field(default_factory=list, examples=[["python", "writing"]])
    slug: str | None = Field(None, max_length=255, examples=["getting-started"])
    excerpt: str | None = Field(None, max_length=1000)


class ContentUpdate(BaseModel):
    """Schema for saving content — omitted fields keep their current value."""

    title: str | None = Field(None, min_length=1, max_length=255)
    content: str | None = None
    tags: list[str] | None = None
    slug: str | None = Field(None, max_length=255)
    excerpt: str | None = Field(None, max_length=1000)
    change_description: str | None = Field(None, max_length=500)


class ScheduleRequest(BaseModel):
    """Schema for scheduling a draft, optionally committing content with it."""

    publish_at: datetime
    content: ContentUpdate | None = None


class PublishRequest(BaseModel):
    content: ContentUpdate | None = None


class ArticleResponse(BaseModel):
    """Schema returned to the client."""

    id: str
    owner_id: str
    status: ArticleStatus
    title: str
    content: str
    tags: list[str]
    slug: str
    excerpt: str | None
    scheduled_publish_at: datetime | None
    published_at: datetime | None
    deleted_at: datetime | None
    current_version_number: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TrashEntryResponse(BaseModel):
    """A trashed article with its retention deadline."""

    id: str
    title: str
    deleted_at: datetime
    purge_after: datetime
    remaining_seconds: int


class VersionMetadataResponse(BaseModel):
    article_id: str
    version_number: int
    title: str
    created_at: datetime
    created_by: str
    change_description: str | None

    model_config = {"from_attributes": True}


class VersionResponse(VersionMetadataResponse):
    content: str
    tags: list[str]


class CollaboratorCreate(BaseModel):
    user_id: str = Field(..., min_length=1)
    role: CollaboratorRole = CollaboratorRole.EDITOR


class CollaboratorResponse(BaseModel):
    article_id: str
    user_id: str
    role: CollaboratorRole
    added_at: datetime

    model_config = {"from_attributes": True}


class ErrorResponse(BaseModel):
    """Structured failure body: what kind of error and the article state behind it."""

    kind: str
    detail: str
    article: dict | None = None
