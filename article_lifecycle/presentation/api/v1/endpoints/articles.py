"""Article lifecycle endpoints.

Lifecycle failures propagate as ``LifecycleError`` and are rendered by the
application's exception handler.
"""

from fastapi import APIRouter, Depends, Query, status

from article_lifecycle.application.schemas import (
    ArticleCreate,
    ArticleResponse,
    CollaboratorCreate,
    CollaboratorResponse,
    ContentUpdate,
    PublishRequest,
    ScheduleRequest,
    TrashEntryResponse,
    VersionMetadataResponse,
    VersionResponse,
)
from article_lifecycle.application.services import ArticleLifecycleService
from article_lifecycle.domain.entities import ActingUser, Article, ArticleStatus
from article_lifecycle.infrastructure.dependencies import (
    get_acting_user,
    get_lifecycle_service,
    get_optional_acting_user,
)

router = APIRouter(prefix="/articles", tags=["Articles"])


def _to_response(article: Article) -> ArticleResponse:
    return ArticleResponse.model_validate(article, from_attributes=True)


@router.post("", response_model=ArticleResponse, status_code=status.HTTP_201_CREATED)
async def create_article(
    data: ArticleCreate,
    actor: ActingUser = Depends(get_acting_user),
    service: ArticleLifecycleService = Depends(get_lifecycle_service),
) -> ArticleResponse:
    """Create a new draft owned by the caller."""
    article = await service.create_article(actor, data)
    return _to_response(article)


@router.get("", response_model=list[ArticleResponse])
async def list_articles(
    status_filter: ArticleStatus | None = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    actor: ActingUser = Depends(get_acting_user),
    service: ArticleLifecycleService = Depends(get_lifecycle_service),
) -> list[ArticleResponse]:
    """The caller's own articles, newest first."""
    articles = await service.list_articles(actor, status=status_filter, skip=skip, limit=limit)
    return [_to_response(a) for a in articles]


@router.get("/trash", response_model=list[TrashEntryResponse])
async def list_trash(
    actor: ActingUser = Depends(get_acting_user),
    service: ArticleLifecycleService = Depends(get_lifecycle_service),
) -> list[TrashEntryResponse]:
    """The caller's trashed articles with the time left to restore them."""
    now = service.now()
    return [
        TrashEntryResponse(
            id=article.id,
            title=article.title,
            deleted_at=record.deleted_at,
            purge_after=record.purge_after,
            remaining_seconds=int(record.remaining(now).total_seconds()),
        )
        for article, record in await service.list_trash(actor)
    ]


@router.get("/{article_id}", response_model=ArticleResponse)
async def get_article(
    article_id: str,
    actor: ActingUser | None = Depends(get_optional_acting_user),
    service: ArticleLifecycleService = Depends(get_lifecycle_service),
) -> ArticleResponse:
    """Published articles are public; anything else needs access."""
    article = await service.get_article(article_id, actor)
    return _to_response(article)


@router.put("/{article_id}/content", response_model=ArticleResponse)
async def save_content(
    article_id: str,
    data: ContentUpdate,
    actor: ActingUser = Depends(get_acting_user),
    service: ArticleLifecycleService = Depends(get_lifecycle_service),
) -> ArticleResponse:
    """Commit edited content as a new version."""
    article = await service.save_content(article_id, data, actor)
    return _to_response(article)


@router.post("/{article_id}/schedule", response_model=ArticleResponse)
async def schedule_article(
    article_id: str,
    data: ScheduleRequest,
    actor: ActingUser = Depends(get_acting_user),
    service: ArticleLifecycleService = Depends(get_lifecycle_service),
) -> ArticleResponse:
    article = await service.schedule(article_id, data.publish_at, actor, content=data.content)
    return _to_response(article)


@router.post("/{article_id}/unschedule", response_model=ArticleResponse)
async def unschedule_article(
    article_id: str,
    actor: ActingUser = Depends(get_acting_user),
    service: ArticleLifecycleService = Depends(get_lifecycle_service),
) -> ArticleResponse:
    article = await service.unschedule(article_id, actor)
    return _to_response(article)


@router.post("/{article_id}/publish", response_model=ArticleResponse)
async def publish_article(
    article_id: str,
    data: PublishRequest | None = None,
    actor: ActingUser = Depends(get_acting_user),
    service: ArticleLifecycleService = Depends(get_lifecycle_service),
) -> ArticleResponse:
    """Publish a draft now."""
    content = data.content if data else None
    article = await service.publish(article_id, actor, content=content)
    return _to_response(article)


@router.post("/{article_id}/unpublish", response_model=ArticleResponse)
async def unpublish_article(
    article_id: str,
    actor: ActingUser = Depends(get_acting_user),
    service: ArticleLifecycleService = Depends(get_lifecycle_service),
) -> ArticleResponse:
    article = await service.unpublish(article_id, actor)
    return _to_response(article)


@router.delete("/{article_id}", response_model=ArticleResponse)
async def delete_article(
    article_id: str,
    actor: ActingUser = Depends(get_acting_user),
    service: ArticleLifecycleService = Depends(get_lifecycle_service),
) -> ArticleResponse:
    """Move an article to the trash. It stays restorable for the retention window."""
    article = await service.soft_delete(article_id, actor)
    return _to_response(article)


@router.post("/{article_id}/restore", response_model=ArticleResponse)
async def restore_article(
    article_id: str,
    actor: ActingUser = Depends(get_acting_user),
    service: ArticleLifecycleService = Depends(get_lifecycle_service),
) -> ArticleResponse:
    """Bring a trashed article back as a draft."""
    article = await service.restore(article_id, actor)
    return _to_response(article)


@router.post("/{article_id}/purge", status_code=status.HTTP_204_NO_CONTENT)
async def purge_article(
    article_id: str,
    actor: ActingUser = Depends(get_acting_user),
    service: ArticleLifecycleService = Depends(get_lifecycle_service),
) -> None:
    """Permanently delete a trashed article and its history."""
    await service.purge(article_id, actor)


# ── Versions ────────────────────────────────────────────────────────


@router.get("/{article_id}/versions", response_model=list[VersionMetadataResponse])
async def list_versions(
    article_id: str,
    actor: ActingUser | None = Depends(get_optional_acting_user),
    service: ArticleLifecycleService = Depends(get_lifecycle_service),
) -> list[VersionMetadataResponse]:
    versions = await service.list_versions(article_id, actor)
    return [VersionMetadataResponse.model_validate(v, from_attributes=True) for v in versions]


@router.get("/{article_id}/versions/{version_number}", response_model=VersionResponse)
async def get_version(
    article_id: str,
    version_number: int,
    actor: ActingUser | None = Depends(get_optional_acting_user),
    service: ArticleLifecycleService = Depends(get_lifecycle_service),
) -> VersionResponse:
    version = await service.get_version(article_id, version_number, actor)
    return VersionResponse.model_validate(version, from_attributes=True)


@router.post("/{article_id}/versions/{version_number}/restore", response_model=ArticleResponse)
async def restore_version(
    article_id: str,
    version_number: int,
    actor: ActingUser = Depends(get_acting_user),
    service: ArticleLifecycleService = Depends(get_lifecycle_service),
) -> ArticleResponse:
    """Commit an older version's content as the newest version."""
    article = await service.restore_version(article_id, version_number, actor)
    return _to_response(article)


# ── Collaborators ───────────────────────────────────────────────────


@router.get("/{article_id}/collaborators", response_model=list[CollaboratorResponse])
async def list_collaborators(
    article_id: str,
    actor: ActingUser = Depends(get_acting_user),
    service: ArticleLifecycleService = Depends(get_lifecycle_service),
) -> list[CollaboratorResponse]:
    collaborators = await service.list_collaborators(article_id, actor)
    return [CollaboratorResponse.model_validate(c, from_attributes=True) for c in collaborators]


@router.post(
    "/{article_id}/collaborators",
    response_model=CollaboratorResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_collaborator(
    article_id: str,
    data: CollaboratorCreate,
    actor: ActingUser = Depends(get_acting_user),
    service: ArticleLifecycleService = Depends(get_lifecycle_service),
) -> CollaboratorResponse:
    collaborator = await service.add_collaborator(article_id, data.user_id, data.role, actor)
    return CollaboratorResponse.model_validate(collaborator, from_attributes=True)


@router.delete(
    "/{article_id}/collaborators/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def remove_collaborator(
    article_id: str,
    user_id: str,
    actor: ActingUser = Depends(get_acting_user),
    service: ArticleLifecycleService = Depends(get_lifecycle_service),
) -> None:
    await service.remove_collaborator(article_id, user_id, actor)
