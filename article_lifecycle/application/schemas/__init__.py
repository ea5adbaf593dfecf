from .article import (
    ArticleCreate,
    ArticleResponse,
    CollaboratorCreate,
    CollaboratorResponse,
    ContentUpdate,
    ErrorResponse,
    PublishRequest,
    ScheduleRequest,
    TrashEntryResponse,
    VersionMetadataResponse,
    VersionResponse,
)

__all__ = [
    "ArticleCreate",
    "ArticleResponse",
    "CollaboratorCreate",
    "CollaboratorResponse",
    "ContentUpdate",
    "ErrorResponse",
    "PublishRequest",
    "ScheduleRequest",
    "TrashEntryResponse",
    "VersionMetadataResponse",
    "VersionResponse",
]
