from .base import Base, UTCDateTime
from .session import engine, async_session_factory, get_db_session
from .models import ArticleModel, ArticleVersionModel, CollaboratorModel

__all__ = [
    "Base",
    "UTCDateTime",
    "engine",
    "async_session_factory",
    "get_db_session",
    "ArticleModel",
    "ArticleVersionModel",
    "CollaboratorModel",
]
