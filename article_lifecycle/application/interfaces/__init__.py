from .article_repository import ArticleRepository
from .version_repository import VersionRepository
from .collaborator_repository import CollaboratorRepository
from .clock import Clock

__all__ = [
    "ArticleRepository",
    "VersionRepository",
    "CollaboratorRepository",
    "Clock",
]
