from .article_repository import SQLAlchemyArticleRepository
from .version_repository import SQLAlchemyVersionRepository
from .collaborator_repository import SQLAlchemyCollaboratorRepository

__all__ = [
    "SQLAlchemyArticleRepository",
    "SQLAlchemyVersionRepository",
    "SQLAlchemyCollaboratorRepository",
]
