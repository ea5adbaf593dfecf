from .article import ArticleModel
from .article_version import ArticleVersionModel
from .collaborator import CollaboratorModel

__all__ = [
    "ArticleModel",
    "ArticleVersionModel",
    "CollaboratorModel",
]
