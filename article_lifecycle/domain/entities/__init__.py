from .plan import Plan, Capability
from .acting_user import ActingUser, SYSTEM_ACTOR_ID
from .article_version import ArticleVersion, ContentSnapshot, VersionMetadata
from .article import Article, ArticleStatus, DeletionRecord, slugify
from .collaborator import Collaborator, CollaboratorRole

__all__ = [
    "Plan",
    "Capability",
    "ActingUser",
    "SYSTEM_ACTOR_ID",
    "ArticleVersion",
    "ContentSnapshot",
    "VersionMetadata",
    "Article",
    "ArticleStatus",
    "DeletionRecord",
    "slugify",
    "Collaborator",
    "CollaboratorRole",
]
