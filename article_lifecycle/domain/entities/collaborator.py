"""Collaborator entity — a non-owner user granted access to one article."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class CollaboratorRole(str, Enum):
    """Access level of a collaborator."""

    VIEWER = "viewer"
    EDITOR = "editor"


@dataclass
class Collaborator:
    article_id: str
    user_id: str
    role: CollaboratorRole = CollaboratorRole.EDITOR
    added_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def can_edit(self) -> bool:
        return self.role == CollaboratorRole.EDITOR
