"""Port for article collaborators."""

from abc import ABC, abstractmethod

from article_lifecycle.domain.entities import Collaborator


class CollaboratorRepository(ABC):

    @abstractmethod
    async def get(self, article_id: str, user_id: str) -> Collaborator | None:
        ...

    @abstractmethod
    async def list_for_article(self, article_id: str) -> list[Collaborator]:
        ...

    @abstractmethod
    async def upsert(self, collaborator: Collaborator) -> Collaborator:
        """Add a collaborator, or change the role of an existing one."""
        ...

    @abstractmethod
    async def delete(self, article_id: str, user_id: str) -> bool:
        """Remove a collaborator. Returns True if removed, False if not found."""
        ...
