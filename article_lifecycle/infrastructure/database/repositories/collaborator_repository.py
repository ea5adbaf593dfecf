"""SQLAlchemy implementation of the CollaboratorRepository port."""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from article_lifecycle.application.interfaces import CollaboratorRepository
from article_lifecycle.domain.entities import Collaborator, CollaboratorRole
from article_lifecycle.infrastructure.database.errors import storage_guard
from article_lifecycle.infrastructure.database.models import CollaboratorModel


class SQLAlchemyCollaboratorRepository(CollaboratorRepository):

    def __init__(self, session: AsyncSession):
        self._session = session

    @staticmethod
    def _to_entity(model: CollaboratorModel) -> Collaborator:
        return Collaborator(
            article_id=model.article_id,
            user_id=model.user_id,
            role=CollaboratorRole(model.role),
            added_at=model.added_at,
        )

    async def get(self, article_id: str, user_id: str) -> Collaborator | None:
        async with storage_guard("get collaborator"):
            model = await self._session.get(CollaboratorModel, (article_id, user_id))
        return self._to_entity(model) if model else None

    async def list_for_article(self, article_id: str) -> list[Collaborator]:
        async with storage_guard("list collaborators"):
            result = await self._session.execute(
                select(CollaboratorModel)
                .where(CollaboratorModel.article_id == article_id)
                .order_by(CollaboratorModel.added_at.asc())
            )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def upsert(self, collaborator: Collaborator) -> Collaborator:
        async with storage_guard("save collaborator"):
            model = await self._session.get(
                CollaboratorModel, (collaborator.article_id, collaborator.user_id)
            )
            if model is None:
                model = CollaboratorModel(
                    article_id=collaborator.article_id,
                    user_id=collaborator.user_id,
                    role=collaborator.role.value,
                    added_at=collaborator.added_at,
                )
                self._session.add(model)
            else:
                model.role = collaborator.role.value
            await self._session.flush()
        return self._to_entity(model)

    async def delete(self, article_id: str, user_id: str) -> bool:
        async with storage_guard("remove collaborator"):
            result = await self._session.execute(
                delete(CollaboratorModel).where(
                    CollaboratorModel.article_id == article_id,
                    CollaboratorModel.user_id == user_id,
                )
            )
        return result.rowcount > 0
