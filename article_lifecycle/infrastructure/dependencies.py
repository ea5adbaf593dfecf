"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from article_lifecycle.application.services import ArticleLifecycleService
from article_lifecycle.config import get_settings
from article_lifecycle.domain.entities import ActingUser, Plan, SYSTEM_ACTOR_ID
from article_lifecycle.infrastructure.clock import SystemClock
from article_lifecycle.infrastructure.database.session import (
    async_session_factory,
    get_db_session,
)
from article_lifecycle.infrastructure.database.repositories import (
    SQLAlchemyArticleRepository,
    SQLAlchemyCollaboratorRepository,
    SQLAlchemyVersionRepository,
)

_clock = SystemClock()


def build_lifecycle_service(session: AsyncSession) -> ArticleLifecycleService:
    """Build an ArticleLifecycleService whose repositories share one session."""
    settings = get_settings()
    return ArticleLifecycleService(
        articles=SQLAlchemyArticleRepository(session),
        versions=SQLAlchemyVersionRepository(session),
        collaborators=SQLAlchemyCollaboratorRepository(session),
        clock=_clock,
        retention_window=settings.retention_window,
        article_limit=settings.free_plan_article_limit,
    )


async def get_lifecycle_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[ArticleLifecycleService, None]:
    """Provides an ArticleLifecycleService bound to the request's session."""
    yield build_lifecycle_service(session)


@asynccontextmanager
async def lifecycle_service_scope() -> AsyncIterator[ArticleLifecycleService]:
    """Service bound to its own transaction, for the background sweepers.

    Commits when the block exits cleanly, rolls back otherwise.
    """
    async with async_session_factory() as session:
        try:
            yield build_lifecycle_service(session)
            await session.commit()
        except BaseException:
            await session.rollback()
            raise


async def get_acting_user(
    x_user_id: str = Header(..., min_length=1),
    x_user_plan: Plan = Header(Plan.FREE),
    x_user_admin: bool = Header(False),
) -> ActingUser:
    """Resolve the caller from request headers.

    Authentication happens upstream; this service trusts the gateway's
    ``X-User-*`` headers. The system identity is reserved for the sweepers.
    """
    if x_user_id == SYSTEM_ACTOR_ID:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"User id '{SYSTEM_ACTOR_ID}' is reserved",
        )
    return ActingUser(id=x_user_id, plan=x_user_plan, is_admin=x_user_admin)


async def get_optional_acting_user(
    x_user_id: str | None = Header(None),
    x_user_plan: Plan = Header(Plan.FREE),
    x_user_admin: bool = Header(False),
) -> ActingUser | None:
    """Like ``get_acting_user`` but anonymous readers are allowed."""
    if not x_user_id:
        return None
    return await get_acting_user(x_user_id, x_user_plan, x_user_admin)
