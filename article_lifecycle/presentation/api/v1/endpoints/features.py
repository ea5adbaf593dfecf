"""Plan feature flags for the acting user."""

from fastapi import APIRouter, Depends

from article_lifecycle.domain.entities import ActingUser
from article_lifecycle.domain.policy import features_for
from article_lifecycle.infrastructure.dependencies import get_acting_user

router = APIRouter(prefix="/features", tags=["Features"])


@router.get("", response_model=dict[str, bool])
async def get_features(actor: ActingUser = Depends(get_acting_user)) -> dict[str, bool]:
    """Which capabilities the caller's plan grants. Admins get everything."""
    return {capability.value: allowed for capability, allowed in features_for(actor).items()}
