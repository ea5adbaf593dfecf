"""Plan/admin access policy — pure lookups, no state, no I/O."""

from dataclasses import asdict, dataclass

from article_lifecycle.domain.entities import (
    ActingUser,
    Article,
    ArticleStatus,
    Capability,
    CollaboratorRole,
    Plan,
)


@dataclass(frozen=True)
class FeatureAccess:
    """Capability flags of one plan. Every field is required, so a plan
    table missing a capability fails at import time."""

    dark_mode: bool
    scheduled_publishing: bool
    pdf_export: bool
    plagiarism_checker: bool
    version_history: bool
    collaborative_editing: bool
    advanced_analytics: bool
    unlimited_articles: bool
    custom_domain: bool
    seo_optimization: bool

    def allows(self, capability: Capability) -> bool:
        return getattr(self, capability.value)


FEATURE_ACCESS: dict[Plan, FeatureAccess] = {
    Plan.FREE: FeatureAccess(
        dark_mode=True,
        scheduled_publishing=False,
        pdf_export=False,
        plagiarism_checker=False,
        version_history=False,
        collaborative_editing=False,
        advanced_analytics=False,
        unlimited_articles=False,
        custom_domain=False,
        seo_optimization=False,
    ),
    Plan.PRO: FeatureAccess(
        dark_mode=True,
        scheduled_publishing=True,
        pdf_export=True,
        plagiarism_checker=True,
        version_history=True,
        collaborative_editing=True,
        advanced_analytics=True,
        unlimited_articles=True,
        custom_domain=False,
        seo_optimization=True,
    ),
    Plan.ENTERPRISE: FeatureAccess(
        dark_mode=True,
        scheduled_publishing=True,
        pdf_export=True,
        plagiarism_checker=True,
        version_history=True,
        collaborative_editing=True,
        advanced_analytics=True,
        unlimited_articles=True,
        custom_domain=True,
        seo_optimization=True,
    ),
}


def can_access(plan: Plan, is_admin: bool, capability: Capability) -> bool:
    """Admins may use everything; everyone else gets their plan's flag."""
    if is_admin:
        return True
    return FEATURE_ACCESS[plan].allows(capability)


def actor_can(actor: ActingUser, capability: Capability) -> bool:
    return can_access(actor.plan, actor.is_admin or actor.is_system, capability)


def get_plan_features(plan: Plan) -> FeatureAccess:
    return FEATURE_ACCESS[plan]


def features_for(actor: ActingUser) -> dict[Capability, bool]:
    """Effective capability map of an actor, admin override applied."""
    flags = asdict(FEATURE_ACCESS[actor.plan])
    return {
        capability: actor.is_admin or actor.is_system or flags[capability.value]
        for capability in Capability
    }


def can_view(
    article: Article,
    actor: ActingUser | None,
    collaborator_role: CollaboratorRole | None = None,
) -> bool:
    """Read policy.

    Published articles are public. Drafts and scheduled articles are visible
    to the owner, admins and collaborators. Trashed articles are visible to
    the owner and admins only, until restored or purged.
    """
    if article.status == ArticleStatus.PUBLISHED:
        return True
    if actor is None:
        return False
    if actor.is_owner_or_admin(article.owner_id):
        return True
    if article.status == ArticleStatus.TRASHED:
        return False
    return collaborator_role is not None
