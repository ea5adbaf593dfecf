"""The identity on whose behalf a lifecycle operation runs."""

from dataclasses import dataclass

from article_lifecycle.domain.entities.plan import Plan

SYSTEM_ACTOR_ID = "system"


@dataclass(frozen=True)
class ActingUser:
    """Acting user context passed to every lifecycle operation.

    ``is_system`` marks the background sweepers, which act with elevated
    privilege and are the only callers allowed to auto-publish.
    """

    id: str
    plan: Plan
    is_admin: bool = False
    is_system: bool = False

    @classmethod
    def system(cls) -> "ActingUser":
        return cls(id=SYSTEM_ACTOR_ID, plan=Plan.ENTERPRISE, is_admin=True, is_system=True)

    def owns(self, owner_id: str) -> bool:
        return self.id == owner_id

    def is_owner_or_admin(self, owner_id: str) -> bool:
        return self.is_admin or self.is_system or self.owns(owner_id)
