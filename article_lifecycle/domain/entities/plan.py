"""Subscription plans and gated capabilities — both closed enumerations."""

from enum import Enum


class Plan(str, Enum):
    """Subscription plan of a user."""

    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class Capability(str, Enum):
    """A named gated action whose availability depends on plan/admin status.

    Values match the field names of ``FeatureAccess``.
    """

    DARK_MODE = "dark_mode"
    SCHEDULED_PUBLISHING = "scheduled_publishing"
    PDF_EXPORT = "pdf_export"
    PLAGIARISM_CHECKER = "plagiarism_checker"
    VERSION_HISTORY = "version_history"
    COLLABORATIVE_EDITING = "collaborative_editing"
    ADVANCED_ANALYTICS = "advanced_analytics"
    UNLIMITED_ARTICLES = "unlimited_articles"
    CUSTOM_DOMAIN = "custom_domain"
    SEO_OPTIMIZATION = "seo_optimization"
