"""SQLAlchemy ORM model for article collaborators."""

from datetime import datetime, timezone

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from article_lifecycle.infrastructure.database.base import Base, UTCDateTime


class CollaboratorModel(Base):
    """ORM model — maps to the 'collaborators' table."""

    __tablename__ = "collaborators"

    article_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("articles.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="editor")
    added_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
