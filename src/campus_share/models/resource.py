# src/campus_share/models/resource.py
"""SQLAlchemy models for shared academic resources."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_share.db.session import Base
from campus_share.db.time import utcnow
from campus_share.models.user import User

SEMESTER_MIN = 1
SEMESTER_MAX = 20


class Resource(Base):
    """An uploaded file and its catalogue metadata."""

    __tablename__ = "resource"
    __table_args__ = (
        CheckConstraint("semester BETWEEN 1 AND 20", name="ck_resource_semester"),
        CheckConstraint("download_count >= 0", name="ck_resource_download_count"),
        Index("ix_resource_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    department: Mapped[str] = mapped_column(String(100), nullable=False)
    subject: Mapped[str] = mapped_column(String(100), nullable=False)
    semester: Mapped[int] = mapped_column(SmallInteger, nullable=False)

    # Absolute URL for remote object storage, "/uploads/<name>" for local files.
    file_location: Mapped[str] = mapped_column(Text, nullable=False)
    external_storage_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    uploaded_by_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        nullable=False,
        index=True,
    )
    # Only ever changed through ResourceRepository.increment_downloads.
    download_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    uploaded_by: Mapped[User] = relationship("User", lazy="joined")


class ResourceVote(Base):
    """Membership of a user in a resource's upvoter or downvoter set.

    The composite primary key admits one row per (resource, user), so a user
    can never sit in both sets at once.
    """

    __tablename__ = "resource_vote"
    __table_args__ = (
        CheckConstraint("direction IN (1, -1)", name="ck_resource_vote_direction"),
        Index("ix_resource_vote_user_id", "user_id"),
    )

    resource_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("resource.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # 1 = upvote, -1 = downvote.
    direction: Mapped[int] = mapped_column(SmallInteger, nullable=False)
