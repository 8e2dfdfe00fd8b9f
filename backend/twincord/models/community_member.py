"""CommunityMember ORM — one row per (community, user) membership.

Invariants:
    - (community_id, user_id) is UNIQUE: a user appears at most once per community
    - id increases with insertion, so ordering by id gives join order

Design Decisions:
    - Row-per-member instead of an array column: the unique constraint is the
      store's atomic add-to-set, so two concurrent joins cannot both insert
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from twincord.db.base import Base


class CommunityMember(Base):
    __tablename__ = "community_members"
    __table_args__ = (
        UniqueConstraint("community_id", "user_id", name="uq_community_member"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    community_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("communities.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id"), nullable=False, index=True,
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    community: Mapped["Community"] = relationship(
        "Community", back_populates="members",
    )
    user: Mapped["User"] = relationship("User", lazy="raise")
