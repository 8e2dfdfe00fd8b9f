"""Community ORM — named group chat with a unique join code.

Invariants:
    - code is unique across all communities (unique index) and never reassigned
    - creator_id is always present in members (inserted in the same commit)
    - name is non-empty and at most 100 characters (schema-validated)

Design Decisions:
    - members eager-loaded (selectin): every admission path needs the member set
    - messages lazy="raise": the log is only read through services/message_log.py,
      never by walking the relationship (keeps list/detail queries message-free)
    - creator lazy="raise": resolved with explicit selectinload where displayed
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from twincord.db.base import Base


class Community(Base):
    """Community aggregate root — owns members and messages."""
    __tablename__ = "communities"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(
        Text, nullable=False, default="",
    )
    code: Mapped[str] = mapped_column(
        String(16), nullable=False, unique=True, index=True,
    )
    creator_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id"), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    # Relationships
    creator: Mapped["User"] = relationship("User", lazy="raise")
    members: Mapped[list["CommunityMember"]] = relationship(
        "CommunityMember", back_populates="community",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="CommunityMember.id",
    )
    messages: Mapped[list["CommunityMessage"]] = relationship(
        "CommunityMessage", back_populates="community",
        cascade="all, delete-orphan", passive_deletes=True, lazy="raise",
    )

    def has_member(self, user_id: str) -> bool:
        return any(m.user_id == user_id for m in self.members)
