"""CommunityMessage ORM — one appended chat message.

Invariants:
    - Append-only: rows are never updated or deleted by this service
    - id is store-assigned and increasing; ordering by id is chronological order
    - sender_name is the display name captured at post time and may drift
      from the user's current name

Design Decisions:
    - Row-per-message instead of an embedded array: concurrent appends to one
      community are independent inserts, no read-modify-write of a document
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from twincord.db.base import Base


class CommunityMessage(Base):
    __tablename__ = "community_messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    community_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("communities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sender_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id"), nullable=False,
    )
    sender_name: Mapped[str] = mapped_column(
        String(100), nullable=False, default="",
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    community: Mapped["Community"] = relationship(
        "Community", back_populates="messages",
    )
    sender: Mapped["User"] = relationship("User", lazy="raise")
