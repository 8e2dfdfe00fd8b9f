"""User ORM — minimal projection of the upstream identity store.

Invariants:
    - id is the identity layer's opaque string key (authenticated upstream)
    - is_online is maintained by the identity layer; this service only counts it

Design Decisions:
    - String primary key: callers pass whatever the auth layer issued
    - No credentials stored here: authentication is out of this service's scope
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from twincord.db.base import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(
        String(255), nullable=True, unique=True,
    )
    is_online: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, index=True,
    )
    last_seen: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
