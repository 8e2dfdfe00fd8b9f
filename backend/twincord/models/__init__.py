"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Community is the aggregate root; members and messages are scoped by community_id

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from twincord.models.user import User  # noqa: F401
from twincord.models.community import Community  # noqa: F401
from twincord.models.community_member import CommunityMember  # noqa: F401
from twincord.models.community_message import CommunityMessage  # noqa: F401
