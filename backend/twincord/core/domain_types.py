"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - CommunityId wraps UUID; UserId wraps the upstream identity key (str)
    - parse_community_id never lets a malformed id reach the store
    - All valid states encoded as Enums, no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - Malformed community ids are reported as NotFound: an id that cannot
      exist is indistinguishable from one that does not
"""

from enum import Enum
from typing import NewType
from uuid import UUID

from twincord.core.errors import ResourceNotFoundError


# ─── Identity Types ──────────────────────────────────────────────

CommunityId = NewType("CommunityId", UUID)
UserId = NewType("UserId", str)
JoinCode = NewType("JoinCode", str)


# ─── Enums ───────────────────────────────────────────────────────

class SubscriberState(str, Enum):
    """Lifecycle of one realtime stats connection."""
    OPENING = "opening"
    WATCHING = "watching"
    DEGRADED = "degraded"
    CLOSED = "closed"


class EmissionTrigger(str, Enum):
    """Why a stats snapshot was emitted (observability only)."""
    OPEN = "open"
    CHANGE = "change"
    TIMER = "timer"


def parse_community_id(raw: str) -> CommunityId:
    """Parse a path parameter into a CommunityId or raise NotFound."""
    try:
        return CommunityId(UUID(str(raw)))
    except (ValueError, TypeError):
        raise ResourceNotFoundError("Community", str(raw))
