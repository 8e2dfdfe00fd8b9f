"""Stats Snapshot — point-in-time usage counters, recomputed on every emission.

Invariants:
    - Carries no identity or version: every snapshot is authoritative on its own
    - meetings_today is always 0 (no meeting entity is tracked)
    - to_dict() uses the public camelCase field names
"""

from dataclasses import dataclass

MEETINGS_TODAY_PLACEHOLDER = 0


@dataclass(frozen=True)
class StatsSnapshot:
    total_users: int
    online_users: int
    total_communities: int
    meetings_today: int = MEETINGS_TODAY_PLACEHOLDER

    def to_dict(self) -> dict:
        return {
            "totalUsers": self.total_users,
            "onlineUsers": self.online_users,
            "totalCommunities": self.total_communities,
            "meetingsToday": self.meetings_today,
        }
