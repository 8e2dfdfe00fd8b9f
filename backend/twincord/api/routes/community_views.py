"""Community Views — ORM → public JSON projections for community routes.

Invariants:
    - Summaries never include message bodies
    - Identity references resolve to {id, name, email}; a dangling reference
      resolves to None rather than failing the whole response
    - Timestamps are ISO-8601 strings

Design Decisions:
    - Plain dict builders over response_model classes: the envelope shapes are
      small and the routes already build {success, ...} dicts
"""

from twincord.models.community import Community
from twincord.models.community_message import CommunityMessage
from twincord.models.user import User


def _iso(value) -> str | None:
    return value.isoformat() if value else None


def user_brief(user: User | None) -> dict | None:
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "email": user.email}


def community_summary(community: Community, creator: User | None = None) -> dict:
    """Community without messages; members as an id list in join order."""
    member_ids = [m.user_id for m in community.members]
    return {
        "id": str(community.id),
        "name": community.name,
        "description": community.description,
        "code": community.code,
        "creatorId": community.creator_id,
        "creator": user_brief(creator),
        "members": member_ids,
        "memberCount": len(member_ids),
        "createdAt": _iso(community.created_at),
    }


def community_detail(community: Community) -> dict:
    """Community with creator and members resolved to display fields."""
    view = community_summary(community, community.creator)
    view["members"] = [
        user_brief(m.user) or {"id": m.user_id, "name": None, "email": None}
        for m in community.members
    ]
    return view


def message_view(message: CommunityMessage, sender: User | None = None) -> dict:
    return {
        "id": message.id,
        "communityId": str(message.community_id),
        "senderId": message.sender_id,
        "senderName": message.sender_name,
        "sender": user_brief(sender),
        "text": message.text,
        "createdAt": _iso(message.created_at),
    }
