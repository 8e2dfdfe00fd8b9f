"""Communities — create, join, list and inspect communities.

Invariants:
    - Create returns 201 with the full community (new join code, creator
      resolved, creator as member)
    - Join is idempotent: a repeat join succeeds with message "Already a member"
    - List is newest-created first and never includes messages
    - Malformed or unknown ids return 404 with the {success: false} envelope

Design Decisions:
    - Creator/member identities resolved via explicit selectinload, only on the
      routes that display them
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from twincord.api.routes.community_views import community_detail, community_summary
from twincord.config import get_settings
from twincord.core.domain_types import parse_community_id
from twincord.core.errors import ResourceNotFoundError
from twincord.infrastructure.database import get_db
from twincord.models.community import Community
from twincord.models.community_member import CommunityMember
from twincord.models.user import User
from twincord.schemas.community import CommunityCreate, JoinRequest
from twincord.services.membership import MembershipAdmission

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/communities", tags=["communities"])


def _create_admission(db: AsyncSession) -> MembershipAdmission:
    settings = get_settings()
    return MembershipAdmission(
        db,
        code_length=settings.join_code_length,
        max_attempts=settings.join_code_max_attempts,
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_community(
    body: CommunityCreate, db: AsyncSession = Depends(get_db),
):
    """Create a community; the creator becomes its first member."""
    community = await _create_admission(db).create_community(
        name=body.name,
        creator_id=body.creator_id,
        description=body.description,
    )
    creator = await db.get(User, community.creator_id)
    return {"success": True, "community": community_summary(community, creator)}


@router.post("/join")
async def join_community(
    body: JoinRequest, db: AsyncSession = Depends(get_db),
):
    """Join by code. Repeat joins succeed without mutating membership."""
    result = await _create_admission(db).join_community(body.user_id, body.code)
    creator = await db.get(User, result.community.creator_id)
    response = {
        "success": True,
        "community": community_summary(result.community, creator),
    }
    if result.already_member:
        response["message"] = "Already a member"
    return response


@router.get("")
async def list_communities(
    user_id: str | None = Query(None, alias="userId"),
    db: AsyncSession = Depends(get_db),
):
    """List community summaries, optionally only those containing userId."""
    query = (
        select(Community)
        .options(selectinload(Community.creator))
        .order_by(Community.created_at.desc())
    )
    if user_id:
        query = query.where(
            Community.id.in_(
                select(CommunityMember.community_id)
                .where(CommunityMember.user_id == user_id),
            ),
        )
    result = await db.execute(query)
    communities = result.scalars().all()
    return {
        "success": True,
        "communities": [community_summary(c, c.creator) for c in communities],
    }


@router.get("/{community_id}")
async def get_community(
    community_id: str, db: AsyncSession = Depends(get_db),
):
    """Single community with creator and members resolved."""
    cid = parse_community_id(community_id)
    result = await db.execute(
        select(Community)
        .where(Community.id == cid)
        .options(
            selectinload(Community.creator),
            selectinload(Community.members).selectinload(CommunityMember.user),
        ),
    )
    community = result.scalar_one_or_none()
    if community is None:
        raise ResourceNotFoundError("Community", community_id)
    return {"success": True, "community": community_detail(community)}
