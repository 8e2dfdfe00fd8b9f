"""Message Log — append-only, per-community chat history.

Invariants:
    - append re-checks membership against the store at post time (never cached),
      so a user removed between page-load and send is rejected
    - append returns only the new message; read returns the full ordered log
    - Read order is store-assigned insertion order (message id ascending)
    - Messages are never mutated or deleted here

Design Decisions:
    - No pagination: full replay on every read, clients pull on a short interval
      and replace their local view
    - senderName defaults to the sender's current display name when omitted
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from twincord.core.domain_types import CommunityId, UserId
from twincord.core.errors import (
    ErrorContext, InvalidArgumentError, PermissionDeniedError,
    ResourceNotFoundError,
)
from twincord.models.community import Community
from twincord.models.community_member import CommunityMember
from twincord.models.community_message import CommunityMessage
from twincord.models.user import User

logger = logging.getLogger(__name__)


class MessageLog:
    """Read/append contract for one community's message sequence."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def append(
        self,
        community_id: CommunityId,
        sender_id: UserId,
        text: str,
        sender_name: str | None = None,
    ) -> CommunityMessage:
        await self._require_community(community_id)

        text = (text or "").strip()
        if not sender_id:
            raise InvalidArgumentError("Missing senderId or text", "senderId")
        if not text:
            raise InvalidArgumentError("Missing senderId or text", "text")

        if not await self._is_member(community_id, sender_id):
            logger.warning(
                "Rejected message from non-member",
                extra={"community_id": str(community_id), "user_id": sender_id},
            )
            raise PermissionDeniedError(
                "You are not a member of this community",
                ErrorContext(community_id=str(community_id), user_id=sender_id),
            )

        if not sender_name:
            sender = await self.db.get(User, sender_id)
            sender_name = sender.name if sender else ""

        message = CommunityMessage(
            community_id=community_id,
            sender_id=sender_id,
            sender_name=sender_name,
            text=text,
            created_at=datetime.now(timezone.utc),
        )
        self.db.add(message)
        await self.db.commit()
        return message

    async def read(self, community_id: CommunityId) -> list[CommunityMessage]:
        await self._require_community(community_id)
        result = await self.db.execute(
            select(CommunityMessage)
            .where(CommunityMessage.community_id == community_id)
            .options(selectinload(CommunityMessage.sender))
            .order_by(CommunityMessage.id)
            .execution_options(populate_existing=True),
        )
        return list(result.scalars().all())

    async def _require_community(self, community_id: CommunityId) -> None:
        result = await self.db.execute(
            select(Community.id).where(Community.id == community_id),
        )
        if result.scalar_one_or_none() is None:
            raise ResourceNotFoundError("Community", str(community_id))

    async def _is_member(self, community_id: CommunityId, user_id: UserId) -> bool:
        result = await self.db.execute(
            select(CommunityMember.id)
            .where(CommunityMember.community_id == community_id)
            .where(CommunityMember.user_id == user_id),
        )
        return result.scalar_one_or_none() is not None
