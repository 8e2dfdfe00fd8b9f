"""Membership Admission — create communities and admit members by join code.

Invariants:
    - create: name must be non-blank and the creator must exist
    - create: the creator is the first member, same commit
    - create: at most max_attempts candidate codes are tried, then
      CodeGenerationExhaustedError (never an unbounded retry loop)
    - join: idempotent; an existing member gets already_member=True and no write
    - State is re-read from the store on every call (no caching across requests)

Design Decisions:
    - Uniqueness is checked before insert AND enforced by the unique index:
      a code claimed by a concurrent create between check and commit shows up
      as IntegrityError and costs one attempt
    - Concurrent duplicate joins are settled by the (community_id, user_id)
      unique constraint; the loser reports already_member instead of an error
"""

import logging
from dataclasses import dataclass
from typing import Callable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from twincord.core.domain_types import JoinCode, UserId
from twincord.core.errors import (
    CodeGenerationExhaustedError, ErrorContext, InvalidArgumentError,
    ResourceNotFoundError,
)
from twincord.core.join_codes import DEFAULT_CODE_LENGTH, generate_join_code
from twincord.models.community import Community
from twincord.models.community_member import CommunityMember
from twincord.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10


@dataclass
class JoinResult:
    community: Community
    already_member: bool


class MembershipAdmission:
    """Validates and applies create/join requests against the community store."""

    def __init__(
        self,
        db: AsyncSession,
        code_length: int = DEFAULT_CODE_LENGTH,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        generate_code: Callable[[int], JoinCode] = generate_join_code,
    ):
        self.db = db
        self.code_length = code_length
        self.max_attempts = max_attempts
        self._generate_code = generate_code

    async def create_community(
        self, name: str, creator_id: UserId, description: str = "",
    ) -> Community:
        """Create a community with a fresh join code and the creator as sole member."""
        name = (name or "").strip()
        if not name:
            raise InvalidArgumentError("Missing name or creatorId", "name")
        if not creator_id:
            raise InvalidArgumentError("Missing name or creatorId", "creatorId")

        creator = await self.db.get(User, creator_id)
        if creator is None:
            raise ResourceNotFoundError("Creator", creator_id)

        for attempt in range(1, self.max_attempts + 1):
            code = self._generate_code(self.code_length)
            if await self._code_taken(code):
                logger.info(
                    "Join code collision, retrying",
                    extra={"attempt": attempt, "user_id": creator_id},
                )
                continue

            community = Community(
                name=name,
                description=description or "",
                code=code,
                creator_id=creator_id,
            )
            community.members.append(CommunityMember(user_id=creator_id))
            self.db.add(community)
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                logger.warning(
                    "Join code claimed concurrently, retrying",
                    extra={"attempt": attempt, "user_id": creator_id},
                )
                continue

            logger.info(
                f"Community created with code {code}",
                extra={"community_id": str(community.id), "user_id": creator_id},
            )
            return community

        logger.error(
            "Unable to generate unique join code",
            extra={"attempt": self.max_attempts, "user_id": creator_id},
        )
        raise CodeGenerationExhaustedError(
            self.max_attempts,
            ErrorContext(
                user_id=creator_id,
                debug_info={"code_length": self.code_length},
            ),
        )

    async def join_community(self, user_id: UserId, code: JoinCode) -> JoinResult:
        """Add user_id to the community holding `code`; no-op if already a member."""
        community = await self._find_by_code(code)
        if community is None:
            raise ResourceNotFoundError("Community", code)

        if community.has_member(user_id):
            return JoinResult(community, already_member=True)

        user = await self.db.get(User, user_id)
        if user is None:
            raise ResourceNotFoundError("User", user_id)

        community.members.append(CommunityMember(user_id=user_id))
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.info(
                "Concurrent join settled by unique constraint",
                extra={"user_id": user_id},
            )
            community = await self._find_by_code(code)
            return JoinResult(community, already_member=True)

        logger.info(
            "User joined community",
            extra={"community_id": str(community.id), "user_id": user_id},
        )
        return JoinResult(community, already_member=False)

    async def _code_taken(self, code: JoinCode) -> bool:
        result = await self.db.execute(
            select(Community.id).where(Community.code == code),
        )
        return result.scalar_one_or_none() is not None

    async def _find_by_code(self, code: JoinCode) -> Community | None:
        result = await self.db.execute(
            select(Community)
            .where(Community.code == code)
            .execution_options(populate_existing=True),
        )
        return result.scalar_one_or_none()
