"""Stats Aggregator — point-in-time usage counts from the user and community stores.

Invariants:
    - The three counts run concurrently, each on its own session
    - The first failing count cancels the other two (TaskGroup)
    - Any failing count fails the whole snapshot with StatsUnavailableError;
      a partial snapshot is never returned
    - meetings_today is the constant placeholder 0

Design Decisions:
    - Session per count: an AsyncSession must not be shared across concurrent
      awaits, so fan-out needs a session factory rather than the request session
"""

import asyncio
import logging

from sqlalchemy import func, select

from twincord.core.errors import ErrorContext, StatsUnavailableError
from twincord.core.stats_snapshot import StatsSnapshot
from twincord.infrastructure.database import SessionFactory
from twincord.models.community import Community
from twincord.models.user import User

logger = logging.getLogger(__name__)


class StatsAggregator:
    """Computes a fresh StatsSnapshot on every call."""

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    async def snapshot(self) -> StatsSnapshot:
        try:
            async with asyncio.TaskGroup() as tg:
                total_users = tg.create_task(
                    self._count(select(func.count()).select_from(User)),
                )
                online_users = tg.create_task(
                    self._count(
                        select(func.count())
                        .select_from(User)
                        .where(User.is_online.is_(True)),
                    ),
                )
                total_communities = tg.create_task(
                    self._count(select(func.count()).select_from(Community)),
                )
        except ExceptionGroup as group:
            cause = group.exceptions[0]
            logger.error(
                f"Stats aggregation failed: {cause}", exc_info=cause,
            )
            raise StatsUnavailableError(
                ErrorContext(debug_info={"cause": type(cause).__name__}),
            ) from cause

        return StatsSnapshot(
            total_users=total_users.result(),
            online_users=online_users.result(),
            total_communities=total_communities.result(),
        )

    async def _count(self, query) -> int:
        async with self._session_factory() as db:
            result = await db.execute(query)
            return int(result.scalar_one())
