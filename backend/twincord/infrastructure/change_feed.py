"""Change Feed — capability-checked store notifications via PostgreSQL LISTEN/NOTIFY.

Invariants:
    - try_watch() returns an attached feed or None; it never raises
    - None is returned for non-PostgreSQL engines and when the feed is disabled
    - A lost LISTEN connection surfaces as ChangeFeedError from changes()
    - close() is idempotent and always closes the LISTEN connection

Design Decisions:
    - Statement-level triggers (alembic 002) publish to the channel, so writes made
      outside this service (e.g. the identity layer flipping is_online) are seen too
    - One dedicated connection per feed: asyncpg delivers notifications only to
      the connection that issued LISTEN. Callers pass the NullPool
      listen_engine, so feeds never hold a request-pool connection
    - Payload is passed through untouched: subscribers recompute a full snapshot
      on any notification, they never apply diffs
"""

import asyncio
import logging
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from twincord.core.errors import ChangeFeedError

logger = logging.getLogger(__name__)

_TERMINATED = object()


class PostgresChangeFeed:
    """LISTEN on one channel over a dedicated asyncpg connection."""

    def __init__(self, connection: AsyncConnection, driver_connection, channel: str):
        self._connection = connection
        self._driver = driver_connection
        self._channel = channel
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    async def start(self) -> None:
        await self._driver.add_listener(self._channel, self._on_notify)
        self._driver.add_termination_listener(self._on_terminate)

    def _on_notify(self, connection, pid, channel, payload) -> None:
        self._queue.put_nowait(payload)

    def _on_terminate(self, connection) -> None:
        self._queue.put_nowait(_TERMINATED)

    async def changes(self) -> AsyncIterator[str]:
        while True:
            item = await self._queue.get()
            if item is _TERMINATED:
                raise ChangeFeedError("notification connection lost")
            yield item

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            if not self._driver.is_closed():
                await self._driver.remove_listener(self._channel, self._on_notify)
                self._driver.remove_termination_listener(self._on_terminate)
        finally:
            await self._connection.close()


async def try_watch(
    engine: AsyncEngine | None, channel: str, enabled: bool = True,
) -> PostgresChangeFeed | None:
    """Attach to the store's change notifications, or report that we cannot.

    `engine` should not be the request engine: the returned feed holds its
    connection until close().
    """
    if not enabled or engine is None:
        return None
    if engine.dialect.name != "postgresql":
        logger.info(
            "Change feed unsupported on %s, stats run on timers only",
            engine.dialect.name,
        )
        return None

    connection = None
    try:
        connection = await engine.connect()
        raw = await connection.get_raw_connection()
        feed = PostgresChangeFeed(connection, raw.driver_connection, channel)
        await feed.start()
        return feed
    except asyncio.CancelledError:
        await _close_quietly(connection)
        raise
    except Exception as exc:
        logger.warning(f"Change feed attach failed: {exc}")
        await _close_quietly(connection)
        return None


async def _close_quietly(connection: AsyncConnection | None) -> None:
    if connection is None:
        return
    try:
        await connection.close()
    except Exception as exc:
        logger.warning(f"Change feed connection close failed: {exc}")
