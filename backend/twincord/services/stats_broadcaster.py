"""Realtime Stats Broadcaster — per-connection push of stats snapshots.

Invariants:
    - Opening: the first frame is always a fresh snapshot, before any timer fires
    - Watching: every change notification triggers exactly one full snapshot
    - Degraded: attach failure, a feed error or a feed that ends drops the feed
      for the rest of the connection; no re-attach, the connection stays open
    - Snapshot timer emits unconditionally every snapshot_interval (staleness bound)
    - Heartbeat timer emits a comment frame every heartbeat_interval
    - Aggregation failures become `error` events; nothing a timer or the feed
      does can end the connection
    - Closing: both timers cancelled and the feed released before events() returns

Design Decisions:
    - No shared subscriber registry: each StatsSubscription is an isolated set
      of tasks feeding its own queue, torn down from one place (the finally of
      events()). Disconnect cancels the consumer, which cancels the producers
    - Redundant per-connection recomputation is accepted in exchange for isolation
"""

import asyncio
import itertools
import logging
from typing import AsyncIterator

from twincord.core.domain_types import EmissionTrigger, SubscriberState
from twincord.core.errors import TwincordError
from twincord.core.event_frames import HEARTBEAT_FRAME, error_frame, stats_frame
from twincord.core.repository_protocols import ChangeFeed, SnapshotFn, WatchFn

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOT_INTERVAL = 15.0
DEFAULT_HEARTBEAT_INTERVAL = 20.0

_subscriber_ids = itertools.count(1)


async def _no_change_feed() -> None:
    return None


class StatsSubscription:
    """One subscriber connection: its timers, its feed handle, its queue."""

    def __init__(
        self,
        snapshot: SnapshotFn,
        watch: WatchFn = _no_change_feed,
        snapshot_interval: float = DEFAULT_SNAPSHOT_INTERVAL,
        heartbeat_interval: float = DEFAULT_HEARTBEAT_INTERVAL,
    ):
        self._snapshot = snapshot
        self._watch = watch
        self._snapshot_interval = snapshot_interval
        self._heartbeat_interval = heartbeat_interval
        self._queue: asyncio.Queue[str] = asyncio.Queue()
        self._tasks: list[asyncio.Task] = []
        self._feed: ChangeFeed | None = None
        self.subscriber_id = next(_subscriber_ids)
        self.state = SubscriberState.OPENING

    @property
    def active_tasks(self) -> int:
        return sum(1 for t in self._tasks if not t.done())

    async def events(self) -> AsyncIterator[str]:
        """Yield SSE frames until the consumer stops iterating."""
        logger.info(
            "Stats subscriber connected",
            extra={"subscriber_id": self.subscriber_id},
        )
        await self._queue.put(await self._snapshot_frame(EmissionTrigger.OPEN))
        self._tasks = [
            asyncio.create_task(self._watch_changes()),
            asyncio.create_task(self._run_snapshot_timer()),
            asyncio.create_task(self._run_heartbeat_timer()),
        ]
        try:
            while True:
                yield await self._queue.get()
        finally:
            await self._shutdown()

    async def _shutdown(self) -> None:
        # Cancellation is requested synchronously; the watch task releases the
        # feed in its own finally even if this await is interrupted.
        self.state = SubscriberState.CLOSED
        for task in self._tasks:
            task.cancel()
        logger.info(
            "Stats subscriber disconnected",
            extra={"subscriber_id": self.subscriber_id},
        )
        await asyncio.gather(*self._tasks, return_exceptions=True)

    # -- Producers -------------------------------------------------------------

    async def _watch_changes(self) -> None:
        try:
            feed = await self._watch()
        except Exception as exc:
            logger.warning(
                f"Change feed attach raised: {exc}",
                extra={"subscriber_id": self.subscriber_id},
            )
            feed = None
        if feed is None:
            self._degrade("change feed unavailable")
            return

        self._feed = feed
        try:
            if self.state == SubscriberState.OPENING:
                self.state = SubscriberState.WATCHING
            async for _ in feed.changes():
                frame = await self._snapshot_frame(EmissionTrigger.CHANGE)
                await self._queue.put(frame)
            self._degrade("change feed ended")
        except Exception as exc:
            self._degrade(f"change feed error: {exc}")
        finally:
            await self._release_feed()

    async def _run_snapshot_timer(self) -> None:
        while True:
            await asyncio.sleep(self._snapshot_interval)
            await self._queue.put(await self._snapshot_frame(EmissionTrigger.TIMER))

    async def _run_heartbeat_timer(self) -> None:
        while True:
            await asyncio.sleep(self._heartbeat_interval)
            await self._queue.put(HEARTBEAT_FRAME)

    # -- Helpers ---------------------------------------------------------------

    async def _snapshot_frame(self, trigger: EmissionTrigger) -> str:
        """Fresh snapshot as a `stats` frame, or an `error` frame on failure."""
        try:
            snapshot = await self._snapshot()
        except TwincordError as exc:
            logger.error(
                f"Stats emission failed: {exc.message}",
                extra={
                    "subscriber_id": self.subscriber_id,
                    "error_code": exc.code,
                    "trigger": trigger.value,
                },
            )
            return error_frame(exc.to_sse_event())
        except Exception as exc:
            logger.error(
                f"Stats emission failed: {exc}",
                exc_info=True,
                extra={"subscriber_id": self.subscriber_id, "trigger": trigger.value},
            )
            return error_frame({"success": False, "error": "Failed to load stats"})
        return stats_frame(snapshot)

    def _degrade(self, reason: str) -> None:
        if self.state == SubscriberState.CLOSED:
            return
        self.state = SubscriberState.DEGRADED
        logger.warning(
            f"Stats subscriber degraded to timers: {reason}",
            extra={"subscriber_id": self.subscriber_id, "state": self.state.value},
        )

    async def _release_feed(self) -> None:
        feed, self._feed = self._feed, None
        if feed is None:
            return
        try:
            await feed.close()
        except Exception as exc:
            logger.warning(
                f"Change feed close failed: {exc}",
                extra={"subscriber_id": self.subscriber_id},
            )


class StatsBroadcaster:
    """Factory for independent subscriptions sharing one configuration."""

    def __init__(
        self,
        snapshot: SnapshotFn,
        watch: WatchFn = _no_change_feed,
        snapshot_interval: float = DEFAULT_SNAPSHOT_INTERVAL,
        heartbeat_interval: float = DEFAULT_HEARTBEAT_INTERVAL,
    ):
        self._snapshot = snapshot
        self._watch = watch
        self._snapshot_interval = snapshot_interval
        self._heartbeat_interval = heartbeat_interval

    def subscribe(self) -> StatsSubscription:
        return StatsSubscription(
            self._snapshot,
            self._watch,
            snapshot_interval=self._snapshot_interval,
            heartbeat_interval=self._heartbeat_interval,
        )
