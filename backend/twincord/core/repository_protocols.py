"""Boundary Protocols — contracts between the realtime core and the store shell.

Invariants:
    - The broadcaster only sees ChangeFeed / WatchFn, never a driver connection
    - A WatchFn returning None means "no change-notification support here";
      that is a valid, permanent configuration, not an error

Design Decisions:
    - Protocol over ABC: structural subtyping, fakes in tests need no base class
    - changes() is an async iterator; a raised exception is a feed error
"""

from typing import AsyncIterator, Awaitable, Callable, Protocol

from twincord.core.stats_snapshot import StatsSnapshot


class ChangeFeed(Protocol):
    """Store-level notification stream of data mutations."""

    def changes(self) -> AsyncIterator[str]: ...

    async def close(self) -> None: ...


WatchFn = Callable[[], Awaitable[ChangeFeed | None]]
SnapshotFn = Callable[[], Awaitable[StatsSnapshot]]
