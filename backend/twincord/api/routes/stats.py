"""Stats — one-shot usage snapshot and the live text/event-stream channel.

Invariants:
    - GET /api/stats returns {success, data} or 503 {success: false, error}
    - GET /api/stats/stream stays open until the client disconnects; each
      connection gets its own StatsSubscription (no shared fan-out)
    - Disconnect cancels the response generator, which tears down the
      subscription's timers and change feed

Design Decisions:
    - SSE headers disable proxy buffering (nginx X-Accel-Buffering) and caching
    - Aggregator bound to a session factory, not the request session: the
      stream outlives the request dependency scope
"""

import logging
from functools import partial

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

import twincord.infrastructure.database as db_module
from twincord.config import get_settings
from twincord.infrastructure.change_feed import try_watch
from twincord.infrastructure.database import SessionFactory, get_session_factory
from twincord.services.stats_aggregator import StatsAggregator
from twincord.services.stats_broadcaster import StatsBroadcaster

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/stats", tags=["stats"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
    "Connection": "keep-alive",
}


def _create_broadcaster(session_factory: SessionFactory) -> StatsBroadcaster:
    settings = get_settings()
    engine = db_module.db_manager.listen_engine if db_module.db_manager else None
    return StatsBroadcaster(
        snapshot=StatsAggregator(session_factory).snapshot,
        watch=partial(
            try_watch, engine,
            settings.change_feed_channel, settings.change_feed_enabled,
        ),
        snapshot_interval=settings.stats_snapshot_interval_seconds,
        heartbeat_interval=settings.stats_heartbeat_interval_seconds,
    )


@router.get("")
async def get_stats(
    session_factory: SessionFactory = Depends(get_session_factory),
):
    """Aggregate counts for the dashboard."""
    snapshot = await StatsAggregator(session_factory).snapshot()
    return {"success": True, "data": snapshot.to_dict()}


@router.get("/stream")
async def stream_stats(
    session_factory: SessionFactory = Depends(get_session_factory),
):
    """Live stats: snapshot on connect, on store changes, and on a timer."""
    subscription = _create_broadcaster(session_factory).subscribe()
    return StreamingResponse(
        subscription.events(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
