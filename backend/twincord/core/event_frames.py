"""Event Frames — wire formatting for the text/event-stream stats channel.

Invariants:
    - Data frames are `event: <name>` + one `data:` JSON line + blank line
    - Heartbeat frames are SSE comments (leading colon): clients never see them
      as events, so they cannot be mistaken for a data emission
    - Pure functions, no IO

Design Decisions:
    - Named events (`stats` / `error`) instead of a `type` field inside data:
      EventSource clients subscribe per event name
"""

import json

from twincord.core.stats_snapshot import StatsSnapshot

STATS_EVENT = "stats"
ERROR_EVENT = "error"
HEARTBEAT_FRAME = ": heartbeat\n\n"


def format_event(event: str, payload: dict) -> str:
    """Format a named SSE event with a JSON body."""
    return f"event: {event}\ndata: {json.dumps(payload, ensure_ascii=False)}\n\n"


def stats_frame(snapshot: StatsSnapshot) -> str:
    return format_event(STATS_EVENT, {"success": True, "data": snapshot.to_dict()})


def error_frame(payload: dict) -> str:
    return format_event(ERROR_EVENT, payload)


def is_heartbeat(frame: str) -> bool:
    return frame.startswith(":")
