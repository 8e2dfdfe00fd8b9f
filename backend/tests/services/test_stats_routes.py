"""Stats Routes — one-shot snapshot and the text/event-stream endpoint.

Invariants:
    - GET /api/stats → {success, data} with camelCase counts
    - A failing count → 503 {success: false, error: "Failed to load stats"}
    - GET /api/stats/stream responds with SSE headers and opens with a stats frame
"""

import asyncio
from contextlib import asynccontextmanager

from fastapi.responses import StreamingResponse

import twincord.api.routes.stats as stats_routes
import twincord.infrastructure.database as db_module
from twincord.api.routes.stats import stream_stats
from twincord.core.domain_types import SubscriberState
from twincord.core.event_frames import STATS_EVENT
from twincord.infrastructure.database import get_session_factory
from twincord.main import app
from twincord.models.community import Community
from twincord.services.stats_broadcaster import StatsBroadcaster


def _broken_session_factory():
    @asynccontextmanager
    async def factory():
        raise ConnectionError("store unreachable")
        yield  # pragma: no cover

    return factory


async def test_stats_counts(client, seed_users):
    res = await client.get("/api/stats")
    assert res.status_code == 200
    assert res.json() == {
        "success": True,
        "data": {
            "totalUsers": 3,
            "onlineUsers": 1,
            "totalCommunities": 0,
            "meetingsToday": 0,
        },
    }


async def test_stats_reflect_new_community(client, seed_users):
    await client.post("/api/communities", json={"name": "Room", "creatorId": "u2"})
    data = (await client.get("/api/stats")).json()["data"]
    assert data["totalCommunities"] == 1


async def test_stats_unavailable_is_503(client, seed_users):
    app.dependency_overrides[get_session_factory] = _broken_session_factory

    res = await client.get("/api/stats")

    assert res.status_code == 503
    body = res.json()
    assert body["success"] is False
    assert body["error"] == "Failed to load stats"


async def test_stream_headers_and_opening_frame(client, seed_users, test_session_factory):
    response = await stream_stats(session_factory=test_session_factory)

    assert isinstance(response, StreamingResponse)
    assert response.media_type == "text/event-stream"
    assert response.headers["cache-control"] == "no-cache"
    assert response.headers["x-accel-buffering"] == "no"

    body = response.body_iterator
    try:
        first = await body.__anext__()
    finally:
        await body.aclose()

    assert first.startswith(f"event: {STATS_EVENT}\n")
    assert '"totalUsers": 3' in first


async def test_stream_opening_frame_sees_seeded_communities(
    client, seed_users, test_db, test_session_factory,
):
    test_db.add(Community(name="Seeded", code="ABCDEF", creator_id="u1"))
    await test_db.commit()

    response = await stream_stats(session_factory=test_session_factory)
    body = response.body_iterator
    try:
        first = await body.__anext__()
    finally:
        await body.aclose()

    assert '"totalCommunities": 1' in first


async def test_stream_watches_on_the_listen_engine(
    client, seed_users, test_session_factory, monkeypatch,
):
    watched = []

    async def recording_watch(engine, channel, enabled=True):
        watched.append(engine)
        return None

    listen_engine = object()
    monkeypatch.setattr(stats_routes, "try_watch", recording_watch)
    monkeypatch.setattr(db_module.db_manager, "listen_engine", listen_engine)

    response = await stream_stats(session_factory=test_session_factory)
    body = response.body_iterator
    try:
        await body.__anext__()
        await asyncio.sleep(0.01)
    finally:
        await body.aclose()

    assert watched == [listen_engine]
    assert watched[0] is not db_module.db_manager.engine


async def test_client_disconnect_tears_down_the_subscription(
    client, seed_users, monkeypatch,
):
    subscriptions = []

    class RecordingBroadcaster(StatsBroadcaster):
        def subscribe(self):
            subscription = super().subscribe()
            subscriptions.append(subscription)
            return subscription

    monkeypatch.setattr(stats_routes, "StatsBroadcaster", RecordingBroadcaster)

    first_body = asyncio.Event()
    sent = []
    request_delivered = False

    async def receive():
        nonlocal request_delivered
        if not request_delivered:
            request_delivered = True
            return {"type": "http.request", "body": b"", "more_body": False}
        await first_body.wait()
        return {"type": "http.disconnect"}

    async def send(message):
        sent.append(message)
        if message["type"] == "http.response.body" and message.get("body"):
            first_body.set()

    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "path": "/api/stats/stream",
        "raw_path": b"/api/stats/stream",
        "root_path": "",
        "query_string": b"",
        "headers": [(b"host", b"test")],
        "client": ("127.0.0.1", 50000),
        "server": ("test", 80),
    }

    await asyncio.wait_for(app(scope, receive, send), timeout=5)
    await asyncio.sleep(0.05)

    [subscription] = subscriptions
    assert sent[0]["type"] == "http.response.start"
    assert sent[0]["status"] == 200
    assert any(
        m["type"] == "http.response.body" and m.get("body", b"").startswith(b"event: stats")
        for m in sent
    )
    assert subscription.state == SubscriberState.CLOSED
    assert subscription.active_tasks == 0
