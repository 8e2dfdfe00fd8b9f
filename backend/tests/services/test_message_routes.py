"""Message Routes — append and read the community log over HTTP.

Invariants:
    - Member post → 200 {success, message}; GET returns the full ordered log
    - Non-member post → 403 and the log is unchanged
    - Reads advertise pollIntervalSeconds for pull-based sync
"""

from uuid import uuid4


async def _community(client, creator_id="u1"):
    res = await client.post(
        "/api/communities", json={"name": "Room", "creatorId": creator_id},
    )
    return res.json()["community"]


async def test_post_then_read(client, seed_users):
    community = await _community(client)
    url = f"/api/communities/{community['id']}/messages"

    res = await client.post(url, json={"senderId": "u1", "text": "hi"})
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["message"]["text"] == "hi"
    assert body["message"]["senderName"] == "Ada"
    assert "messages" not in body

    res = await client.get(url)
    assert res.status_code == 200
    body = res.json()
    assert [m["text"] for m in body["messages"]] == ["hi"]
    assert body["messages"][0]["sender"]["name"] == "Ada"
    assert body["pollIntervalSeconds"] == 2.0


async def test_log_keeps_append_order(client, seed_users):
    community = await _community(client)
    await client.post(
        "/api/communities/join", json={"userId": "u2", "code": community["code"]},
    )
    url = f"/api/communities/{community['id']}/messages"

    for sender, text in [("u1", "one"), ("u2", "two"), ("u1", "three")]:
        res = await client.post(url, json={"senderId": sender, "text": text})
        assert res.status_code == 200

    messages = (await client.get(url)).json()["messages"]
    assert [m["text"] for m in messages] == ["one", "two", "three"]
    assert [m["senderId"] for m in messages] == ["u1", "u2", "u1"]


async def test_explicit_sender_name_is_kept(client, seed_users):
    community = await _community(client)
    res = await client.post(
        f"/api/communities/{community['id']}/messages",
        json={"senderId": "u1", "text": "hi", "senderName": "Countess"},
    )
    assert res.json()["message"]["senderName"] == "Countess"


async def test_non_member_is_forbidden(client, seed_users):
    community = await _community(client)
    url = f"/api/communities/{community['id']}/messages"

    res = await client.post(url, json={"senderId": "u2", "text": "let me in"})
    assert res.status_code == 403
    assert res.json() == {
        "success": False,
        "error": "You are not a member of this community",
        "code": "PERMISSION_DENIED",
    }
    assert (await client.get(url)).json()["messages"] == []


async def test_blank_text_is_400(client, seed_users):
    community = await _community(client)
    res = await client.post(
        f"/api/communities/{community['id']}/messages",
        json={"senderId": "u1", "text": "   "},
    )
    assert res.status_code == 400
    assert res.json()["success"] is False


async def test_unknown_community_is_404(client, seed_users):
    url = f"/api/communities/{uuid4()}/messages"
    assert (await client.get(url)).status_code == 404
    res = await client.post(url, json={"senderId": "u1", "text": "hi"})
    assert res.status_code == 404


async def test_malformed_community_id_is_404(client, seed_users):
    res = await client.get("/api/communities/xyz/messages")
    assert res.status_code == 404
