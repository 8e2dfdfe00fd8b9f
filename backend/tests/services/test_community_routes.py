"""Community Routes — create, join, list and detail over HTTP.

Invariants:
    - POST /api/communities → 201 {success, community} with a 6-char code
    - Missing/blank fields → 400, unknown creator → 404, all {success: false, error}
    - Repeat join → 200 with "Already a member" and unchanged membership
    - ?userId filters to communities containing that user, newest first
"""

from uuid import uuid4

from twincord.core.join_codes import is_valid_join_code


async def _create(client, name="Test", creator_id="u1", **extra):
    res = await client.post(
        "/api/communities", json={"name": name, "creatorId": creator_id, **extra},
    )
    assert res.status_code == 201, res.text
    return res.json()["community"]


# -- create --------------------------------------------------------------------

async def test_create_returns_community_with_code(client, seed_users):
    res = await client.post(
        "/api/communities",
        json={"name": "Test", "description": "hello", "creatorId": "u1"},
    )
    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    community = body["community"]
    assert community["name"] == "Test"
    assert community["description"] == "hello"
    assert community["creatorId"] == "u1"
    assert community["members"] == ["u1"]
    assert community["creator"] == {"id": "u1", "name": "Ada", "email": "ada@example.com"}
    assert is_valid_join_code(community["code"], length=6)
    assert "messages" not in community


async def test_create_missing_name_is_400(client, seed_users):
    res = await client.post("/api/communities", json={"creatorId": "u1"})
    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"


async def test_create_blank_name_is_400(client, seed_users):
    res = await client.post("/api/communities", json={"name": "  ", "creatorId": "u1"})
    assert res.status_code == 400


async def test_create_unknown_creator_is_404(client, seed_users):
    res = await client.post("/api/communities", json={"name": "Test", "creatorId": "ghost"})
    assert res.status_code == 404
    assert res.json() == {
        "success": False,
        "error": "Creator not found",
        "code": "RESOURCE_NOT_FOUND",
    }


# -- join ----------------------------------------------------------------------

async def test_join_twice_is_idempotent(client, seed_users):
    community = await _create(client)

    first = await client.post(
        "/api/communities/join", json={"userId": "u2", "code": community["code"]},
    )
    second = await client.post(
        "/api/communities/join", json={"userId": "u2", "code": community["code"]},
    )

    assert first.status_code == second.status_code == 200
    assert "message" not in first.json()
    assert first.json()["community"]["members"] == ["u1", "u2"]
    assert second.json()["success"] is True
    assert second.json()["message"] == "Already a member"
    assert second.json()["community"]["memberCount"] == 2
    assert first.json()["community"]["creator"]["name"] == "Ada"
    assert second.json()["community"]["creator"]["name"] == "Ada"


async def test_join_accepts_lowercase_code(client, seed_users):
    community = await _create(client)
    res = await client.post(
        "/api/communities/join",
        json={"userId": "u2", "code": community["code"].lower()},
    )
    assert res.status_code == 200
    assert "u2" in res.json()["community"]["members"]


async def test_join_unknown_code_is_404(client, seed_users):
    res = await client.post("/api/communities/join", json={"userId": "u2", "code": "ZZZZZZ"})
    assert res.status_code == 404
    assert res.json()["error"] == "Community not found"


async def test_join_missing_fields_is_400(client, seed_users):
    res = await client.post("/api/communities/join", json={"userId": "u2"})
    assert res.status_code == 400


# -- list / detail -------------------------------------------------------------

async def test_list_filters_by_member_newest_first(client, seed_users):
    older = await _create(client, name="Older", creator_id="u1")
    newer = await _create(client, name="Newer", creator_id="u1")
    other = await _create(client, name="Other", creator_id="u2")

    res = await client.get("/api/communities", params={"userId": "u1"})
    assert res.status_code == 200
    ids = [c["id"] for c in res.json()["communities"]]
    assert ids == [newer["id"], older["id"]]

    res = await client.get("/api/communities")
    all_ids = [c["id"] for c in res.json()["communities"]]
    assert set(all_ids) == {older["id"], newer["id"], other["id"]}
    assert all_ids[0] == other["id"]


async def test_list_includes_joined_communities_and_resolved_creator(client, seed_users):
    community = await _create(client, creator_id="u1")
    await client.post("/api/communities/join", json={"userId": "u2", "code": community["code"]})

    res = await client.get("/api/communities", params={"userId": "u2"})
    [listed] = res.json()["communities"]
    assert listed["id"] == community["id"]
    assert listed["creator"] == {"id": "u1", "name": "Ada", "email": "ada@example.com"}
    assert "messages" not in listed


async def test_list_unknown_user_is_empty(client, seed_users):
    await _create(client)
    res = await client.get("/api/communities", params={"userId": "nobody"})
    assert res.json() == {"success": True, "communities": []}


async def test_detail_resolves_members_and_creator(client, seed_users):
    community = await _create(client)
    await client.post("/api/communities/join", json={"userId": "u3", "code": community["code"]})

    res = await client.get(f"/api/communities/{community['id']}")
    assert res.status_code == 200
    detail = res.json()["community"]
    assert detail["creator"]["name"] == "Ada"
    assert [m["name"] for m in detail["members"]] == ["Ada", "Linus"]
    assert detail["code"] == community["code"]


async def test_detail_unknown_or_malformed_id_is_404(client, seed_users):
    assert (await client.get(f"/api/communities/{uuid4()}")).status_code == 404
    res = await client.get("/api/communities/not-a-uuid")
    assert res.status_code == 404
    assert res.json()["success"] is False
