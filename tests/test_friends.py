"""Friendship tests.

Learn: Tests cover:
1. canonical_pair — one row per unordered pair
2. Adding by id or by username, and reading from both sides
3. Self-friendship, unknown users and duplicates from either direction
4. Removal from either side
5. The race path: the primary key rejects a pair the pre-check missed
"""

import pytest
from sqlalchemy import delete, func, insert, select

from canwegame.db.models import Friendship, User
from canwegame.errors import Conflict, NotFound
from canwegame.schemas.user import is_user_id
from canwegame.services.friend_service import FriendService, canonical_pair
from canwegame.services.user_service import UserService


# ═══════════════════════════════════════════════════════════
# canonical_pair
# ═══════════════════════════════════════════════════════════


@pytest.mark.parametrize(
    "a, b, expected",
    [
        (1, 2, (1, 2)),
        (2, 1, (1, 2)),
        (7, 300, (7, 300)),
        (300, 7, (7, 300)),
    ],
)
def test_canonical_pair(a, b, expected):
    assert canonical_pair(a, b) == expected


async def _count_friendships(db_session) -> int:
    result = await db_session.execute(select(func.count()).select_from(Friendship))
    return result.scalar_one()


# ═══════════════════════════════════════════════════════════
# Add / list
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_add_friend_by_id(client, make_user):
    _, alice = await make_user("alice")
    bob_id, _ = await make_user("bob")

    r = await client.post(
        "/api/v1/users/friends", json={"friend_identifier": str(bob_id)}, headers=alice
    )
    assert r.status_code == 201
    friend = r.json()
    assert friend["id"] == bob_id
    assert friend["username"] == "bob"
    assert "friends_since" in friend
    assert "password_hash" not in friend


@pytest.mark.asyncio
async def test_add_friend_by_username(client, make_user):
    _, alice = await make_user("alice")
    bob_id, _ = await make_user("bob")

    r = await client.post(
        "/api/v1/users/friends", json={"friend_identifier": "bob"}, headers=alice
    )
    assert r.status_code == 201
    assert r.json()["id"] == bob_id


@pytest.mark.asyncio
async def test_friendship_is_symmetric(client, make_user):
    alice_id, alice = await make_user("alice")
    bob_id, bob = await make_user("bob")

    await client.post(
        "/api/v1/users/friends", json={"friend_identifier": "bob"}, headers=alice
    )

    r = await client.get("/api/v1/users/friends", headers=alice)
    assert [f["id"] for f in r.json()] == [bob_id]

    r = await client.get("/api/v1/users/friends", headers=bob)
    assert [f["id"] for f in r.json()] == [alice_id]


@pytest.mark.asyncio
async def test_list_friends_ordered_by_username(client, make_user):
    _, alice = await make_user("alice")
    for name in ("zed", "bob", "mia"):
        await make_user(name)
        r = await client.post(
            "/api/v1/users/friends", json={"friend_identifier": name}, headers=alice
        )
        assert r.status_code == 201

    r = await client.get("/api/v1/users/friends", headers=alice)
    assert [f["username"] for f in r.json()] == ["bob", "mia", "zed"]


@pytest.mark.asyncio
async def test_list_friends_empty(client, make_user):
    _, alice = await make_user("alice")
    r = await client.get("/api/v1/users/friends", headers=alice)
    assert r.status_code == 200
    assert r.json() == []


@pytest.mark.asyncio
async def test_duplicate_from_other_side(client, make_user, db_session):
    _, alice = await make_user("alice")
    _, bob = await make_user("bob")

    r = await client.post(
        "/api/v1/users/friends", json={"friend_identifier": "bob"}, headers=alice
    )
    assert r.status_code == 201

    r = await client.post(
        "/api/v1/users/friends", json={"friend_identifier": "alice"}, headers=bob
    )
    assert r.status_code == 409

    r = await client.post(
        "/api/v1/users/friends", json={"friend_identifier": "bob"}, headers=alice
    )
    assert r.status_code == 409

    assert await _count_friendships(db_session) == 1


@pytest.mark.asyncio
async def test_cannot_add_self(client, make_user):
    alice_id, alice = await make_user("alice")

    for identifier in (str(alice_id), "alice"):
        r = await client.post(
            "/api/v1/users/friends",
            json={"friend_identifier": identifier},
            headers=alice,
        )
        assert r.status_code == 400
        assert r.json()["detail"] == "Cannot add yourself as a friend."


@pytest.mark.asyncio
@pytest.mark.parametrize("identifier", ["99999", "nobody", str(2**31), "-5"])
async def test_add_unknown_user(client, make_user, identifier):
    _, alice = await make_user("alice")
    r = await client.post(
        "/api/v1/users/friends", json={"friend_identifier": identifier}, headers=alice
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_add_friend_requires_token(client, make_user):
    await make_user("bob")
    r = await client.post("/api/v1/users/friends", json={"friend_identifier": "bob"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_add_friend_race_reports_conflict(db_session, monkeypatch):
    """A concurrent add of the same pair lands between check and insert."""
    users = UserService(db_session)
    alice = await users.register("alice", "alice@x.com", "Secret1!")
    bob = await users.register("bob", "bob@x.com", "Secret1!")
    alice_id, bob_id = alice.id, bob.id

    low_id, high_id = canonical_pair(alice_id, bob_id)
    await db_session.execute(insert(Friendship).values(low_id=low_id, high_id=high_id))
    await db_session.commit()

    async def _missed(self, low_id, high_id):
        return None

    monkeypatch.setattr(FriendService, "_get_pair", _missed)
    with pytest.raises(Conflict):
        await FriendService(db_session).add_friend(bob_id, "alice")

    assert await _count_friendships(db_session) == 1


# ═══════════════════════════════════════════════════════════
# Remove
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
@pytest.mark.parametrize("remover", ["alice", "bob"])
async def test_remove_from_either_side(client, make_user, remover):
    alice_id, alice = await make_user("alice")
    _, bob = await make_user("bob")
    await client.post(
        "/api/v1/users/friends", json={"friend_identifier": "bob"}, headers=alice
    )

    headers, other = (alice, "bob") if remover == "alice" else (bob, str(alice_id))
    r = await client.delete(f"/api/v1/users/friends/{other}", headers=headers)
    assert r.status_code == 204

    for h in (alice, bob):
        r = await client.get("/api/v1/users/friends", headers=h)
        assert r.json() == []

    r = await client.delete(f"/api/v1/users/friends/{other}", headers=headers)
    assert r.status_code == 404
    assert r.json()["detail"] == "Friendship not found."


@pytest.mark.asyncio
async def test_remove_unknown_user(client, make_user):
    _, alice = await make_user("alice")
    r = await client.delete("/api/v1/users/friends/nobody", headers=alice)
    assert r.status_code == 404
    assert r.json()["detail"] == "Friend user not found."


@pytest.mark.asyncio
async def test_readd_after_remove(client, make_user):
    _, alice = await make_user("alice")
    await make_user("bob")

    await client.post(
        "/api/v1/users/friends", json={"friend_identifier": "bob"}, headers=alice
    )
    await client.delete("/api/v1/users/friends/bob", headers=alice)
    r = await client.post(
        "/api/v1/users/friends", json={"friend_identifier": "bob"}, headers=alice
    )
    assert r.status_code == 201


# ═══════════════════════════════════════════════════════════
# Identifiers: ids vs. usernames
# ═══════════════════════════════════════════════════════════


@pytest.mark.parametrize(
    "value, expected",
    [("42", True), ("007", True), ("1_000", False), ("-55", False), ("+7", False), ("٤٢", False)],
)
def test_is_user_id(value, expected):
    assert is_user_id(value) is expected


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["1_000", "-55", "4.2"])
async def test_number_like_usernames_reachable_by_name(client, make_user, name):
    _, alice = await make_user("alice")
    friend_id, _ = await make_user(name)

    r = await client.post(
        "/api/v1/users/friends", json={"friend_identifier": name}, headers=alice
    )
    assert r.status_code == 201
    assert r.json()["id"] == friend_id

    r = await client.delete(f"/api/v1/users/friends/{name}", headers=alice)
    assert r.status_code == 204


@pytest.mark.asyncio
async def test_add_friend_deleted_mid_request(db_session, monkeypatch):
    """The target disappears between lookup and insert: not found, not a duplicate."""
    users = UserService(db_session)
    alice = await users.register("alice", "alice@x.com", "Secret1!")
    bob = await users.register("bob", "bob@x.com", "Secret1!")
    alice_id, bob_id = alice.id, bob.id

    async def _stale_lookup(self, identifier):
        return bob

    monkeypatch.setattr(FriendService, "resolve_user", _stale_lookup)
    await db_session.execute(delete(User).where(User.id == bob_id))
    await db_session.commit()

    with pytest.raises(NotFound):
        await FriendService(db_session).add_friend(alice_id, "bob")

    assert await _count_friendships(db_session) == 0
