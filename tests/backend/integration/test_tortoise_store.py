"""
Integration tests for the Tortoise-backed store against in-memory SQLite.
"""
import pytest

from teamboard.core.pubsub import Channel
from teamboard.core.security import hash_password
from teamboard.services.entity_cache import EntityCache
from teamboard.services.store_base import NotFoundError, StoreError
from teamboard.services.tortoise_store import TortoiseStore


pytestmark = pytest.mark.asyncio


@pytest.fixture
def store():
    return TortoiseStore(channel=Channel())


async def _seed(store):
    user = await store.insert("users", {
        "username": "alice", "email": "alice@example.com", "password_hash": hash_password("pw"),
    })
    team = await store.insert("teams", {"name": "Core", "owner_id": user["id"]})
    await store.insert("team_members", {"team_id": team["id"], "user_id": user["id"], "role": "owner"})
    return user, team


async def test_insert_returns_jsonable_row_without_password(db, store):
    user, team = await _seed(store)

    assert isinstance(user["id"], str)
    assert isinstance(user["created_at"], str)
    assert "password_hash" not in user
    assert team["owner_id"] == user["id"]
    assert team["max_members"] == 10


async def test_select_filters_and_orders(db, store):
    user, team = await _seed(store)
    other = await store.insert("teams", {"name": "Other", "owner_id": user["id"]})
    first = await store.insert("projects", {"title": "first", "team_id": team["id"]})
    second = await store.insert("projects", {"title": "second", "team_id": other["id"]})

    newest_first = await store.select("projects", {"team_id": [team["id"], other["id"]]}, order_by="-created_at")
    only_core = await store.select("projects", {"team_id": team["id"]})

    assert [r["id"] for r in newest_first] == [second["id"], first["id"]]
    assert [r["title"] for r in only_core] == ["first"]


async def test_select_single_missing_raises_not_found(db, store):
    with pytest.raises(NotFoundError):
        await store.select("projects", {"title": "nope"}, single=True)


async def test_unknown_table_and_column_are_rejected(db, store):
    with pytest.raises(StoreError) as excinfo:
        await store.select("widgets")
    assert excinfo.value.code == "UNKNOWN_TABLE"

    with pytest.raises(StoreError) as excinfo:
        await store.select("projects", {"colour": "red"})
    assert excinfo.value.code == "VALIDATION_ERROR"


async def test_duplicate_username_is_integrity_error(db, store):
    await _seed(store)
    with pytest.raises(StoreError) as excinfo:
        await store.insert("users", {"username": "alice", "email": "other@example.com", "password_hash": "x"})
    assert excinfo.value.code == "INTEGRITY_ERROR"


async def test_update_single_row(db, store):
    _, team = await _seed(store)
    project = await store.insert("projects", {"title": "draft", "team_id": team["id"]})

    row = await store.update("projects", {"status": "active"}, {"id": project["id"]})

    assert row["status"] == "active"
    assert row["title"] == "draft"


async def test_update_missing_row_raises_not_found(db, store):
    await _seed(store)
    with pytest.raises(NotFoundError):
        await store.update("teams", {"name": "x"}, {"name": "ghost"})


async def test_delete_returns_count(db, store):
    _, team = await _seed(store)
    await store.insert("projects", {"title": "a", "team_id": team["id"]})
    await store.insert("projects", {"title": "b", "team_id": team["id"]})

    assert await store.delete("projects", {"team_id": team["id"]}) == 2
    assert await store.select("projects") == []


async def test_writes_publish_change_events(db, store):
    _, team = await _seed(store)
    events = []

    async def record(event):
        events.append(event)

    sub = await store.subscribe("projects", record)
    row = await store.insert("projects", {"title": "p", "team_id": team["id"]})
    await store.update("projects", {"title": "q"}, {"id": row["id"]})
    await store.delete("projects", {"id": row["id"]})
    sub.unsubscribe()

    assert [e.eventType for e in events] == ["INSERT", "UPDATE", "DELETE"]
    assert events[1].old["title"] == "p"
    assert events[1].new["title"] == "q"
    assert events[2].record_id == row["id"]


async def test_failed_write_publishes_nothing(db, store):
    await _seed(store)
    events = []

    async def record(event):
        events.append(event)

    await store.subscribe("users", record)
    with pytest.raises(StoreError):
        await store.insert("users", {"username": "alice", "email": "dup@example.com", "password_hash": "x"})

    assert events == []


async def test_entity_cache_follows_the_store(db, store):
    _, team = await _seed(store)
    existing = await store.insert("projects", {"title": "existing", "team_id": team["id"]})
    cache = EntityCache(store, table="projects")

    await cache.initialize()
    pushed = await store.insert("projects", {"title": "pushed", "team_id": team["id"]})
    await store.delete("projects", {"id": existing["id"]})

    assert [p.title for p in cache.values()] == ["pushed"]
    assert cache.get(pushed["id"]).team_id == team["id"]
    cache.close()
