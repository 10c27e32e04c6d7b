"""
Unit tests for services.session_identity and services.sessions modules.
"""
import pytest

from teamboard.services.project_view import ProjectViewState, ViewStatus
from teamboard.services.session_identity import Identity
from teamboard.services.sessions import SessionRegistry
from teamboard.services.user_service import UserService


pytestmark = pytest.mark.asyncio


class TestSessionIdentity:
    async def test_sign_in_loads_profile_and_notifies(self, identity, world):
        seen = []

        async def listener(current):
            seen.append(current)

        identity.subscribe(listener)
        await identity.sign_in(Identity(id=world["user"]["id"]))

        assert identity.profile.username == "alice"
        assert seen == [Identity(id=world["user"]["id"])]

    async def test_missing_profile_does_not_block_sign_in(self, identity, caplog):
        await identity.sign_in(Identity(id="ghost"))

        assert identity.current == Identity(id="ghost")
        assert identity.profile is None
        assert "loading profile ghost failed" in caplog.text

    async def test_sign_out_clears_identity_and_profile(self, identity, world):
        await identity.sign_in(Identity(id=world["user"]["id"]))
        await identity.sign_out()
        assert identity.current is None
        assert identity.profile is None

    async def test_unsubscribed_listener_is_not_called(self, identity):
        calls = []

        async def listener(current):
            calls.append(current)

        unsubscribe = identity.subscribe(listener)
        unsubscribe()
        await identity.sign_out()
        assert calls == []


@pytest.fixture
def registry(store, service):
    return SessionRegistry(store, service, UserService(store), idle_timeout=600)


class TestSessionRegistry:
    async def test_open_signs_in_and_loads_view(self, registry, world):
        view = await registry.open(world["user"]["id"], world["user"]["email"])

        assert view.status == ViewStatus.READY
        assert [p.title for p in view.projects] == ["P2", "P1"]
        assert len(registry) == 1

    async def test_open_is_idempotent(self, store, registry, world):
        first = await registry.open(world["user"]["id"])
        second = await registry.open(world["user"]["id"])

        assert first is second
        assert store.channel.subscriber_count("projects") == 2

    async def test_close_releases_view_subscription(self, store, registry, world):
        view = await registry.open(world["user"]["id"])

        await registry.close(world["user"]["id"])

        assert registry.get(world["user"]["id"]) is None
        assert view.subscribed is False
        # only the shared cache keeps listening
        assert store.channel.subscriber_count("projects") == 1

    async def test_close_unknown_user_is_a_noop(self, registry):
        await registry.close("nobody")
        assert len(registry) == 0

    async def test_close_all(self, store, registry, world):
        other = store.seed("users", username="bob", email="bob@example.com")
        await registry.open(world["user"]["id"])
        await registry.open(other["id"])

        await registry.close_all()

        assert len(registry) == 0

    async def test_new_session_publishes_only_the_loaded_list(self, registry, world, monkeypatch):
        published = []
        original = ProjectViewState._publish

        async def record(view):
            published.append((view.status, [p.title for p in view.projects]))
            await original(view)

        monkeypatch.setattr(ProjectViewState, "_publish", record)

        await registry.open(world["user"]["id"])

        assert published == [(ViewStatus.READY, ["P2", "P1"])]


class TestSessionExpiry:
    async def test_expired_token_session_is_closed_on_next_open(self, store, registry, world):
        other = store.seed("users", username="bob", email="bob@example.com")
        stale = await registry.open(world["user"]["id"], expires_at=1000.0, now=900.0)

        await registry.open(other["id"], expires_at=5000.0, now=1001.0)

        assert registry.get(world["user"]["id"]) is None
        assert stale.subscribed is False
        assert len(registry) == 1
        # shared cache + bob's view
        assert store.channel.subscriber_count("projects") == 2

    async def test_idle_session_is_swept(self, store, registry, world):
        view = await registry.open(world["user"]["id"], now=0.0)

        closed = await registry.sweep(now=601.0)

        assert closed == 1
        assert view.subscribed is False
        assert store.channel.subscriber_count("projects") == 1

    async def test_activity_keeps_session_alive(self, registry, world):
        await registry.open(world["user"]["id"], now=0.0)
        await registry.open(world["user"]["id"], now=500.0)

        assert await registry.sweep(now=900.0) == 0
        assert registry.get(world["user"]["id"]) is not None

    async def test_fresh_token_extends_expiry(self, registry, world):
        await registry.open(world["user"]["id"], expires_at=100.0, now=0.0)
        await registry.open(world["user"]["id"], expires_at=400.0, now=50.0)

        assert await registry.sweep(now=200.0) == 0

    async def test_idle_timeout_zero_disables_idle_eviction(self, store, service, world):
        registry = SessionRegistry(store, service, UserService(store), idle_timeout=0)
        await registry.open(world["user"]["id"], now=0.0)

        assert await registry.sweep(now=10 ** 9) == 0
