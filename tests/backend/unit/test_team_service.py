"""
Unit tests for services.team_service module.
"""
import pytest

from teamboard.services.store_base import StoreError
from teamboard.services.team_service import TeamService


pytestmark = pytest.mark.asyncio


@pytest.fixture
def teams(store):
    return TeamService(store)


async def test_is_member(teams, world):
    t1, _, t3 = world["teams"]
    assert await teams.is_member(t1["id"], world["user"]["id"]) is True
    assert await teams.is_member(t3["id"], world["user"]["id"]) is False


async def test_is_member_failure_is_logged_and_raised(store, teams, world, caplog):
    store.fail("select", "team_members", "timeout")

    with pytest.raises(StoreError, match="timeout"):
        await teams.is_member(world["teams"][0]["id"], world["user"]["id"])

    assert "membership check" in caplog.text


async def test_create_enrols_owner(store, teams, world):
    team = await teams.create({"name": "New"}, owner_id=world["user"]["id"])

    members = [m for m in store.tables["team_members"].values() if m["team_id"] == team.id]
    assert [(m["user_id"], m["role"]) for m in members] == [(world["user"]["id"], "owner")]


async def test_add_member_refuses_when_full(store, teams, world):
    team = await teams.create({"name": "Pair", "max_members": 1}, owner_id=world["user"]["id"])

    with pytest.raises(StoreError) as excinfo:
        await teams.add_member(team.id, "someone")

    assert excinfo.value.code == "TEAM_FULL"
