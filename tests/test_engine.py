"""
Tests for the access control engine lifecycle against a real store.

Covers:
- Loading state and refresh idempotence
- Mutation followed by full reload
- Load failures captured into ``error``
- Mutation failures propagated with the roster untouched
- Owner protection and dangling access level references
"""

from __future__ import annotations

import asyncio

import pytest

from app.access.engine import AccessControlEngine, Roster
from app.access.errors import OwnerRemovalError, StoreError
from painel_shared.schemas.common import DashboardRoute
from factories import InMemoryStore, make_level, make_user


class GatedStore(InMemoryStore):
    """Holds each access level read until its gate is opened."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.gates: list[asyncio.Event] = []

    async def list_access_levels(self):
        gate = asyncio.Event()
        self.gates.append(gate)
        await gate.wait()
        return await super().list_access_levels()


class TestLoading:
    async def test_engine_starts_loading_with_empty_roster(self, store):
        engine = AccessControlEngine(store)
        assert engine.is_loading
        assert engine.error is None
        assert engine.roster == Roster()

    async def test_refresh_finishes_loading(self, access_engine):
        assert not access_engine.is_loading
        assert access_engine.error is None
        assert access_engine.access_levels == []
        assert access_engine.org_users == []

    async def test_refresh_twice_yields_equal_roster(self, access_engine):
        await access_engine.create_access_level("Viewer", "", ["/"], False)
        await access_engine.refresh()
        first = access_engine.roster
        await access_engine.refresh()
        assert access_engine.roster == first

    async def test_overlapping_refreshes_both_complete(self):
        store = InMemoryStore([make_level()], [make_user("a@x.com")])
        engine = AccessControlEngine(store)
        await asyncio.gather(engine.refresh(), engine.refresh())
        assert store.list_calls == 2
        assert len(engine.access_levels) == 1
        assert len(engine.org_users) == 1

    async def test_loading_until_every_overlapping_refresh_ends(self):
        store = GatedStore([make_level()], [make_user("a@x.com")])
        engine = AccessControlEngine(store)
        first = asyncio.create_task(engine.refresh())
        second = asyncio.create_task(engine.refresh())
        while len(store.gates) < 2:
            await asyncio.sleep(0)

        store.gates[0].set()
        done, pending = await asyncio.wait({first, second}, return_when=asyncio.FIRST_COMPLETED)
        assert len(done) == 1
        assert engine.is_loading

        store.gates[1].set()
        await asyncio.gather(first, second)
        assert not engine.is_loading
        assert len(engine.org_users) == 1


class TestMutations:
    async def test_insert_then_refresh_round_trip(self, access_engine):
        await access_engine.create_access_level("Marketing", "", ["/campanhas"], False)
        await access_engine.refresh()
        levels = [level for level in access_engine.access_levels if level.name == "Marketing"]
        assert len(levels) == 1
        assert levels[0].allowed_routes == ["/campanhas"]
        assert levels[0].is_admin is False

    async def test_create_accepts_route_enum(self, access_engine):
        level = await access_engine.create_access_level(
            "CRM", None, [DashboardRoute.CRM_PIPELINES], False
        )
        assert level.allowed_routes == ["/crm/pipelines"]

    async def test_viewer_assignment_scenario(self, access_engine):
        viewer = await access_engine.create_access_level("Viewer", "", ["/"], False)
        await access_engine.create_org_user("a@x.com", "Ana", viewer.id)

        state = access_engine.resolve("a@x.com")
        assert state.access_level.id == viewer.id
        assert state.can_access("/")
        assert not state.can_access("/campanhas")

    async def test_update_access_level_is_partial(self, access_engine):
        level = await access_engine.create_access_level("Viewer", "read only", ["/"], False)
        await access_engine.update_access_level(
            level.id, {"allowed_routes": [DashboardRoute.OVERVIEW, DashboardRoute.CAMPAIGNS]}
        )
        (updated,) = access_engine.access_levels
        assert sorted(updated.allowed_routes) == ["/", "/campanhas"]
        assert updated.name == "Viewer"
        assert updated.description == "read only"

    async def test_promoting_level_to_admin_lifts_restrictions(self, access_engine):
        level = await access_engine.create_access_level("Viewer", "", ["/"], False)
        await access_engine.create_org_user("a@x.com", "Ana", level.id)
        assert not access_engine.can_access("a@x.com", "/configuracoes")

        await access_engine.update_access_level(level.id, {"is_admin": True})
        assert access_engine.can_access("a@x.com", "/configuracoes")

    async def test_create_org_user_lowercases_email(self, access_engine):
        user = await access_engine.create_org_user("Ana@X.com", "Ana", None)
        assert user.email == "ana@x.com"
        assert user.auth_user_id is None
        assert not user.is_owner
        assert access_engine.resolve("ana@x.com").current_user.id == user.id

    async def test_update_org_user_reassigns_and_unassigns(self, access_engine):
        viewer = await access_engine.create_access_level("Viewer", "", ["/"], False)
        user = await access_engine.create_org_user("a@x.com", "Ana", None)

        await access_engine.update_org_user(user.id, access_level_id=viewer.id)
        assert not access_engine.can_access("a@x.com", "/campanhas")

        await access_engine.update_org_user(user.id, access_level_id=None)
        assert access_engine.can_access("a@x.com", "/campanhas")

    async def test_update_org_user_name_only_keeps_level(self, access_engine):
        viewer = await access_engine.create_access_level("Viewer", "", ["/"], False)
        user = await access_engine.create_org_user("a@x.com", "Ana", viewer.id)

        await access_engine.update_org_user(user.id, name="Ana Maria")
        current = access_engine.resolve("a@x.com").current_user
        assert current.name == "Ana Maria"
        assert current.access_level_id == viewer.id

    async def test_delete_org_user(self, access_engine):
        user = await access_engine.create_org_user("a@x.com", "Ana", None)
        await access_engine.delete_org_user(user.id)
        assert access_engine.org_users == []

    async def test_deleting_referenced_level_falls_back_to_unrestricted(self, access_engine):
        viewer = await access_engine.create_access_level("Viewer", "", ["/"], False)
        await access_engine.create_org_user("a@x.com", "Ana", viewer.id)
        assert not access_engine.can_access("a@x.com", "/campanhas")

        await access_engine.delete_access_level(viewer.id)

        state = access_engine.resolve("a@x.com")
        assert state.current_user.access_level_id == viewer.id
        assert state.access_level is None
        assert state.can_access("/campanhas")


class TestOwner:
    async def test_owner_cannot_be_removed(self, store, access_engine):
        owner = await store.upsert_owner("owner@x.com", "Owner")
        await access_engine.refresh()

        with pytest.raises(OwnerRemovalError):
            await access_engine.delete_org_user(owner.id)
        assert [u.id for u in access_engine.org_users] == [owner.id]

    async def test_owner_bypasses_assigned_level(self, store, access_engine):
        viewer = await access_engine.create_access_level("Viewer", "", ["/"], False)
        owner = await store.upsert_owner("owner@x.com", "Owner")
        await access_engine.update_org_user(owner.id, access_level_id=viewer.id)

        state = access_engine.resolve("owner@x.com")
        assert state.access_level.id == viewer.id
        assert state.can_access("/configuracoes")


class TestErrors:
    async def test_load_failure_sets_error_and_clears_roster(self):
        store = InMemoryStore([make_level()], [make_user("a@x.com")])
        engine = AccessControlEngine(store)
        await engine.refresh()
        assert len(engine.org_users) == 1

        store.fail_reads = True
        await engine.refresh()

        assert engine.error == "store unavailable"
        assert not engine.is_loading
        assert engine.roster == Roster()
        assert engine.resolve("a@x.com").current_user is None

    async def test_successful_refresh_clears_previous_error(self):
        store = InMemoryStore()
        store.fail_reads = True
        engine = AccessControlEngine(store)
        await engine.refresh()
        assert engine.error

        store.fail_reads = False
        await engine.refresh()
        assert engine.error is None

    async def test_mutation_failure_propagates_and_keeps_roster(self):
        viewer = make_level("Viewer", ["/"])
        store = InMemoryStore([viewer], [make_user("a@x.com", viewer)])
        engine = AccessControlEngine(store)
        await engine.refresh()
        before = engine.roster

        store.fail_writes = True
        with pytest.raises(StoreError):
            await engine.create_access_level("Marketing", "", ["/campanhas"], False)
        with pytest.raises(StoreError):
            await engine.delete_access_level(viewer.id)

        assert engine.roster is before
        assert engine.error is None

    async def test_duplicate_email_is_a_store_error(self, access_engine):
        await access_engine.create_org_user("a@x.com", "Ana", None)
        before = access_engine.roster

        with pytest.raises(StoreError):
            await access_engine.create_org_user("a@x.com", "Ana again", None)
        assert access_engine.roster == before


async def test_invite_without_name(access_engine):
    user = await access_engine.create_org_user("a@x.com", None, None)
    assert user.name is None
    assert access_engine.resolve("a@x.com").current_user.name is None
