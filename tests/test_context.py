"""
Tests for the application-scoped access control provider.
"""

from __future__ import annotations

import uuid

import pytest
from fastapi import FastAPI

from app.access.context import (
    AccessControlContext,
    get_access_control_engine,
    install_access_control,
)
from app.access.engine import AccessControlEngine
from app.access.errors import AccessControlConfigurationError
from app.core.auth import AuthenticatedIdentity
from factories import InMemoryStore, make_level, make_user


def test_engine_lookup_without_provider_raises():
    with pytest.raises(AccessControlConfigurationError):
        get_access_control_engine(FastAPI())


def test_installed_engine_is_shared():
    app = FastAPI()
    engine = AccessControlEngine(InMemoryStore())
    install_access_control(app, engine)
    assert get_access_control_engine(app) is engine
    assert get_access_control_engine(app) is get_access_control_engine(app)


async def test_context_exposes_resolved_state():
    viewer = make_level("Viewer", ["/"])
    user = make_user("a@x.com", viewer)
    engine = AccessControlEngine(InMemoryStore([viewer], [user]))
    await engine.refresh()

    ctx = AccessControlContext(engine, AuthenticatedIdentity(uuid.uuid4(), "a@x.com"))
    assert ctx.current_user.id == user.id
    assert ctx.access_level.id == viewer.id
    assert ctx.allowed_routes == ["/"]
    assert not ctx.is_admin
    assert not ctx.is_owner
    assert not ctx.can_access("/campanhas")
    assert ctx.access_levels == [viewer]
    assert ctx.org_users == [user]
    assert not ctx.is_loading
    assert ctx.error is None


async def test_context_re_resolves_after_mutation():
    viewer = make_level("Viewer", ["/"])
    user = make_user("a@x.com", viewer)
    engine = AccessControlEngine(InMemoryStore([viewer], [user]))
    await engine.refresh()

    ctx = AccessControlContext(engine, AuthenticatedIdentity(uuid.uuid4(), "a@x.com"))
    assert not ctx.can_access("/campanhas")

    await ctx.update_org_user(user.id, access_level_id=None)
    assert ctx.access_level is None
    assert ctx.can_access("/campanhas")


async def test_anonymous_context():
    engine = AccessControlEngine(InMemoryStore())
    await engine.refresh()
    ctx = AccessControlContext(engine)
    assert ctx.current_user is None
    assert ctx.can_access("/configuracoes")
