"""
Tests for the route guard decision state machine.
"""

from __future__ import annotations

import pytest

from app.access.engine import AuthorizationState
from app.access.guard import GuardState, RouteGuard
from painel_shared.schemas.common import ALL_ROUTES, PUBLIC_ROUTES
from factories import make_level, make_user


@pytest.fixture
def guard():
    return RouteGuard()


def _viewer_state(routes=("/",)) -> AuthorizationState:
    level = make_level("Viewer", list(routes))
    return AuthorizationState(current_user=make_user("a@x.com", level), access_level=level)


class TestRouteGuard:
    def test_loading_shows_nothing(self, guard):
        decision = guard.evaluate("/campanhas", True, _viewer_state())
        assert decision.state == GuardState.LOADING
        assert not decision.allowed

    @pytest.mark.parametrize("path", sorted(PUBLIC_ROUTES))
    def test_public_routes_always_pass(self, guard, path):
        restricted = _viewer_state(routes=())
        assert guard.evaluate(path, False, restricted).state == GuardState.ALLOWED
        assert guard.evaluate(path, False, AuthorizationState(deny_all=True)).allowed

    def test_unknown_user_passes_through(self, guard):
        assert guard.evaluate("/configuracoes", False, AuthorizationState()).allowed

    def test_admin_passes(self, guard):
        admin = make_level("Admin", [], is_admin=True)
        state = AuthorizationState(current_user=make_user("b@x.com", admin), access_level=admin)
        for path in ALL_ROUTES:
            assert guard.evaluate(path, False, state).allowed

    def test_owner_passes(self, guard):
        level = make_level("Viewer", ["/"])
        state = AuthorizationState(
            current_user=make_user("o@x.com", level, is_owner=True), access_level=level
        )
        assert guard.evaluate("/configuracoes", False, state).allowed

    def test_allowed_route(self, guard):
        assert guard.evaluate("/", False, _viewer_state()).allowed

    def test_viewer_redirected_home(self, guard):
        decision = guard.evaluate("/campanhas", False, _viewer_state())
        assert decision.state == GuardState.REDIRECTING
        assert decision.redirect_to == "/"

    def test_redirect_home_even_when_home_is_not_whitelisted(self, guard):
        decision = guard.evaluate("/campanhas", False, _viewer_state(routes=("/eventos",)))
        assert decision.redirect_to == "/"

    def test_refused_home_falls_back_to_first_allowed_route(self, guard):
        state = _viewer_state(routes=("/eventos", "/campanhas"))
        decision = guard.evaluate("/", False, state)
        assert decision.state == GuardState.REDIRECTING
        # Catalog order, not whitelist order
        assert decision.redirect_to == "/campanhas"

    def test_refused_home_without_any_route_is_denied(self, guard):
        decision = guard.evaluate("/", False, _viewer_state(routes=()))
        assert decision.state == GuardState.DENIED
        assert decision.redirect_to is None

    def test_fail_closed_state_is_not_passed_through(self, guard):
        decision = guard.evaluate("/campanhas", False, AuthorizationState(deny_all=True))
        assert decision.state == GuardState.REDIRECTING
        assert guard.evaluate("/", False, AuthorizationState(deny_all=True)).state == GuardState.DENIED

    def test_custom_public_routes_and_home(self):
        guard = RouteGuard(public_routes={"/status"}, home="/eventos")
        assert guard.evaluate("/status", False, _viewer_state(routes=())).allowed
        assert guard.evaluate("/campanhas", False, _viewer_state()).redirect_to == "/eventos"
