"""
Navigation-time route guard.

Turns the engine's answers into one decision per requested path. The guard
itself performs no I/O; the middleware acts on the decision.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from app.access.engine import AuthorizationState
from painel_shared.schemas.common import ALL_ROUTES, HOME_ROUTE, PUBLIC_ROUTES


class GuardState(str, Enum):
    LOADING = "loading"
    EVALUATING = "evaluating"
    ALLOWED = "allowed"
    REDIRECTING = "redirecting"
    DENIED = "denied"


@dataclass(frozen=True)
class GuardDecision:
    state: GuardState
    path: str
    redirect_to: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.state == GuardState.ALLOWED


class RouteGuard:
    """
    Loading -> Evaluating once the roster is loaded; Evaluating -> Allowed
    on any permissive branch, otherwise Redirecting (to home). A redirect
    re-enters Evaluating for the new path on the next request.

    When home itself is refused the guard redirects to the first allowed
    catalog route instead, or answers Denied when there is none.
    """

    def __init__(
        self,
        public_routes: Iterable[str] = PUBLIC_ROUTES,
        home: str = HOME_ROUTE.value,
    ):
        self._public_routes = frozenset(public_routes)
        self._home = home

    @property
    def public_routes(self) -> frozenset[str]:
        return self._public_routes

    def evaluate(self, path: str, is_loading: bool, auth: AuthorizationState) -> GuardDecision:
        if is_loading:
            return GuardDecision(GuardState.LOADING, path)

        if path in self._public_routes:
            return GuardDecision(GuardState.ALLOWED, path)

        # Not on the roster yet: first-time setup passes through
        if auth.current_user is None and not auth.deny_all:
            return GuardDecision(GuardState.ALLOWED, path)

        if auth.is_admin:
            return GuardDecision(GuardState.ALLOWED, path)

        if auth.can_access(path):
            return GuardDecision(GuardState.ALLOWED, path)

        target = self._redirect_target(path, auth)
        if target is None:
            return GuardDecision(GuardState.DENIED, path)
        return GuardDecision(GuardState.REDIRECTING, path, redirect_to=target)

    def _redirect_target(self, path: str, auth: AuthorizationState) -> Optional[str]:
        if path != self._home:
            return self._home
        for route in ALL_ROUTES:
            if route != path and auth.can_access(route):
                return route
        return None
