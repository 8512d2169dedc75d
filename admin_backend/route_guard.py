"""
Session context and navigation rules for the admin console.

A `SessionContext` follows one `IdentitySession`. Each time the identity
changes it runs the admin-role check exactly once and signs out any
non-admin. Until that check finishes the context is CHECKING, and
`wait_until_ready` blocks navigation decisions.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import StrEnum
from typing import Optional

from admin_backend.auth import verify_admin_access
from admin_backend.identity import AuthUser, IdentitySession
from managers.users import UserManager

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
SETUP_ADMIN_PATH = "/setup-admin"
ADMIN_PATH = "/admin"
ADMIN_HOME_PATH = "/admin/main-categories"


class AuthPhase(StrEnum):
    CHECKING = "checking"
    READY = "ready"


@dataclass(frozen=True)
class AuthState:
    is_authenticated: bool = False
    is_admin: bool = False
    user: Optional[AuthUser] = None


@dataclass(frozen=True)
class Route:
    path: str
    requires_admin: bool = False
    requires_guest: bool = False
    redirect: Optional[str] = None


ROUTES = (
    Route("/", redirect=LOGIN_PATH),
    Route(LOGIN_PATH, requires_guest=True),
    Route(SETUP_ADMIN_PATH),
    Route(ADMIN_PATH, requires_admin=True, redirect=ADMIN_HOME_PATH),
    Route(ADMIN_HOME_PATH, requires_admin=True),
    Route("/admin/sub-categories", requires_admin=True),
    Route("/admin/difficulty-levels", requires_admin=True),
    Route("/admin/workout-plans", requires_admin=True),
    Route("/admin/exercises", requires_admin=True),
    Route("/admin/users", requires_admin=True),
)
FALLBACK_ROUTE = Route("*", redirect=LOGIN_PATH)

_ROUTES_BY_PATH = {route.path: route for route in ROUTES}


@dataclass(frozen=True)
class NavigationResult:
    path: str
    allowed: bool
    redirect: Optional[str] = None


class SessionContext:
    """Resolved admin state for one identity session."""

    def __init__(self, identity: IdentitySession, users: UserManager):
        self.identity = identity
        self.users = users
        self.phase = AuthPhase.CHECKING
        self.state = AuthState()
        self._ready = threading.Event()
        self._lock = threading.Lock()
        self._resolved_uid: Optional[str] = None
        self._unsubscribe = identity.on_auth_state_changed(self._on_identity_changed)

    def close(self) -> None:
        self._unsubscribe()

    def _on_identity_changed(self, user: Optional[AuthUser]) -> None:
        uid = user.uid if user else None
        with self._lock:
            if self._ready.is_set() and uid == self._resolved_uid:
                return
            self.phase = AuthPhase.CHECKING
            self._ready.clear()
        self.resolve(user)

    def resolve(self, user: Optional[AuthUser]) -> AuthState:
        """Runs the role check for `user` and publishes the result."""
        is_admin = verify_admin_access(user, self.users)
        state = AuthState(
            is_authenticated=is_admin,
            is_admin=is_admin,
            user=user if is_admin else None,
        )
        with self._lock:
            self.state = state
            self._resolved_uid = user.uid if is_admin else None
            self.phase = AuthPhase.READY
            self._ready.set()

        if user is not None and not is_admin:
            logger.warning("User %s is not an admin, signing out", user.email)
            self.identity.sign_out()
        return state

    def wait_until_ready(self, timeout: Optional[float] = None) -> AuthState:
        if not self._ready.wait(timeout):
            raise TimeoutError("Timed out waiting for the admin-role check")
        return self.state


def match_route(path: str) -> Route:
    normalized = "/" + path.strip().strip("/") if path and path.strip("/ ") else "/"
    return _ROUTES_BY_PATH.get(normalized, FALLBACK_ROUTE)


def resolve_navigation(
    path: str, session: SessionContext, timeout: Optional[float] = None
) -> NavigationResult:
    """
    Decides whether a navigation to `path` may proceed.

    Redirect routes are followed first. The setup page is reachable without
    waiting for the session; every other decision waits until the session's
    role check has finished.
    """
    route = match_route(path)
    seen = set()
    while route.redirect and route.path not in seen:
        seen.add(route.path)
        route = match_route(route.redirect)
    target = route.path

    if target == SETUP_ADMIN_PATH:
        return NavigationResult(path=target, allowed=True)

    state = session.wait_until_ready(timeout)
    if route.requires_admin and not state.is_admin:
        return NavigationResult(path=target, allowed=False, redirect=LOGIN_PATH)
    if route.requires_guest and state.is_authenticated:
        return NavigationResult(path=target, allowed=False, redirect=ADMIN_HOME_PATH)
    return NavigationResult(path=target, allowed=True)
