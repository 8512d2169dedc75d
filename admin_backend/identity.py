"""
Identity provider abstraction for Firebase Auth and an in-memory test implementation.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol

import requests
from firebase_admin import auth as firebase_auth
from firebase_admin import exceptions as firebase_exceptions

logger = logging.getLogger(__name__)

SIGN_IN_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"
REQUEST_TIMEOUT = 30  # seconds


class AuthError(Exception):
    """A credential could not be created, signed in or verified."""


@dataclass(frozen=True)
class AuthUser:
    uid: str
    email: str
    id_token: Optional[str] = None


class IdentityProvider(Protocol):
    """Credential operations the console needs from the identity provider."""

    def create_user(self, email: str, password: str) -> AuthUser:
        ...

    def sign_in_with_password(self, email: str, password: str) -> AuthUser:
        ...

    def verify_id_token(self, id_token: str) -> AuthUser:
        ...


@dataclass
class InMemoryIdentityProvider:
    """Test double for the identity provider."""

    accounts: Dict[str, tuple[str, str]] = field(default_factory=dict)
    tokens: Dict[str, AuthUser] = field(default_factory=dict)

    def reset(self) -> None:
        self.accounts.clear()
        self.tokens.clear()

    def create_user(self, email: str, password: str) -> AuthUser:
        if not email or "@" not in email:
            raise AuthError("INVALID_EMAIL")
        if len(password or "") < 6:
            raise AuthError("WEAK_PASSWORD : Password should be at least 6 characters")
        if email in self.accounts:
            raise AuthError("EMAIL_EXISTS")
        uid = uuid.uuid4().hex[:28]
        self.accounts[email] = (uid, password)
        return AuthUser(uid=uid, email=email)

    def sign_in_with_password(self, email: str, password: str) -> AuthUser:
        account = self.accounts.get(email)
        if account is None or account[1] != password:
            raise AuthError("INVALID_LOGIN_CREDENTIALS")
        token = uuid.uuid4().hex
        user = AuthUser(uid=account[0], email=email, id_token=token)
        self.tokens[token] = user
        return user

    def verify_id_token(self, id_token: str) -> AuthUser:
        user = self.tokens.get(id_token)
        if user is None:
            raise AuthError("Invalid ID token")
        return user


@dataclass
class FirebaseIdentityProvider:
    """
    Firebase Auth implementation.

    User creation and token verification go through `firebase_admin.auth`.
    Password sign-in is not part of the Admin SDK, so it calls the Identity
    Toolkit REST endpoint with the project's web API key.
    """

    web_api_key: Optional[str] = None
    app: Any = None
    timeout: float = REQUEST_TIMEOUT

    def create_user(self, email: str, password: str) -> AuthUser:
        try:
            record = firebase_auth.create_user(email=email, password=password, app=self.app)
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            raise AuthError(str(e)) from e
        return AuthUser(uid=record.uid, email=record.email or email)

    def sign_in_with_password(self, email: str, password: str) -> AuthUser:
        if not self.web_api_key:
            raise AuthError("FIREBASE_WEB_API_KEY is not configured")
        try:
            response = requests.post(
                SIGN_IN_URL,
                params={"key": self.web_api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise AuthError(f"Sign-in request failed: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not response.ok:
            message = payload.get("error", {}).get("message") or response.reason
            raise AuthError(message)
        return AuthUser(
            uid=payload["localId"],
            email=payload.get("email", email),
            id_token=payload["idToken"],
        )

    def verify_id_token(self, id_token: str) -> AuthUser:
        try:
            claims = firebase_auth.verify_id_token(id_token, app=self.app)
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            raise AuthError(str(e)) from e
        return AuthUser(uid=claims["uid"], email=claims.get("email", ""), id_token=id_token)


AuthStateListener = Callable[[Optional[AuthUser]], None]


class IdentitySession:
    """
    One client's signed-in identity, with change notifications.

    `on_auth_state_changed` calls the listener once right away with the
    current user, then again on every sign-in and sign-out.
    """

    def __init__(self, provider: IdentityProvider, user: Optional[AuthUser] = None):
        self.provider = provider
        self.current_user = user
        self._listeners: List[AuthStateListener] = []
        self._lock = threading.Lock()

    def on_auth_state_changed(self, listener: AuthStateListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)
            current = self.current_user
        listener(current)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _set_user(self, user: Optional[AuthUser]) -> None:
        with self._lock:
            self.current_user = user
            listeners = list(self._listeners)
        for listener in listeners:
            listener(user)

    def sign_in(self, email: str, password: str) -> AuthUser:
        user = self.provider.sign_in_with_password(email, password)
        self._set_user(user)
        return user

    def sign_in_with_token(self, id_token: str) -> AuthUser:
        user = self.provider.verify_id_token(id_token)
        self._set_user(user)
        return user

    def sign_out(self) -> None:
        if self.current_user is None:
            return
        logger.info("Signing out %s", self.current_user.email)
        self._set_user(None)
