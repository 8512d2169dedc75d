"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging
from typing import Optional

import firebase_admin
from fastapi import Header, HTTPException
from firebase_admin import credentials, firestore

from admin_backend.config import Settings, get_settings
from admin_backend.identity import (
    AuthError,
    FirebaseIdentityProvider,
    IdentityProvider,
    IdentitySession,
    InMemoryIdentityProvider,
)
from admin_backend.route_guard import AuthState, SessionContext
from admin_backend.store import (
    DocumentStore,
    FirestoreDocumentStore,
    InMemoryDocumentStore,
)
from image_pipeline.cloudinary import CloudinaryClient, ImageHost, InMemoryImageHost
from managers.admin_settings import AdminSettingsManager
from managers.users import UserManager

logger = logging.getLogger(__name__)

_document_store: DocumentStore | None = None
_identity_provider: IdentityProvider | None = None
_image_host: ImageHost | None = None


def _use_in_memory(settings: Settings) -> bool:
    return settings.use_in_memory_backends or not settings.firebase_configured


def get_firebase_app(settings: Settings):
    """Returns the default Firebase app, initializing it on first use."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    cred = None
    if settings.google_application_credentials:
        cred = credentials.Certificate(settings.google_application_credentials)
    options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else None
    logger.info("Initializing Firebase app for project %s", settings.firebase_project_id)
    return firebase_admin.initialize_app(cred, options)


def get_document_store() -> DocumentStore:
    """
    Return a singleton document store so data persists across requests.
    """
    global _document_store
    if _document_store:
        return _document_store

    settings = get_settings()
    if _use_in_memory(settings):
        _document_store = InMemoryDocumentStore()
    else:
        app = get_firebase_app(settings)
        _document_store = FirestoreDocumentStore(firestore.client(app))
    return _document_store


def get_identity_provider() -> IdentityProvider:
    global _identity_provider
    if _identity_provider:
        return _identity_provider

    settings = get_settings()
    if _use_in_memory(settings):
        _identity_provider = InMemoryIdentityProvider()
    else:
        _identity_provider = FirebaseIdentityProvider(
            web_api_key=settings.firebase_web_api_key,
            app=get_firebase_app(settings),
        )
    return _identity_provider


def get_image_host() -> ImageHost:
    global _image_host
    if _image_host:
        return _image_host

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.cloudinary_configured:
        _image_host = InMemoryImageHost()
    else:
        _image_host = CloudinaryClient(
            cloud_name=settings.cloudinary_cloud_name or "",
            upload_preset=settings.cloudinary_upload_preset or "",
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
        )
    return _image_host


def get_user_manager() -> UserManager:
    return UserManager(get_document_store())


def get_admin_settings_manager() -> AdminSettingsManager:
    return AdminSettingsManager(get_document_store())


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def open_session(token: Optional[str]) -> SessionContext:
    """
    Builds a resolved session context for a request.

    Raises:
        AuthError: If the token is present but does not verify.
    """
    identity = IdentitySession(get_identity_provider())
    if token:
        identity.sign_in_with_token(token)
    return SessionContext(identity, get_user_manager())


def get_session_context(
    authorization: Optional[str] = Header(default=None),
) -> SessionContext:
    try:
        return open_session(bearer_token(authorization))
    except AuthError as e:
        raise HTTPException(status_code=401, detail="Invalid or expired token") from e


def require_admin(authorization: Optional[str] = Header(default=None)) -> AuthState:
    """Request guard for admin-only routes: 401 without a valid token, 403 for non-admins."""
    token = bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Missing bearer token")
    session = get_session_context(authorization)
    state = session.wait_until_ready()
    session.close()
    if not state.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return state
