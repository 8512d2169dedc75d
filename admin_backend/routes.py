"""
HTTP routes for the admin backend API.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    Header,
    HTTPException,
    Query,
    Response,
    UploadFile,
)

from admin_backend.auth import register_user
from admin_backend.config import get_settings
from admin_backend.dependencies import (
    get_admin_settings_manager,
    get_identity_provider,
    get_image_host,
    get_session_context,
    get_user_manager,
    require_admin,
)
from admin_backend.errors import http_errors
from admin_backend.identity import AuthError, IdentityProvider, IdentitySession
from admin_backend.route_guard import SessionContext, resolve_navigation
from admin_backend.schemas import (
    AdminEmailRequest,
    AdminSettingsPatch,
    AdminSettingsResponse,
    AnimatedGifRequest,
    ImageUploadResponse,
    ImageUrlResponse,
    LoginRequest,
    LoginResponse,
    NavigationResponse,
    PublicIdResponse,
    RegisterRequest,
    RegisterResponse,
    SessionResponse,
    StatusResponse,
)
from content.entities import UserRole
from image_pipeline.animated_gif import upload_animated_gif
from image_pipeline.cloudinary import ImageHost, extract_public_id
from managers.admin_settings import AdminSettingsManager
from managers.users import UserManager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/auth/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    provider: IdentityProvider = Depends(get_identity_provider),
    users: UserManager = Depends(get_user_manager),
):
    """
    Signs in with email and password. Only admins get a session; anyone else
    is signed out again once the role check finishes.
    """
    identity = IdentitySession(provider)
    session = SessionContext(identity, users)
    try:
        user = identity.sign_in(payload.email, payload.password)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e
    state = session.wait_until_ready()
    session.close()
    if not state.is_admin:
        raise HTTPException(
            status_code=403, detail="Access denied. Admin privileges required."
        )
    return LoginResponse(
        uid=user.uid, email=user.email, id_token=user.id_token, is_admin=True
    )


@router.post("/auth/register", response_model=RegisterResponse, status_code=201)
def register(
    payload: RegisterRequest,
    response: Response,
    authorization: Optional[str] = Header(default=None),
    provider: IdentityProvider = Depends(get_identity_provider),
    users: UserManager = Depends(get_user_manager),
):
    """
    Creates a credential plus its role document.

    Open while no admin exists so the first admin can be set up; after that
    only admins may register accounts.
    """
    with http_errors("Users"):
        has_admin = bool(users.list_by_role(UserRole.ADMIN))
    if has_admin:
        require_admin(authorization)

    result = register_user(
        payload.email, payload.password, payload.role, identity=provider, users=users
    )
    if not result.success:
        response.status_code = 400
        return RegisterResponse(success=False, error=result.error)
    return RegisterResponse(success=True, uid=result.user.uid)


@router.get("/auth/session", response_model=SessionResponse)
def session_state(session: SessionContext = Depends(get_session_context)):
    state = session.wait_until_ready()
    session.close()
    return SessionResponse(
        is_authenticated=state.is_authenticated,
        is_admin=state.is_admin,
        uid=state.user.uid if state.user else None,
        email=state.user.email if state.user else None,
    )


@router.get("/navigation", response_model=NavigationResponse)
def navigation(
    path: str = Query(...),
    session: SessionContext = Depends(get_session_context),
):
    result = resolve_navigation(path, session)
    session.close()
    return NavigationResponse(
        path=result.path, allowed=result.allowed, redirect=result.redirect
    )


def _settings_response(settings) -> AdminSettingsResponse:
    return AdminSettingsResponse(settings=asdict(settings))


@router.get(
    "/admin-settings",
    response_model=AdminSettingsResponse,
    dependencies=[Depends(require_admin)],
)
def get_admin_settings(
    manager: AdminSettingsManager = Depends(get_admin_settings_manager),
):
    with http_errors("Admin settings"):
        settings = manager.get()
    return _settings_response(settings)


@router.patch(
    "/admin-settings",
    response_model=AdminSettingsResponse,
    dependencies=[Depends(require_admin)],
)
def update_admin_settings(
    payload: AdminSettingsPatch,
    manager: AdminSettingsManager = Depends(get_admin_settings_manager),
):
    with http_errors("Admin settings"):
        settings = manager.get()
        if payload.app_version is not None:
            settings = manager.update_app_version(payload.app_version)
        if payload.feature_mode_setting is not None:
            settings = manager.update_feature_settings(payload.feature_mode_setting)
        if payload.notifications is not None:
            settings = manager.update_notification_settings(payload.notifications)
    return _settings_response(settings)


@router.post(
    "/admin-settings/admin-emails",
    response_model=AdminSettingsResponse,
    dependencies=[Depends(require_admin)],
)
def add_admin_email(
    payload: AdminEmailRequest,
    manager: AdminSettingsManager = Depends(get_admin_settings_manager),
):
    with http_errors("Admin settings"):
        settings = manager.add_admin_email(payload.email)
    return _settings_response(settings)


@router.delete(
    "/admin-settings/admin-emails/{email}",
    response_model=AdminSettingsResponse,
    dependencies=[Depends(require_admin)],
)
def remove_admin_email(
    email: str,
    manager: AdminSettingsManager = Depends(get_admin_settings_manager),
):
    with http_errors("Admin settings"):
        settings = manager.remove_admin_email(email)
    return _settings_response(settings)


@router.post(
    "/images/upload",
    response_model=ImageUploadResponse,
    dependencies=[Depends(require_admin)],
)
def upload_image(
    file: UploadFile = File(...),
    folder: str | None = Form(None),
    tags: str | None = Form(None),
    public_id: str | None = Form(None),
    host: ImageHost = Depends(get_image_host),
):
    content = file.file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Empty file")
    tag_list = [tag.strip() for tag in (tags or "").split(",") if tag.strip()]
    result = host.upload_image(
        content,
        filename=file.filename or "upload",
        folder=folder,
        tags=tag_list,
        public_id=public_id,
    )
    if not result.success:
        raise HTTPException(status_code=502, detail=result.error or "Upload failed")
    return ImageUploadResponse(url=result.url, public_id=result.data.get("public_id"))


@router.post(
    "/images/animated-gif",
    response_model=ImageUploadResponse,
    dependencies=[Depends(require_admin)],
)
def create_animated_gif(
    payload: AnimatedGifRequest,
    host: ImageHost = Depends(get_image_host),
):
    settings = get_settings()
    result = upload_animated_gif(
        payload.first_image,
        payload.second_image,
        host,
        frame_delay=payload.frame_delay or settings.gif_frame_delay_ms,
        public_id=payload.public_id,
        folder=payload.folder,
        timeout=settings.image_request_timeout,
    )
    if not result.success:
        raise HTTPException(
            status_code=502, detail=result.error or "Failed to create animated GIF"
        )
    return ImageUploadResponse(url=result.url, public_id=result.data.get("public_id"))


@router.get(
    "/images/url",
    response_model=ImageUrlResponse,
    dependencies=[Depends(require_admin)],
)
def image_url(
    public_id: str = Query(..., min_length=1),
    width: int | None = None,
    height: int | None = None,
    crop: str | None = None,
    quality: str | None = None,
    image_format: str | None = Query(None, alias="format"),
    flags: str | None = None,
    host: ImageHost = Depends(get_image_host),
):
    url = host.get_image_url(
        public_id,
        width=width,
        height=height,
        crop=crop,
        quality=quality,
        format=image_format,
        flags=flags,
    )
    return ImageUrlResponse(url=url)


@router.get(
    "/images/public-id",
    response_model=PublicIdResponse,
    dependencies=[Depends(require_admin)],
)
def image_public_id(value: str = Query("")):
    return PublicIdResponse(public_id=extract_public_id(value))


@router.delete(
    "/images/{public_id:path}",
    response_model=StatusResponse,
    dependencies=[Depends(require_admin)],
)
def delete_image(public_id: str, host: ImageHost = Depends(get_image_host)):
    result = host.delete_image(public_id)
    if not result.success:
        raise HTTPException(status_code=502, detail=result.error or "Delete failed")
    return StatusResponse()
