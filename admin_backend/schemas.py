"""
Pydantic schemas for the admin FastAPI backend.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    uid: str
    email: str
    id_token: Optional[str] = None
    is_admin: bool


class RegisterRequest(BaseModel):
    email: str
    password: str
    role: Literal["user", "admin"] = "user"


class RegisterResponse(BaseModel):
    success: bool
    uid: Optional[str] = None
    error: Optional[str] = None


class SessionResponse(BaseModel):
    is_authenticated: bool
    is_admin: bool
    uid: Optional[str] = None
    email: Optional[str] = None


class NavigationResponse(BaseModel):
    path: str
    allowed: bool
    redirect: Optional[str] = None


class EntityListResponse(BaseModel):
    items: list[dict[str, Any]]


class EntityResponse(BaseModel):
    item: dict[str, Any]


class CreateEntityResponse(BaseModel):
    id: str


class ToggleActiveRequest(BaseModel):
    is_active: bool


class SessionStatusRequest(BaseModel):
    status: str


class StatusResponse(BaseModel):
    status: Literal["ok"] = "ok"


class AdminSettingsResponse(BaseModel):
    settings: dict[str, Any]


class AdminSettingsPatch(BaseModel):
    app_version: Optional[str] = None
    feature_mode_setting: Optional[dict[str, Any]] = None
    notifications: Optional[dict[str, Any]] = None


class AdminEmailRequest(BaseModel):
    email: str


class ImageUploadResponse(BaseModel):
    url: Optional[str]
    public_id: Optional[str] = None


class AnimatedGifRequest(BaseModel):
    first_image: str = Field(..., min_length=1)
    second_image: str = Field(..., min_length=1)
    frame_delay: Optional[int] = Field(default=None, ge=1)
    public_id: Optional[str] = None
    folder: Optional[str] = None


class ImageUrlResponse(BaseModel):
    url: str


class PublicIdResponse(BaseModel):
    public_id: Optional[str] = None
