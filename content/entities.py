# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, ClassVar, List, Mapping, Optional

from dacite import Config, DaciteError, from_dict

from content.json_utils import convert_keys, snake_to_camel


class KeyStyle(StrEnum):
    """How attribute names are spelled in stored documents."""

    CAMEL = "camel"
    SNAKE = "snake"


class UserRole(StrEnum):
    USER = "user"
    ADMIN = "admin"


class SessionStatus(StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: Any) -> Any:
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    return value


def _widen_int(value: Any) -> Any:
    # JSON has one number type; 70 is a valid weight.
    if isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    return value


# Request values are checked against the declared field types.
ATTRIBUTE_CONFIG = Config(
    check_types=True,
    type_hooks={datetime: _parse_timestamp, float: _widen_int},
)


class DocumentEntity:
    """
    Mixin giving a dataclass entity its stored-document mapping.

    Subclasses declare which attribute carries the document id, how keys are
    spelled in the store, and which fields the managers use for ordering,
    soft delete and timestamps. Attribute names are always snake_case in
    Python; camelCase entities are converted at the document boundary.
    """

    ID_FIELD: ClassVar[str] = "id"
    KEY_STYLE: ClassVar[KeyStyle] = KeyStyle.CAMEL
    ORDER_FIELD: ClassVar[Optional[str]] = "order"
    ACTIVE_FIELD: ClassVar[Optional[str]] = "is_active"
    # Filled with the current time at write when unset.
    STAMP_ON_WRITE: ClassVar[tuple[str, ...]] = ("created_at", "updated_at")
    # Re-stamped by manager updates.
    UPDATED_FIELD: ClassVar[Optional[str]] = "updated_at"

    @classmethod
    def document_key(cls, attribute: str) -> str:
        if cls.KEY_STYLE == KeyStyle.CAMEL:
            return snake_to_camel(attribute)
        return attribute

    @classmethod
    def attribute_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}

    @classmethod
    def coerce_attributes(cls, values: Mapping[str, Any]) -> dict:
        """
        Validates snake_case attribute values against the entity's field types.

        ISO-8601 strings are accepted for datetime attributes and integers for
        float attributes. Only the given attributes are returned, so this also
        serves partial updates.

        Raises:
            ValueError: For unknown attributes, values of the wrong type or
                unparseable timestamps.
        """
        unknown = set(values) - cls.attribute_names()
        if unknown:
            raise ValueError(
                f"Unknown {cls.__name__} attributes: {', '.join(sorted(unknown))}"
            )
        try:
            entity = from_dict(data_class=cls, data=dict(values), config=ATTRIBUTE_CONFIG)
        except DaciteError as e:
            raise ValueError(f"Invalid {cls.__name__} attributes: {e}") from e
        return {name: getattr(entity, name) for name in values}

    @classmethod
    def from_attributes(cls, values: Mapping[str, Any]):
        """Builds an entity from snake_case attribute values, e.g. a request body."""
        return cls(**cls.coerce_attributes(values))

    @classmethod
    def from_document(cls, doc_id: str, data: Optional[dict]):
        """
        Builds an entity from a stored document.

        Missing keys and explicit nulls both fall back to the declared
        defaults. Keys the entity does not declare are ignored.
        """
        values = {key: value for key, value in (data or {}).items() if value is not None}
        if cls.KEY_STYLE == KeyStyle.CAMEL:
            values = convert_keys(values, "camel_to_snake", deep=False)
        known = cls.attribute_names()
        values = {key: value for key, value in values.items() if key in known}
        values[cls.ID_FIELD] = doc_id or ""
        return from_dict(data_class=cls, data=values, config=Config(check_types=False))

    def to_document(self) -> dict:
        """Returns the stored-document shape, without the id field."""
        now = utc_now()
        document: dict[str, Any] = {}
        for f in fields(self):
            if f.name == self.ID_FIELD:
                continue
            value = getattr(self, f.name)
            if value is None and f.name in self.STAMP_ON_WRITE:
                value = now
                setattr(self, f.name, value)
            document[f.name] = value
        if self.KEY_STYLE == KeyStyle.CAMEL:
            return convert_keys(document, "snake_to_camel", deep=False)
        return document

    @property
    def entity_id(self) -> str:
        return getattr(self, self.ID_FIELD)

    @entity_id.setter
    def entity_id(self, value: str) -> None:
        setattr(self, self.ID_FIELD, value)


# Web-admin entities, stored with camelCase keys.


@dataclass
class Category(DocumentEntity):
    id: str = ""
    name: str = ""
    description: str = ""
    icon: str = ""
    order: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class WorkoutType(DocumentEntity):
    id: str = ""
    category_id: str = ""
    name: str = ""
    description: str = ""
    equipment: str = ""
    duration: str = ""
    difficulty: str = ""
    image: str = ""
    order: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Level(DocumentEntity):
    id: str = ""
    workout_type_id: str = ""
    name: str = ""
    description: str = ""
    difficulty: str = ""
    duration_minutes: str = ""
    calories_burn: int = 0
    order: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Exercise(DocumentEntity):
    id: str = ""
    level_id: str = ""
    name: str = ""
    description: str = ""
    instructions: List[str] = field(default_factory=list)
    duration: int = 0
    reps: int = 0
    sets: int = 0
    rest_time: int = 0
    image: str = ""
    video: str = ""
    tips: List[str] = field(default_factory=list)
    muscle_groups: List[str] = field(default_factory=list)
    equipment: str = ""
    calories_burn: int = 0
    order: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class WorkoutSession(DocumentEntity):
    ORDER_FIELD: ClassVar[Optional[str]] = None
    ACTIVE_FIELD: ClassVar[Optional[str]] = None
    STAMP_ON_WRITE: ClassVar[tuple[str, ...]] = ("start_time",)

    id: str = ""
    user_id: str = ""
    level_id: str = ""
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration: int = 0
    total_calories_burned: int = 0
    completed_exercises: List[Any] = field(default_factory=list)
    status: str = SessionStatus.PENDING.value
    notes: str = ""
    updated_at: Optional[datetime] = None


@dataclass
class UserProgress(DocumentEntity):
    ORDER_FIELD: ClassVar[Optional[str]] = None
    ACTIVE_FIELD: ClassVar[Optional[str]] = None
    STAMP_ON_WRITE: ClassVar[tuple[str, ...]] = ("completion_date", "created_at")
    UPDATED_FIELD: ClassVar[Optional[str]] = None

    id: str = ""
    user_id: str = ""
    level_id: str = ""
    exercise_id: str = ""
    completion_date: Optional[datetime] = None
    duration: int = 0
    reps_completed: int = 0
    sets_completed: int = 0
    calories_burned: int = 0
    difficulty: str = ""
    notes: str = ""
    created_at: Optional[datetime] = None


@dataclass
class User(DocumentEntity):
    """A console or app user, keyed by the identity provider's uid."""

    ORDER_FIELD: ClassVar[Optional[str]] = None
    ACTIVE_FIELD: ClassVar[Optional[str]] = None

    id: str = ""
    email: str = ""
    display_name: str = ""
    avatar: str = ""
    age: Optional[int] = None
    gender: str = ""
    height: Optional[float] = None
    weight: Optional[float] = None
    fitness_level: str = ""
    goals: List[str] = field(default_factory=list)
    preferences: dict = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # "password", "google.com", "facebook.com"
    auth_provider: str = "password"
    role: str = UserRole.USER.value

    def has_complete_profile(self) -> bool:
        return bool(
            self.display_name
            and self.gender
            and self.age is not None
            and self.height is not None
            and self.weight is not None
            and self.fitness_level
        )

    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def minimal(
        cls,
        user_id: str,
        email: str,
        auth_provider: str = "password",
        role: str = UserRole.USER.value,
    ) -> "User":
        return cls(id=user_id, email=email, auth_provider=auth_provider, role=role)


@dataclass
class AdminSettings(DocumentEntity):
    ORDER_FIELD: ClassVar[Optional[str]] = None
    ACTIVE_FIELD: ClassVar[Optional[str]] = None
    STAMP_ON_WRITE: ClassVar[tuple[str, ...]] = ()
    UPDATED_FIELD: ClassVar[Optional[str]] = None

    id: str = ""
    app_version: str = ""
    admin_email_list: List[str] = field(default_factory=list)
    feature_mode_setting: dict = field(default_factory=dict)
    notifications: dict = field(default_factory=dict)


# Mobile-parity entities, stored with the app's snake_case keys.


@dataclass
class MainCategory(DocumentEntity):
    ID_FIELD: ClassVar[str] = "category_id"
    KEY_STYLE: ClassVar[KeyStyle] = KeyStyle.SNAKE
    ORDER_FIELD: ClassVar[Optional[str]] = "sort_order"
    STAMP_ON_WRITE: ClassVar[tuple[str, ...]] = ("updated_at",)

    category_id: str = ""
    name: str = ""
    name_en: str = ""
    description: str = ""
    icon_url: str = ""
    color: str = ""
    sort_order: int = 0
    is_active: bool = True
    updated_at: Optional[datetime] = None


@dataclass
class SubCategory(DocumentEntity):
    ID_FIELD: ClassVar[str] = "sub_category_id"
    KEY_STYLE: ClassVar[KeyStyle] = KeyStyle.SNAKE
    ORDER_FIELD: ClassVar[Optional[str]] = "sort_order"
    STAMP_ON_WRITE: ClassVar[tuple[str, ...]] = ("created_at",)
    UPDATED_FIELD: ClassVar[Optional[str]] = None

    sub_category_id: str = ""
    category_id: str = ""
    name: str = ""
    name_en: str = ""
    description: str = ""
    target_body_parts: List[str] = field(default_factory=list)
    color: str = ""
    icon_url: str = ""
    sort_order: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None


@dataclass
class DifficultyLevel(DocumentEntity):
    ID_FIELD: ClassVar[str] = "level_id"
    KEY_STYLE: ClassVar[KeyStyle] = KeyStyle.SNAKE
    ORDER_FIELD: ClassVar[Optional[str]] = None
    STAMP_ON_WRITE: ClassVar[tuple[str, ...]] = ("created_at",)
    UPDATED_FIELD: ClassVar[Optional[str]] = None

    level_id: str = ""
    sub_category_id: str = ""
    name: str = ""
    description: str = ""
    icon_url: str = ""
    color: str = ""
    level_requirements: str = ""
    is_active: bool = True
    created_at: Optional[datetime] = None


@dataclass
class WorkoutPlan(DocumentEntity):
    ID_FIELD: ClassVar[str] = "plan_id"
    KEY_STYLE: ClassVar[KeyStyle] = KeyStyle.SNAKE
    ORDER_FIELD: ClassVar[Optional[str]] = "sort_order"
    STAMP_ON_WRITE: ClassVar[tuple[str, ...]] = ("created_at",)
    UPDATED_FIELD: ClassVar[Optional[str]] = None

    plan_id: str = ""
    level_id: str = ""
    name: str = ""
    description: str = ""
    thumbnail_url: str = ""
    estimated_duration: int = 0
    estimated_calories: int = 0
    equipment_needed: List[str] = field(default_factory=list)
    sort_order: int = 0
    is_premium: bool = False
    is_active: bool = True
    created_at: Optional[datetime] = None


@dataclass
class PlanExercise(DocumentEntity):
    ID_FIELD: ClassVar[str] = "plan_exercise_id"
    KEY_STYLE: ClassVar[KeyStyle] = KeyStyle.SNAKE
    ORDER_FIELD: ClassVar[Optional[str]] = "order_index"
    ACTIVE_FIELD: ClassVar[Optional[str]] = None
    STAMP_ON_WRITE: ClassVar[tuple[str, ...]] = ()
    UPDATED_FIELD: ClassVar[Optional[str]] = None

    plan_exercise_id: str = ""
    plan_id: str = ""
    exercise_id: str = ""
    order_index: int = 0
    reps: int = 0
    sets: int = 0
    rest_time_seconds: int = 0
    weight_default: float = 0
    notes: str = ""
    is_warmup: bool = False
    is_cooldown: bool = False


@dataclass
class UserWorkout(DocumentEntity):
    ID_FIELD: ClassVar[str] = "workout_id"
    KEY_STYLE: ClassVar[KeyStyle] = KeyStyle.SNAKE
    ORDER_FIELD: ClassVar[Optional[str]] = None
    ACTIVE_FIELD: ClassVar[Optional[str]] = None
    STAMP_ON_WRITE: ClassVar[tuple[str, ...]] = ("created_at",)
    UPDATED_FIELD: ClassVar[Optional[str]] = None

    workout_id: str = ""
    user_id: str = ""
    plan_id: str = ""
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    total_duration: int = 0
    calories_burned: int = 0
    exercises_completed: int = 0
    completion_status: str = ""
    completion_rating: int = 0
    notes: str = ""
    difficulty_rating: int = 0
    created_at: Optional[datetime] = None


@dataclass
class UserFavorite(DocumentEntity):
    ID_FIELD: ClassVar[str] = "favorite_id"
    KEY_STYLE: ClassVar[KeyStyle] = KeyStyle.SNAKE
    ORDER_FIELD: ClassVar[Optional[str]] = None
    ACTIVE_FIELD: ClassVar[Optional[str]] = None
    STAMP_ON_WRITE: ClassVar[tuple[str, ...]] = ("created_at",)
    UPDATED_FIELD: ClassVar[Optional[str]] = None

    favorite_id: str = ""
    user_id: str = ""
    plan_id: str = ""
    created_at: Optional[datetime] = None
