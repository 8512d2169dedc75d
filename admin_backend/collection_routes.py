"""
CRUD routes shared by every entity collection.

Each collection is mounted under its own path segment and guarded by
`require_admin`. Request bodies use the entities' snake_case attribute names
whatever key style the collection stores.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Dict, Optional, Type

from fastapi import APIRouter, Body, Depends, HTTPException

from admin_backend.dependencies import get_document_store, require_admin
from admin_backend.errors import http_errors
from admin_backend.schemas import (
    CreateEntityResponse,
    EntityListResponse,
    EntityResponse,
    SessionStatusRequest,
    StatusResponse,
    ToggleActiveRequest,
)
from admin_backend.store import DocumentStore
from content.entities import DocumentEntity
from managers.base import CollectionManager, ParentedCollectionManager
from managers.categories import CategoryManager
from managers.difficulty_levels import DifficultyLevelManager
from managers.exercises import ExerciseManager
from managers.levels import LevelManager
from managers.main_categories import MainCategoryManager
from managers.plan_exercises import PlanExerciseManager
from managers.sub_categories import SubCategoryManager
from managers.user_favorites import UserFavoriteManager
from managers.user_progress import UserProgressManager
from managers.user_workouts import UserWorkoutManager
from managers.users import UserManager
from managers.workout_plans import WorkoutPlanManager
from managers.workout_sessions import WorkoutSessionManager
from managers.workout_types import WorkoutTypeManager

logger = logging.getLogger(__name__)

COLLECTION_MANAGERS: Dict[str, Type[CollectionManager]] = {
    "categories": CategoryManager,
    "workout-types": WorkoutTypeManager,
    "levels": LevelManager,
    "exercises": ExerciseManager,
    "workout-sessions": WorkoutSessionManager,
    "user-progress": UserProgressManager,
    "users": UserManager,
    "main-categories": MainCategoryManager,
    "sub-categories": SubCategoryManager,
    "difficulty-levels": DifficultyLevelManager,
    "workout-plans": WorkoutPlanManager,
    "plan-exercises": PlanExerciseManager,
    "user-workouts": UserWorkoutManager,
    "user-favorites": UserFavoriteManager,
}


def serialize_entity(entity: DocumentEntity) -> dict:
    item = asdict(entity)
    item["id"] = entity.entity_id
    return item


def build_collection_router(slug: str, manager_class: Type[CollectionManager]) -> APIRouter:
    router = APIRouter(
        prefix=f"/{slug}", tags=[slug], dependencies=[Depends(require_admin)]
    )
    entity_class = manager_class.entity_class
    label = entity_class.__name__

    def get_manager(store: DocumentStore = Depends(get_document_store)):
        return manager_class(store)

    @router.get("", response_model=EntityListResponse)
    def list_entities(
        active_only: bool = False,
        parent_id: Optional[str] = None,
        field: Optional[str] = None,
        value: Optional[str] = None,
        manager: CollectionManager = Depends(get_manager),
    ):
        with http_errors(label):
            if parent_id is not None:
                if not isinstance(manager, ParentedCollectionManager):
                    raise HTTPException(
                        status_code=400, detail=f"{slug} has no parent collection"
                    )
                items = manager.list_by_parent(parent_id, active_only)
            elif field is not None:
                if field not in entity_class.attribute_names():
                    raise HTTPException(status_code=400, detail=f"Unknown field: {field}")
                items = manager.list_by_field(field, value, active_only)
            else:
                items = manager.list_all(active_only)
        return EntityListResponse(items=[serialize_entity(item) for item in items])

    @router.get("/{entity_id}", response_model=EntityResponse)
    def get_entity(entity_id: str, manager: CollectionManager = Depends(get_manager)):
        with http_errors(label):
            entity = manager.get_by_id(entity_id)
        if entity is None:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return EntityResponse(item=serialize_entity(entity))

    @router.post("", response_model=CreateEntityResponse, status_code=201)
    def create_entity(
        payload: dict[str, Any] = Body(...),
        manager: CollectionManager = Depends(get_manager),
    ):
        with http_errors(label):
            entity = entity_class.from_attributes(payload)
            entity_id = manager.create(entity)
        logger.info("Created %s %s", label, entity_id)
        return CreateEntityResponse(id=entity_id)

    @router.patch("/{entity_id}", response_model=EntityResponse)
    def update_entity(
        entity_id: str,
        payload: dict[str, Any] = Body(...),
        manager: CollectionManager = Depends(get_manager),
    ):
        with http_errors(label):
            manager.update(entity_id, entity_class.coerce_attributes(payload))
            entity = manager.get_by_id(entity_id)
        if entity is None:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return EntityResponse(item=serialize_entity(entity))

    @router.delete("/{entity_id}", response_model=StatusResponse)
    def delete_entity(entity_id: str, manager: CollectionManager = Depends(get_manager)):
        with http_errors(label):
            manager.delete(entity_id)
        logger.info("Deleted %s %s", label, entity_id)
        return StatusResponse()

    @router.post("/{entity_id}/active", response_model=StatusResponse)
    def toggle_active(
        entity_id: str,
        payload: ToggleActiveRequest,
        manager: CollectionManager = Depends(get_manager),
    ):
        with http_errors(label):
            manager.toggle_active(entity_id, payload.is_active)
        return StatusResponse()

    if manager_class is WorkoutSessionManager:

        @router.patch("/{entity_id}/status", response_model=StatusResponse)
        def update_session_status(
            entity_id: str,
            payload: SessionStatusRequest,
            manager: WorkoutSessionManager = Depends(get_manager),
        ):
            with http_errors(label):
                manager.update_status(entity_id, payload.status)
            return StatusResponse()

    return router


def build_collection_routers() -> list[APIRouter]:
    return [
        build_collection_router(slug, manager_class)
        for slug, manager_class in COLLECTION_MANAGERS.items()
    ]
