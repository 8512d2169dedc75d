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

import logging
from typing import Any, Generic, List, Mapping, Optional, Sequence, Type, TypeVar, Union

from admin_backend.store import (
    ARRAY_CONTAINS,
    EQUALS,
    DocumentStore,
    QueryFilter,
    StoreError,
)
from content.entities import DocumentEntity, utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=DocumentEntity)

DEFAULT_LIMIT = 100


class CollectionManager(Generic[T]):
    """
    CRUD operations scoped to one document store collection.

    Every call maps to a single store operation; store failures are logged
    and re-raised as `StoreError` without retries.
    """

    collection_name: str = ""
    entity_class: Type[T]
    # Set for entities keyed by an external identity, e.g. an auth uid.
    caller_assigned_ids: bool = False

    def __init__(self, store: DocumentStore, collection_name: Optional[str] = None):
        self.store = store
        if collection_name:
            self.collection_name = collection_name
        if not self.collection_name:
            raise ValueError(f"{type(self).__name__} needs a collection name")

    def _key(self, attribute: Optional[str]) -> Optional[str]:
        if attribute is None:
            return None
        return self.entity_class.document_key(attribute)

    def _active_filters(self, active_only: bool) -> list[QueryFilter]:
        active_field = self.entity_class.ACTIVE_FIELD
        if not active_only or active_field is None:
            return []
        return [QueryFilter(self._key(active_field), EQUALS, True)]

    def _run_query(
        self,
        filters: Sequence[QueryFilter],
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        description: str,
    ) -> List[T]:
        try:
            documents = self.store.query(
                self.collection_name,
                filters=filters,
                order_by=order_by,
                descending=descending,
                limit=limit,
            )
        except StoreError:
            logger.exception("Error getting %s", description)
            raise
        return [self.entity_class.from_document(doc_id, data) for doc_id, data in documents]

    def list_all(self, active_only: bool = False) -> List[T]:
        """Returns every entity, ordered by the entity's order field ascending."""
        return self._run_query(
            self._active_filters(active_only),
            order_by=self._key(self.entity_class.ORDER_FIELD),
            description=self.collection_name,
        )

    def list_by_field(
        self, attribute: str, value: Any, active_only: bool = False
    ) -> List[T]:
        filters = [QueryFilter(self._key(attribute), EQUALS, value)]
        return self._run_query(
            filters + self._active_filters(active_only),
            order_by=self._key(self.entity_class.ORDER_FIELD),
            description=f"{self.collection_name} with {attribute}={value}",
        )

    def list_containing(
        self, attribute: str, value: Any, active_only: bool = False
    ) -> List[T]:
        filters = [QueryFilter(self._key(attribute), ARRAY_CONTAINS, value)]
        return self._run_query(
            filters + self._active_filters(active_only),
            order_by=self._key(self.entity_class.ORDER_FIELD),
            description=f"{self.collection_name} containing {attribute}={value}",
        )

    def get_by_id(self, entity_id: str) -> Optional[T]:
        """Returns the entity, or None when no document exists at that id."""
        try:
            data = self.store.get(self.collection_name, entity_id)
        except StoreError:
            logger.exception("Error getting %s with ID %s", self.collection_name, entity_id)
            raise
        if data is None:
            return None
        return self.entity_class.from_document(entity_id, data)

    def create(self, entity: T) -> str:
        """Stores a new entity and returns its id."""
        document = entity.to_document()
        try:
            if self.caller_assigned_ids:
                if not entity.entity_id:
                    raise ValueError(
                        f"{self.collection_name} documents need a caller-assigned id"
                    )
                self.store.set(self.collection_name, entity.entity_id, document)
                entity_id = entity.entity_id
            else:
                entity_id = self.store.add(self.collection_name, document)
        except StoreError:
            logger.exception("Error creating %s", self.collection_name)
            raise
        entity.entity_id = entity_id
        return entity_id

    def _partial_document(self, fields: Union[T, Mapping[str, Any]]) -> dict:
        if isinstance(fields, DocumentEntity):
            return fields.to_document()
        unknown = set(fields) - self.entity_class.attribute_names()
        unknown.discard(self.entity_class.ID_FIELD)
        if unknown:
            raise ValueError(
                f"Unknown {self.collection_name} fields: {', '.join(sorted(unknown))}"
            )
        return {
            self._key(name): value
            for name, value in fields.items()
            if name != self.entity_class.ID_FIELD
        }

    def update(self, entity_id: str, fields: Union[T, Mapping[str, Any]]) -> None:
        """
        Merges the given fields into the stored document.

        `fields` is either a mapping of attribute names to values or a full
        entity. Fields that are not given are left untouched.
        """
        document = self._partial_document(fields)
        updated_key = self._key(self.entity_class.UPDATED_FIELD)
        if updated_key and (
            isinstance(fields, DocumentEntity) or updated_key not in document
        ):
            document[updated_key] = utc_now()
        try:
            self.store.update(self.collection_name, entity_id, document)
        except StoreError:
            logger.exception("Error updating %s with ID %s", self.collection_name, entity_id)
            raise

    def delete(self, entity_id: str) -> None:
        """Removes the document. Deleting a missing id is not an error."""
        try:
            self.store.delete(self.collection_name, entity_id)
        except StoreError:
            logger.exception("Error deleting %s with ID %s", self.collection_name, entity_id)
            raise

    def toggle_active(self, entity_id: str, is_active: bool) -> None:
        active_field = self.entity_class.ACTIVE_FIELD
        if active_field is None:
            raise ValueError(f"{self.collection_name} has no active flag")
        try:
            self.store.update(
                self.collection_name, entity_id, {self._key(active_field): is_active}
            )
        except StoreError:
            logger.exception(
                "Error toggling active state for %s with ID %s",
                self.collection_name,
                entity_id,
            )
            raise


class ParentedCollectionManager(CollectionManager[T]):
    """A collection whose entities point at a parent through an id field."""

    parent_field: str = ""

    def list_by_parent(self, parent_id: str, active_only: bool = False) -> List[T]:
        return self.list_by_field(self.parent_field, parent_id, active_only)


class TimelineCollectionManager(CollectionManager[T]):
    """A log-like collection read newest first with a result limit."""

    timeline_field: str = ""

    def _timeline(
        self, filters: Sequence[QueryFilter], limit: int, description: str
    ) -> List[T]:
        return self._run_query(
            filters,
            order_by=self._key(self.timeline_field),
            descending=True,
            limit=limit,
            description=description,
        )

    def list_all(self, active_only: bool = False) -> List[T]:
        return self._run_query(
            self._active_filters(active_only),
            order_by=self._key(self.timeline_field),
            descending=True,
            description=self.collection_name,
        )

    def list_recent(self, limit: int = DEFAULT_LIMIT) -> List[T]:
        return self._timeline([], limit, f"{self.collection_name} entries")

    def list_by_field(
        self, attribute: str, value: Any, active_only: bool = False, limit: int = DEFAULT_LIMIT
    ) -> List[T]:
        filters = [QueryFilter(self._key(attribute), EQUALS, value)]
        return self._timeline(
            filters + self._active_filters(active_only),
            limit,
            f"{self.collection_name} with {attribute}={value}",
        )
