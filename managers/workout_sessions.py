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

import logging
from typing import List

from admin_backend.store import StoreError
from content.entities import SessionStatus, WorkoutSession, utc_now
from managers.base import DEFAULT_LIMIT, TimelineCollectionManager

logger = logging.getLogger(__name__)

COLLECTION_NAME = "workoutSessions"


class WorkoutSessionManager(TimelineCollectionManager[WorkoutSession]):
    collection_name = COLLECTION_NAME
    entity_class = WorkoutSession
    timeline_field = "start_time"

    def list_by_user(self, user_id: str, limit: int = DEFAULT_LIMIT) -> List[WorkoutSession]:
        return self.list_by_field("user_id", user_id, limit=limit)

    def list_by_level(self, level_id: str, limit: int = DEFAULT_LIMIT) -> List[WorkoutSession]:
        return self.list_by_field("level_id", level_id, limit=limit)

    def list_by_status(self, status: str, limit: int = DEFAULT_LIMIT) -> List[WorkoutSession]:
        return self.list_by_field("status", SessionStatus(status).value, limit=limit)

    def update_status(self, session_id: str, status: str) -> None:
        """
        Sets the session status and stamps its update time.

        Raises:
            ValueError: If `status` is not one of pending, in_progress,
                completed or cancelled.
        """
        status = SessionStatus(status)
        try:
            self.store.update(
                self.collection_name,
                session_id,
                {"status": status.value, "updatedAt": utc_now()},
            )
        except StoreError:
            logger.exception(
                "Error updating status for workout session with ID %s", session_id
            )
            raise
