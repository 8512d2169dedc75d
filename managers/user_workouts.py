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

from typing import List

from content.entities import UserWorkout
from managers.base import DEFAULT_LIMIT, TimelineCollectionManager

COLLECTION_NAME = "user_workouts"


class UserWorkoutManager(TimelineCollectionManager[UserWorkout]):
    collection_name = COLLECTION_NAME
    entity_class = UserWorkout
    timeline_field = "created_at"

    def list_by_user(self, user_id: str, limit: int = DEFAULT_LIMIT) -> List[UserWorkout]:
        return self.list_by_field("user_id", user_id, limit=limit)
