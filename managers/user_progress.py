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

from content.entities import UserProgress
from managers.base import DEFAULT_LIMIT, TimelineCollectionManager

COLLECTION_NAME = "userProgress"


class UserProgressManager(TimelineCollectionManager[UserProgress]):
    collection_name = COLLECTION_NAME
    entity_class = UserProgress
    timeline_field = "completion_date"

    def list_by_user(self, user_id: str, limit: int = DEFAULT_LIMIT) -> List[UserProgress]:
        return self.list_by_field("user_id", user_id, limit=limit)

    def list_by_level(self, level_id: str, limit: int = DEFAULT_LIMIT) -> List[UserProgress]:
        return self.list_by_field("level_id", level_id, limit=limit)

    def list_by_exercise(
        self, exercise_id: str, limit: int = DEFAULT_LIMIT
    ) -> List[UserProgress]:
        return self.list_by_field("exercise_id", exercise_id, limit=limit)
