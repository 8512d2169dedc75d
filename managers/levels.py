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

from content.entities import Level
from managers.base import ParentedCollectionManager

COLLECTION_NAME = "levels"


class LevelManager(ParentedCollectionManager[Level]):
    collection_name = COLLECTION_NAME
    entity_class = Level
    parent_field = "workout_type_id"

    def list_by_workout_type(
        self, workout_type_id: str, active_only: bool = False
    ) -> List[Level]:
        return self.list_by_parent(workout_type_id, active_only)
