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

from content.entities import Exercise
from managers.base import ParentedCollectionManager

COLLECTION_NAME = "exercises"


class ExerciseManager(ParentedCollectionManager[Exercise]):
    collection_name = COLLECTION_NAME
    entity_class = Exercise
    parent_field = "level_id"

    def list_by_level(self, level_id: str, active_only: bool = False) -> List[Exercise]:
        return self.list_by_parent(level_id, active_only)

    def list_by_muscle_group(
        self, muscle_group: str, active_only: bool = False
    ) -> List[Exercise]:
        """Exercises whose muscle group list contains `muscle_group`."""
        return self.list_containing("muscle_groups", muscle_group, active_only)
