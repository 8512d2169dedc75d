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

from content.entities import PlanExercise
from managers.base import ParentedCollectionManager

COLLECTION_NAME = "plan_exercises"


class PlanExerciseManager(ParentedCollectionManager[PlanExercise]):
    """Exercises within a workout plan, ordered by their position in the plan."""

    collection_name = COLLECTION_NAME
    entity_class = PlanExercise
    parent_field = "plan_id"

    def list_by_plan(self, plan_id: str) -> List[PlanExercise]:
        return self.list_by_parent(plan_id)
