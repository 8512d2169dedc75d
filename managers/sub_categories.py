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

from content.entities import SubCategory
from managers.base import ParentedCollectionManager

COLLECTION_NAME = "sub_categories"


class SubCategoryManager(ParentedCollectionManager[SubCategory]):
    collection_name = COLLECTION_NAME
    entity_class = SubCategory
    parent_field = "category_id"

    def list_by_category(
        self, category_id: str, active_only: bool = False
    ) -> List[SubCategory]:
        return self.list_by_parent(category_id, active_only)
