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

from typing import List

from content.entities import User, UserRole
from managers.base import CollectionManager

COLLECTION_NAME = "users"


class UserManager(CollectionManager[User]):
    """User documents, keyed by the identity provider's uid."""

    collection_name = COLLECTION_NAME
    entity_class = User
    caller_assigned_ids = True

    def create_with_role(
        self, uid: str, email: str, role: str = UserRole.USER.value
    ) -> User:
        """Writes the role document that accompanies a new credential."""
        user = User.minimal(uid, email, role=UserRole(role).value)
        self.create(user)
        return user

    def has_admin_role(self, uid: str) -> bool:
        user = self.get_by_id(uid)
        return bool(user and user.is_admin())

    def list_by_role(self, role: str) -> List[User]:
        return self.list_by_field("role", UserRole(role).value)

    def list_all(self, active_only: bool = False) -> List[User]:
        # Users carry no order field; keep the console listing stable by email.
        users = super().list_all(active_only)
        return sorted(users, key=lambda user: user.email)
