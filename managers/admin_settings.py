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
from typing import Mapping

from admin_backend.store import DocumentStore, StoreError
from content.entities import AdminSettings

logger = logging.getLogger(__name__)

COLLECTION_NAME = "adminSettings"
DEFAULT_SETTINGS_ID = "global"
DEFAULT_APP_VERSION = "1.0.0"


def default_settings() -> AdminSettings:
    return AdminSettings(
        id=DEFAULT_SETTINGS_ID,
        app_version=DEFAULT_APP_VERSION,
        admin_email_list=[],
        feature_mode_setting={
            "enablePremiumFeatures": False,
            "enableUserRegistration": True,
        },
        notifications={
            "enablePushNotifications": False,
            "reminderFrequency": "daily",
        },
    )


class AdminSettingsManager:
    """The singleton console settings document."""

    collection_name = COLLECTION_NAME

    def __init__(self, store: DocumentStore):
        self.store = store

    def get(self) -> AdminSettings:
        """Returns the settings, writing the defaults on first read."""
        try:
            data = self.store.get(self.collection_name, DEFAULT_SETTINGS_ID)
            if data is not None:
                return AdminSettings.from_document(DEFAULT_SETTINGS_ID, data)
            settings = default_settings()
            self.store.set(self.collection_name, DEFAULT_SETTINGS_ID, settings.to_document())
            logger.info("Created default admin settings")
            return settings
        except StoreError:
            logger.exception("Error getting admin settings")
            raise

    def update(self, settings: AdminSettings) -> None:
        try:
            self.store.update(
                self.collection_name, DEFAULT_SETTINGS_ID, settings.to_document()
            )
        except StoreError:
            logger.exception("Error updating admin settings")
            raise

    def add_admin_email(self, email: str) -> AdminSettings:
        settings = self.get()
        if email not in settings.admin_email_list:
            settings.admin_email_list.append(email)
            self.update(settings)
        return settings

    def remove_admin_email(self, email: str) -> AdminSettings:
        settings = self.get()
        settings.admin_email_list = [e for e in settings.admin_email_list if e != email]
        self.update(settings)
        return settings

    def update_app_version(self, version: str) -> AdminSettings:
        settings = self.get()
        settings.app_version = version
        self.update(settings)
        return settings

    def update_feature_settings(self, feature_settings: Mapping) -> AdminSettings:
        settings = self.get()
        settings.feature_mode_setting = {**settings.feature_mode_setting, **feature_settings}
        self.update(settings)
        return settings

    def update_notification_settings(self, notification_settings: Mapping) -> AdminSettings:
        settings = self.get()
        settings.notifications = {**settings.notifications, **notification_settings}
        self.update(settings)
        return settings
