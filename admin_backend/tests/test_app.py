import asyncio
import os
import unittest
from unittest.mock import patch

os.environ.setdefault("USE_IN_MEMORY_BACKENDS", "true")

from fastapi.testclient import TestClient
from PIL import Image

from admin_backend.app import create_app
from admin_backend.config import get_settings
from admin_backend.dependencies import (
    get_document_store,
    get_identity_provider,
    get_image_host,
    require_admin,
)
from admin_backend.identity import InMemoryIdentityProvider
from admin_backend.route_guard import AuthState
from admin_backend.store import InMemoryDocumentStore
from image_pipeline import fetch_utils
from image_pipeline.cloudinary import InMemoryImageHost, UploadResult

ADMIN_EMAIL = "admin@example.com"
PASSWORD = "secret123"


class BackendApiTests(unittest.TestCase):
    def setUp(self):
        get_settings.cache_clear()
        self.app = create_app()
        self.client = TestClient(self.app)
        store = get_document_store()
        if isinstance(store, InMemoryDocumentStore):
            store.reset()
        provider = get_identity_provider()
        if isinstance(provider, InMemoryIdentityProvider):
            provider.reset()
        host = get_image_host()
        if isinstance(host, InMemoryImageHost):
            host.reset()

    def _bootstrap_admin(self) -> dict:
        response = self.client.post(
            "/api/auth/register",
            json={"email": ADMIN_EMAIL, "password": PASSWORD, "role": "admin"},
        )
        self.assertEqual(response.status_code, 201)
        login = self.client.post(
            "/api/auth/login", json={"email": ADMIN_EMAIL, "password": PASSWORD}
        )
        self.assertEqual(login.status_code, 200)
        return {"Authorization": f"Bearer {login.json()['id_token']}"}

    def _member_headers(self, admin_headers: dict) -> dict:
        response = self.client.post(
            "/api/auth/register",
            json={"email": "member@example.com", "password": PASSWORD},
            headers=admin_headers,
        )
        self.assertEqual(response.status_code, 201)
        user = get_identity_provider().sign_in_with_password(
            "member@example.com", PASSWORD
        )
        return {"Authorization": f"Bearer {user.id_token}"}

    def test_login_and_session(self):
        headers = self._bootstrap_admin()

        session = self.client.get("/api/auth/session", headers=headers)
        self.assertEqual(session.status_code, 200)
        self.assertTrue(session.json()["is_admin"])
        self.assertEqual(session.json()["email"], ADMIN_EMAIL)

        anonymous = self.client.get("/api/auth/session")
        self.assertFalse(anonymous.json()["is_authenticated"])

    def test_login_rejects_bad_password_and_non_admins(self):
        admin_headers = self._bootstrap_admin()
        self._member_headers(admin_headers)

        bad = self.client.post(
            "/api/auth/login", json={"email": ADMIN_EMAIL, "password": "wrong"}
        )
        self.assertEqual(bad.status_code, 401)

        member = self.client.post(
            "/api/auth/login", json={"email": "member@example.com", "password": PASSWORD}
        )
        self.assertEqual(member.status_code, 403)

    def test_register_needs_admin_once_an_admin_exists(self):
        self._bootstrap_admin()
        response = self.client.post(
            "/api/auth/register",
            json={"email": "other@example.com", "password": PASSWORD, "role": "admin"},
        )
        self.assertEqual(response.status_code, 401)

    def test_register_reports_failures(self):
        headers = self._bootstrap_admin()
        response = self.client.post(
            "/api/auth/register",
            json={"email": ADMIN_EMAIL, "password": PASSWORD},
            headers=headers,
        )
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])
        self.assertIn("EMAIL_EXISTS", response.json()["error"])

    def test_collection_routes_need_admin(self):
        admin_headers = self._bootstrap_admin()
        member_headers = self._member_headers(admin_headers)

        self.assertEqual(self.client.get("/api/categories").status_code, 401)
        self.assertEqual(
            self.client.get(
                "/api/categories", headers={"Authorization": "Bearer bogus"}
            ).status_code,
            401,
        )
        self.assertEqual(
            self.client.get("/api/categories", headers=member_headers).status_code, 403
        )

    def test_category_crud(self):
        headers = self._bootstrap_admin()

        created = self.client.post(
            "/api/categories",
            json={"name": "Strength", "order": 2},
            headers=headers,
        )
        self.assertEqual(created.status_code, 201)
        category_id = created.json()["id"]
        self.client.post(
            "/api/categories", json={"name": "Cardio", "order": 1}, headers=headers
        )

        listed = self.client.get("/api/categories", headers=headers)
        self.assertEqual(
            [item["name"] for item in listed.json()["items"]], ["Cardio", "Strength"]
        )

        patched = self.client.patch(
            f"/api/categories/{category_id}",
            json={"description": "Lift things"},
            headers=headers,
        )
        self.assertEqual(patched.status_code, 200)
        self.assertEqual(patched.json()["item"]["description"], "Lift things")
        self.assertEqual(patched.json()["item"]["name"], "Strength")

        toggled = self.client.post(
            f"/api/categories/{category_id}/active",
            json={"is_active": False},
            headers=headers,
        )
        self.assertEqual(toggled.status_code, 200)
        active = self.client.get(
            "/api/categories", params={"active_only": True}, headers=headers
        )
        self.assertEqual([item["name"] for item in active.json()["items"]], ["Cardio"])

        deleted = self.client.delete(f"/api/categories/{category_id}", headers=headers)
        self.assertEqual(deleted.json()["status"], "ok")
        missing = self.client.get(f"/api/categories/{category_id}", headers=headers)
        self.assertEqual(missing.status_code, 404)

    def test_invalid_payloads(self):
        headers = self._bootstrap_admin()
        unknown = self.client.post(
            "/api/categories", json={"colour": "red"}, headers=headers
        )
        self.assertEqual(unknown.status_code, 400)

        missing = self.client.patch(
            "/api/categories/nope", json={"name": "x"}, headers=headers
        )
        self.assertEqual(missing.status_code, 404)

        no_flag = self.client.post(
            "/api/plan-exercises", json={"plan_id": "p1"}, headers=headers
        )
        toggle = self.client.post(
            f"/api/plan-exercises/{no_flag.json()['id']}/active",
            json={"is_active": False},
            headers=headers,
        )
        self.assertEqual(toggle.status_code, 400)

    def test_wrong_typed_values_are_rejected(self):
        headers = self._bootstrap_admin()
        created = self.client.post(
            "/api/categories", json={"name": "A", "order": 1}, headers=headers
        )
        self.assertEqual(created.status_code, 201)

        bad_create = self.client.post(
            "/api/categories",
            json={"name": "B", "order": "two", "is_active": "no"},
            headers=headers,
        )
        self.assertEqual(bad_create.status_code, 400)
        bad_patch = self.client.patch(
            f"/api/categories/{created.json()['id']}",
            json={"order": "two"},
            headers=headers,
        )
        self.assertEqual(bad_patch.status_code, 400)

        listed = self.client.get("/api/categories", headers=headers)
        self.assertEqual(listed.status_code, 200)
        self.assertEqual([item["order"] for item in listed.json()["items"]], [1])

    def test_parent_filter(self):
        headers = self._bootstrap_admin()
        self.client.post(
            "/api/sub-categories",
            json={"category_id": "main1", "name": "Upper body", "sort_order": 1},
            headers=headers,
        )
        self.client.post(
            "/api/sub-categories",
            json={"category_id": "main2", "name": "Legs", "sort_order": 1},
            headers=headers,
        )

        response = self.client.get(
            "/api/sub-categories", params={"parent_id": "main1"}, headers=headers
        )
        items = response.json()["items"]
        self.assertEqual([item["name"] for item in items], ["Upper body"])
        self.assertEqual(items[0]["id"], items[0]["sub_category_id"])

        not_parented = self.client.get(
            "/api/users", params={"parent_id": "x"}, headers=headers
        )
        self.assertEqual(not_parented.status_code, 400)

    def test_workout_session_status(self):
        headers = self._bootstrap_admin()
        created = self.client.post(
            "/api/workout-sessions",
            json={"user_id": "u1", "start_time": "2024-05-01T10:00:00+00:00"},
            headers=headers,
        )
        session_id = created.json()["id"]

        updated = self.client.patch(
            f"/api/workout-sessions/{session_id}/status",
            json={"status": "completed"},
            headers=headers,
        )
        self.assertEqual(updated.status_code, 200)
        fetched = self.client.get(f"/api/workout-sessions/{session_id}", headers=headers)
        self.assertEqual(fetched.json()["item"]["status"], "completed")
        self.assertTrue(fetched.json()["item"]["start_time"].startswith("2024-05-01T10:00:00"))

        invalid = self.client.patch(
            f"/api/workout-sessions/{session_id}/status",
            json={"status": "paused"},
            headers=headers,
        )
        self.assertEqual(invalid.status_code, 400)

    def test_store_outage_maps_to_503(self):
        self.app.dependency_overrides[require_admin] = lambda: AuthState(True, True)
        store = get_document_store()
        store.available = False
        response = self.client.get("/api/exercises")
        self.assertEqual(response.status_code, 503)

    def test_admin_settings(self):
        headers = self._bootstrap_admin()

        settings = self.client.get("/api/admin-settings", headers=headers)
        self.assertEqual(settings.status_code, 200)
        self.assertEqual(settings.json()["settings"]["app_version"], "1.0.0")

        patched = self.client.patch(
            "/api/admin-settings",
            json={
                "app_version": "1.2.0",
                "notifications": {"reminderFrequency": "weekly"},
            },
            headers=headers,
        )
        body = patched.json()["settings"]
        self.assertEqual(body["app_version"], "1.2.0")
        self.assertEqual(body["notifications"]["reminderFrequency"], "weekly")
        self.assertFalse(body["notifications"]["enablePushNotifications"])

        added = self.client.post(
            "/api/admin-settings/admin-emails",
            json={"email": "ops@example.com"},
            headers=headers,
        )
        self.assertEqual(added.json()["settings"]["admin_email_list"], ["ops@example.com"])
        removed = self.client.delete(
            "/api/admin-settings/admin-emails/ops@example.com", headers=headers
        )
        self.assertEqual(removed.json()["settings"]["admin_email_list"], [])

    def test_navigation(self):
        headers = self._bootstrap_admin()

        guest = self.client.get("/api/navigation", params={"path": "/admin"})
        self.assertEqual(
            guest.json(),
            {"path": "/admin/main-categories", "allowed": False, "redirect": "/login"},
        )

        admin = self.client.get(
            "/api/navigation", params={"path": "/admin"}, headers=headers
        )
        self.assertTrue(admin.json()["allowed"])

        login = self.client.get(
            "/api/navigation", params={"path": "/login"}, headers=headers
        )
        self.assertEqual(login.json()["redirect"], "/admin/main-categories")

    def test_image_helpers(self):
        headers = self._bootstrap_admin()

        url = self.client.get(
            "/api/images/url",
            params={"public_id": "workouts/squat", "width": 300, "format": "auto"},
            headers=headers,
        )
        self.assertTrue(url.json()["url"].endswith("/w_300,f_auto/workouts/squat"))

        public_id = self.client.get(
            "/api/images/public-id",
            params={"value": "https://res.cloudinary.com/demo/image/upload/v12/a/b.png"},
            headers=headers,
        )
        self.assertEqual(public_id.json()["public_id"], "a/b")

        deleted = self.client.delete("/api/images/a/b", headers=headers)
        self.assertEqual(deleted.status_code, 200)
        self.assertEqual(get_image_host().deleted, ["a/b"])

    def test_image_upload(self):
        headers = self._bootstrap_admin()
        response = self.client.post(
            "/api/images/upload",
            files={"file": ("pic.png", b"png-bytes", "image/png")},
            data={"folder": "workouts", "tags": "a, b"},
            headers=headers,
        )
        self.assertEqual(response.status_code, 200)
        upload = get_image_host().uploads[0]
        self.assertEqual(upload["tags"], ["a", "b"])
        self.assertEqual(response.json()["url"], upload["url"])

        get_image_host().fail_uploads = True
        failed = self.client.post(
            "/api/images/upload",
            files={"file": ("pic.png", b"png-bytes", "image/png")},
            headers=headers,
        )
        self.assertEqual(failed.status_code, 502)

    def test_image_upload_runs_off_the_event_loop(self):
        headers = self._bootstrap_admin()
        host = get_image_host()
        threads = []

        def record(*args, **kwargs):
            try:
                asyncio.get_running_loop()
                threads.append("event loop")
            except RuntimeError:
                threads.append("worker")
            return UploadResult(success=True, url="https://cdn.test/x.png", data={"public_id": "x"})

        with patch.object(host, "upload_image", side_effect=record):
            response = self.client.post(
                "/api/images/upload",
                files={"file": ("pic.png", b"png-bytes", "image/png")},
                headers=headers,
            )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(threads, ["worker"])

    def test_animated_gif(self):
        headers = self._bootstrap_admin()
        frames = {
            "https://example.test/a.png": Image.new("RGB", (8, 8), (255, 0, 0)),
            "https://example.test/b.png": Image.new("RGB", (8, 8), (0, 0, 255)),
        }

        with patch.object(
            fetch_utils, "load_image", side_effect=lambda url, timeout: frames[url]
        ):
            response = self.client.post(
                "/api/images/animated-gif",
                json={
                    "first_image": "https://example.test/a.png",
                    "second_image": "https://example.test/b.png",
                    "public_id": "combo",
                },
                headers=headers,
            )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["public_id"], "combo")
        self.assertEqual(get_image_host().uploads[0]["tags"], ["animated-gif"])


if __name__ == "__main__":
    unittest.main()
