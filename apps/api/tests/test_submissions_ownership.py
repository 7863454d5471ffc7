"""Submission creation and owner-scoped listing tests."""

from __future__ import annotations

import os
import unittest

from fastapi.testclient import TestClient

from formdesk.core.config import get_settings
from formdesk.domain.access_control import Allow, Scope
from formdesk.errors import ApiError
from formdesk.main import create_app
from formdesk.repositories.memory import InMemoryStore
from formdesk.schemas.profile import Role
from formdesk.schemas.submission import CreateSubmissionRequest
from formdesk.services.submissions import SubmissionService


class _SettingsEnvCase(unittest.TestCase):
    _env_keys = ("FORMDESK_AUTH_PROVIDER",)

    def setUp(self) -> None:
        self._old_env = {k: os.environ.get(k) for k in self._env_keys}
        os.environ["FORMDESK_AUTH_PROVIDER"] = "mock"
        get_settings.cache_clear()

    def tearDown(self) -> None:
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()


def _headers(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer test:{user_id}"}


class SubmissionApiTests(_SettingsEnvCase):
    def setUp(self) -> None:
        super().setUp()
        self.app = create_app()
        self.client = TestClient(self.app)
        self.store = self.app.state.store
        self.store.create_profile(user_id="u1", email="u1@example.com")
        self.store.create_profile(user_id="u2", email="u2@example.com")
        self.store.create_profile(user_id="admin-1", email="admin@example.com", role=Role.ADMIN)
        self.store.create_profile(user_id="banned-1", email="banned@example.com", is_banned=True)

    def test_create_stamps_requester_as_owner_ignoring_client_user_id(self) -> None:
        response = self.client.post(
            "/api/submissions/create",
            headers=_headers("u1"),
            json={"full_name": "A", "email": "a@x.com", "user_id": "attacker", "priority": "high"},
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertIsNone(body["error"])
        self.assertEqual(body["data"]["user_id"], "u1")
        self.assertEqual(body["data"]["priority"], "high")
        self.assertEqual(self.store.submissions[body["data"]["id"]].user_id, "u1")

    def test_missing_required_fields_returns_400_without_insert(self) -> None:
        for payload in ({}, {"full_name": "A"}, {"full_name": "  ", "email": "a@x.com"}):
            with self.subTest(payload=payload):
                response = self.client.post("/api/submissions/create", headers=_headers("u1"), json=payload)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["code"], "VALIDATION_ERROR")

        self.assertEqual(self.store.submission_write_count, 0)

    def test_malformed_body_is_rejected_only_after_authentication_and_ban_check(self) -> None:
        malformed = {"content": "{not json", "headers": {"Content-Type": "application/json"}}

        anonymous = self.client.post("/api/submissions/create", **malformed)
        self.assertEqual(anonymous.status_code, 401)
        self.assertEqual(anonymous.json()["code"], "UNAUTHORIZED")

        banned = self.client.post(
            "/api/submissions/create",
            content="{not json",
            headers={**malformed["headers"], **_headers("banned-1")},
        )
        self.assertEqual(banned.status_code, 403)
        self.assertEqual(banned.json()["code"], "USER_BANNED")

        allowed = self.client.post(
            "/api/submissions/create",
            content="{not json",
            headers={**malformed["headers"], **_headers("u1")},
        )
        self.assertEqual(allowed.status_code, 400)
        self.assertEqual(allowed.json()["code"], "VALIDATION_ERROR")
        self.assertEqual(self.store.submission_write_count, 0)

    def test_invalid_priority_returns_400(self) -> None:
        response = self.client.post(
            "/api/submissions/create",
            headers=_headers("u1"),
            json={"full_name": "A", "email": "a@x.com", "priority": "urgent"},
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "VALIDATION_ERROR")
        self.assertEqual(self.store.submission_write_count, 0)

    def test_banned_user_is_denied_before_validation_and_store_access(self) -> None:
        create = self.client.post(
            "/api/submissions/create",
            headers=_headers("banned-1"),
            json={"priority": "urgent"},
        )
        self.assertEqual(create.status_code, 403)
        self.assertEqual(create.json()["code"], "USER_BANNED")
        self.assertEqual(self.store.submission_write_count, 0)

        listing = self.client.get("/api/submissions/list", headers=_headers("banned-1"))
        self.assertEqual(listing.status_code, 403)
        self.assertEqual(listing.json()["code"], "USER_BANNED")
        self.assertNotIn("data", listing.json())
        self.assertEqual(self.store.submission_read_count, 0)

    def test_unauthenticated_create_returns_401_and_inserts_nothing(self) -> None:
        response = self.client.post("/api/submissions/create", json={"full_name": "A", "email": "a@x.com"})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.store.submissions, {})

    def test_listing_is_owner_scoped_for_basic_users_and_global_for_admins(self) -> None:
        created = self.client.post(
            "/api/submissions/create",
            headers=_headers("u1"),
            json={"full_name": "A", "email": "a@x.com"},
        )
        self.assertEqual(created.status_code, 200)
        u1_submission_id = created.json()["data"]["id"]

        own_ids = []
        for index in range(2):
            response = self.client.post(
                "/api/submissions/create",
                headers=_headers("u2"),
                json={"full_name": f"B{index}", "email": "b@x.com"},
            )
            own_ids.append(response.json()["data"]["id"])

        u2_listing = self.client.get("/api/submissions/list", headers=_headers("u2")).json()["data"]
        self.assertEqual([row["id"] for row in u2_listing], list(reversed(own_ids)))
        self.assertTrue(all(row["user_id"] == "u2" for row in u2_listing))

        admin_listing = self.client.get("/api/submissions/list", headers=_headers("admin-1")).json()["data"]
        self.assertEqual(len(admin_listing), 3)
        self.assertIn(u1_submission_id, [row["id"] for row in admin_listing])
        self.assertEqual(admin_listing[-1]["id"], u1_submission_id)

    def test_submission_store_failure_returns_500(self) -> None:
        self.store.submission_failure_message = "write timeout"

        response = self.client.post(
            "/api/submissions/create",
            headers=_headers("u1"),
            json={"full_name": "A", "email": "a@x.com"},
        )

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["code"], "STORE_UNAVAILABLE")


class SubmissionServiceUnitTests(unittest.TestCase):
    def test_scope_controls_owner_filter(self) -> None:
        store = InMemoryStore()
        service = SubmissionService(store)
        for owner_id in ("p", "p", "q"):
            service.create_submission(
                owner_id=owner_id,
                payload=CreateSubmissionRequest(full_name="Name", email="n@x.com"),
            )

        own = service.list_submissions(decision=Allow(scope=Scope.OWN, owner_id="p"))
        everything = service.list_submissions(decision=Allow(scope=Scope.ALL))

        self.assertEqual(len(own), 2)
        self.assertTrue(all(row.user_id == "p" for row in own))
        self.assertEqual(len(everything), 3)

    def test_owner_scope_without_owner_id_is_rejected(self) -> None:
        service = SubmissionService(InMemoryStore())

        with self.assertRaises(ValueError):
            service.list_submissions(decision=Allow(scope=Scope.OWN))

    def test_blank_required_fields_raise_validation_error(self) -> None:
        service = SubmissionService(InMemoryStore())

        with self.assertRaises(ApiError) as context:
            service.create_submission(owner_id="p", payload=CreateSubmissionRequest(full_name="", email="n@x.com"))

        self.assertEqual(context.exception.status_code, 400)


if __name__ == "__main__":
    unittest.main()
