"""Tests for the app-level error rendering: database conflicts and unexpected failures."""

import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from storerate.main import create_app
from storerate.models import Rating, Role, Store
from storerate.services import ratings as rating_service
from storerate.services import stores as store_service
from tests.support import ApiTestCase


class TestIntegrityErrorRendering(ApiTestCase):

    def test_unique_violation_past_service_checks_is_409(self) -> None:
        admin = self.make_user(Role.SYSTEM_ADMIN)
        owner = self.make_user(Role.STORE_OWNER)
        body = {
            "name": "Duplicate Email Test Store",
            "email": "dup@example.com",
            "address": "3 Copy Lane",
            "ownerId": owner.id,
        }
        with patch.object(store_service, "_ensure_email_free"):
            first = self.client.post("/api/stores", json=body, headers=self.auth(admin))
            second = self.client.post("/api/stores", json=body, headers=self.auth(admin))

        self.assertEqual(first.status_code, 201, first.text)
        self.assertEqual(second.status_code, 409)
        self.assertEqual(
            second.json(),
            {"success": False, "message": "Resource conflicts with existing data"},
        )
        with self.database.session() as s:
            self.assertEqual(s.query(Store).filter(Store.email == "dup@example.com").count(), 1)


class TestUnhandledErrorRendering(ApiTestCase):
    """500 responses; a failure the service already logged is not logged with a second traceback."""

    def setUp(self) -> None:
        super().setUp()
        self.client.close()
        self.client = TestClient(create_app(database=self.database), raise_server_exceptions=False)

    def test_failed_recompute_is_500_and_logged_once(self) -> None:
        user = self.make_user()
        store = self.make_store()
        with (
            patch.object(
                rating_service,
                "recompute_store_average",
                side_effect=RuntimeError("aggregate failed"),
            ),
            self.assertLogs("storerate", level="ERROR") as logs,
        ):
            resp = self.client.post(
                "/api/ratings",
                json={"storeId": store.id, "rating": 5},
                headers=self.auth(user),
            )

        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"success": False, "message": "Internal server error"})
        with_traceback = [r for r in logs.records if r.exc_info]
        self.assertEqual([r.name for r in with_traceback], ["storerate.services.ratings"])
        handler_records = [r for r in logs.records if r.name == "storerate.main"]
        self.assertEqual(len(handler_records), 1)
        self.assertIsNone(handler_records[0].exc_info)
        with self.database.session() as s:
            self.assertEqual(s.query(Rating).count(), 0)

    def test_unexpected_error_keeps_traceback(self) -> None:
        with (
            patch.object(store_service, "list_stores", side_effect=RuntimeError("boom")),
            self.assertLogs("storerate.main", level="ERROR") as logs,
        ):
            resp = self.client.get("/api/stores")

        self.assertEqual(resp.status_code, 500)
        self.assertEqual(len(logs.records), 1)
        self.assertIsNotNone(logs.records[0].exc_info)


if __name__ == "__main__":
    unittest.main()
