"""Integration tests for /api/ratings: submission envelope, gate ordering, validation, deletion."""

import unittest

from storerate.models import Rating, Role
from storerate.services.ratings import submit_rating
from tests.support import ApiTestCase


class TestSubmitRatingEndpoint(ApiTestCase):
    """POST /api/ratings creates or updates the caller's rating."""

    def setUp(self) -> None:
        super().setUp()
        self.user = self.make_user()
        self.store = self.make_store()

    def _post(self, body: dict, user=None):
        return self.client.post("/api/ratings", json=body, headers=self.auth(user or self.user))

    def test_create_then_update(self) -> None:
        resp = self._post({"storeId": self.store.id, "rating": 4, "comment": "Friendly staff"})
        self.assertEqual(resp.status_code, 201, resp.text)
        body = resp.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "Rating created successfully")
        rating = body["data"]["rating"]
        self.assertEqual(rating["rating"], 4)
        self.assertEqual(rating["comment"], "Friendly staff")
        self.assertEqual(rating["user"]["id"], self.user.id)
        self.assertEqual(rating["store"]["name"], self.store.name)
        self.assertIn("createdAt", rating)
        self.assertIn("updatedAt", rating)
        self.assertEqual(body["data"]["comment"], "Friendly staff")

        resp = self._post({"storeId": self.store.id, "rating": 2})
        self.assertEqual(resp.status_code, 201, resp.text)
        body = resp.json()
        self.assertEqual(body["message"], "Rating updated successfully")
        self.assertEqual(body["data"]["rating"]["id"], rating["id"])
        self.assertIsNone(body["data"]["rating"]["comment"])
        self.assertEqual(self.rating_rows(self.user.id, self.store.id), 1)

    def test_author_comes_from_token_not_body(self) -> None:
        other = self.make_user()
        resp = self._post({"storeId": self.store.id, "rating": 5, "userId": other.id})
        self.assertEqual(resp.status_code, 201, resp.text)
        self.assertEqual(resp.json()["data"]["rating"]["user"]["id"], self.user.id)
        self.assertEqual(self.rating_rows(other.id, self.store.id), 0)
        self.assertEqual(self.rating_rows(self.user.id, self.store.id), 1)

    def test_unknown_store_is_404_without_row(self) -> None:
        resp = self._post({"storeId": "does-not-exist", "rating": 5})
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"success": False, "message": "Store not found"})
        with self.database.session() as s:
            self.assertEqual(s.query(Rating).count(), 0)

    def test_comment_too_long_is_400_before_persistence(self) -> None:
        resp = self._post({"storeId": self.store.id, "rating": 3, "comment": "x" * 501})
        self.assertEqual(resp.status_code, 400)
        body = resp.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["message"], "Validation error")
        self.assertIn("comment", [e["field"] for e in body["errors"]])
        self.assertEqual(self.rating_rows(self.user.id, self.store.id), 0)

    def test_comment_of_exactly_500_chars_is_accepted(self) -> None:
        resp = self._post({"storeId": self.store.id, "rating": 3, "comment": "x" * 500})
        self.assertEqual(resp.status_code, 201, resp.text)

    def test_rating_out_of_range_is_400(self) -> None:
        for value in (0, 6):
            resp = self._post({"storeId": self.store.id, "rating": value})
            self.assertEqual(resp.status_code, 400, value)
            self.assertIn("rating", [e["field"] for e in resp.json()["errors"]])

    def test_non_integer_rating_is_400(self) -> None:
        resp = self._post({"storeId": self.store.id, "rating": 3.5})
        self.assertEqual(resp.status_code, 400)

    def test_missing_token_is_401(self) -> None:
        resp = self.client.post("/api/ratings", json={"storeId": self.store.id, "rating": 5})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["message"], "Access denied. No token provided.")

    def test_garbage_token_is_401(self) -> None:
        resp = self.client.post(
            "/api/ratings",
            json={"storeId": self.store.id, "rating": 5},
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        self.assertEqual(resp.status_code, 401)

    def test_only_normal_users_may_rate(self) -> None:
        for role in (Role.STORE_OWNER, Role.SYSTEM_ADMIN):
            resp = self._post({"storeId": self.store.id, "rating": 5}, user=self.make_user(role))
            self.assertEqual(resp.status_code, 403, role)

    def test_forbidden_role_wins_over_invalid_body(self) -> None:
        owner = self.make_user(Role.STORE_OWNER)
        resp = self._post({"storeId": self.store.id, "rating": 99}, user=owner)
        self.assertEqual(resp.status_code, 403)

    def test_store_read_reflects_average(self) -> None:
        self._post({"storeId": self.store.id, "rating": 5})
        self._post({"storeId": self.store.id, "rating": 2}, user=self.make_user())
        resp = self.client.get(f"/api/stores/{self.store.id}")
        self.assertEqual(resp.status_code, 200)
        store = resp.json()["data"]["store"]
        self.assertEqual(store["avgRating"], 3.5)
        self.assertEqual(store["ratingCount"], 2)


class TestDeleteRatingEndpoint(ApiTestCase):
    """DELETE /api/ratings/{id}: author or admin only."""

    def setUp(self) -> None:
        super().setUp()
        self.author = self.make_user()
        self.owner = self.make_user(Role.STORE_OWNER)
        self.store = self.make_store(self.owner)
        self.rating = submit_rating(self.session, self.author.id, self.store.id, 4).rating

    def test_author_can_delete(self) -> None:
        resp = self.client.delete(f"/api/ratings/{self.rating.id}", headers=self.auth(self.author))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.json(), {"success": True, "message": "Rating deleted successfully"}
        )
        self.assertEqual(self.fresh_store(self.store.id).avg_rating, 0.0)

    def test_admin_can_delete(self) -> None:
        admin = self.make_user(Role.SYSTEM_ADMIN)
        resp = self.client.delete(f"/api/ratings/{self.rating.id}", headers=self.auth(admin))
        self.assertEqual(resp.status_code, 200)

    def test_other_user_is_403(self) -> None:
        resp = self.client.delete(
            f"/api/ratings/{self.rating.id}", headers=self.auth(self.make_user())
        )
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(self.rating_rows(self.author.id, self.store.id), 1)

    def test_store_owner_cannot_delete_feedback(self) -> None:
        resp = self.client.delete(f"/api/ratings/{self.rating.id}", headers=self.auth(self.owner))
        self.assertEqual(resp.status_code, 403)

    def test_missing_rating_is_404(self) -> None:
        resp = self.client.delete("/api/ratings/nope", headers=self.auth(self.author))
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["message"], "Rating not found")


class TestListRatings(ApiTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.store = self.make_store()
        self.users = [self.make_user() for _ in range(3)]
        for stars, user in zip((5, 3, 1), self.users):
            submit_rating(self.session, user.id, self.store.id, stars)

    def test_store_ratings_paginated(self) -> None:
        resp = self.client.get(
            f"/api/ratings/store/{self.store.id}",
            params={"limit": 2, "sortBy": "rating", "sortOrder": "asc"},
            headers=self.auth(self.users[0]),
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        data = resp.json()["data"]
        self.assertEqual([r["rating"] for r in data["ratings"]], [1, 3])
        self.assertEqual(data["pagination"], {"page": 1, "limit": 2, "total": 3, "pages": 2})

    def test_store_ratings_requires_auth(self) -> None:
        resp = self.client.get(f"/api/ratings/store/{self.store.id}")
        self.assertEqual(resp.status_code, 401)

    def test_user_ratings_self_only(self) -> None:
        me = self.users[0]
        resp = self.client.get(f"/api/ratings/user/{me.id}", headers=self.auth(me))
        self.assertEqual(resp.status_code, 200)
        ratings = resp.json()["data"]["ratings"]
        self.assertEqual(len(ratings), 1)
        self.assertEqual(ratings[0]["store"]["avgRating"], 3.0)

        resp = self.client.get(f"/api/ratings/user/{me.id}", headers=self.auth(self.users[1]))
        self.assertEqual(resp.status_code, 403)

    def test_limit_above_maximum_is_400(self) -> None:
        resp = self.client.get(
            f"/api/ratings/store/{self.store.id}",
            params={"limit": 101},
            headers=self.auth(self.users[0]),
        )
        self.assertEqual(resp.status_code, 400)


if __name__ == "__main__":
    unittest.main()
