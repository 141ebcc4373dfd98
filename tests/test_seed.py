"""Tests for the seed and create_user command-line scripts."""

import io
import sys
import unittest
from unittest.mock import MagicMock, patch

from storerate.core.config import Settings
from storerate.core.security import verify_password
from storerate.models import Rating, Role, Store, User
from storerate.scripts import create_user as create_user_script
from storerate.scripts.seed import seed
from tests.support import DatabaseTestCase

ADMIN_EMAIL = "root@example.com"
ADMIN_PASSWORD = "Adm1n!pass"


class TestSeed(DatabaseTestCase):

    def _store_by_email(self, email: str) -> Store:
        with self.database.session() as s:
            store_id = s.query(Store.id).filter(Store.email == email).scalar()
        return self.fresh_store(store_id)

    def _count(self, model, *criteria) -> int:
        with self.database.session() as s:
            return s.query(model).filter(*criteria).count()

    def test_demo_seed_is_repeatable_and_averages_are_right(self) -> None:
        settings = Settings(ADMIN_EMAIL=ADMIN_EMAIL, ADMIN_PASSWORD=ADMIN_PASSWORD, SEED_DEMO=True)
        seed(self.session, settings)
        seed(self.session, settings)

        self.assertEqual(self._count(User, User.role == Role.SYSTEM_ADMIN), 1)
        self.assertEqual(self._count(Store), 2)
        self.assertEqual(self._count(Rating), 3)
        self.assertEqual(self._store_by_email("coffee@mystore.com").avg_rating, 4.5)
        self.assertEqual(self._store_by_email("grocery@mystore.com").avg_rating, 3.0)

        with self.database.session() as s:
            admin = s.query(User).filter(User.email == ADMIN_EMAIL).one()
        self.assertTrue(verify_password(ADMIN_PASSWORD, admin.password_hash))

    def test_without_demo_only_admin_is_created(self) -> None:
        settings = Settings(ADMIN_EMAIL=ADMIN_EMAIL, ADMIN_PASSWORD=ADMIN_PASSWORD, SEED_DEMO=False)
        seed(self.session, settings)
        self.assertEqual(self._count(User), 1)
        self.assertEqual(self._count(Store), 0)
        self.assertEqual(self._count(Rating), 0)

    def test_no_admin_without_credentials(self) -> None:
        seed(self.session, Settings(ADMIN_EMAIL=None, ADMIN_PASSWORD=None, SEED_DEMO=False))
        self.assertEqual(self._count(User), 0)


class TestCreateUserScript(DatabaseTestCase):
    """create_user.main against the test database; the script's own handle is replaced."""

    def _run(self, *argv: str) -> tuple[int, str]:
        database = MagicMock()
        database.session.side_effect = self.database.session
        stderr = io.StringIO()
        with (
            patch.object(sys, "argv", ["create_user", *argv]),
            patch.object(create_user_script, "Database", return_value=database),
            patch("sys.stdout", new_callable=io.StringIO),
            patch("sys.stderr", stderr),
        ):
            code = create_user_script.main()
        return code, stderr.getvalue()

    def test_creates_user_with_role(self) -> None:
        code, _ = self._run(
            "Platform Administrator Account", "Ops@Example.com", "Secret#123", "SYSTEM_ADMIN"
        )
        self.assertEqual(code, 0)
        with self.database.session() as s:
            user = s.query(User).filter(User.email == "ops@example.com").one()
        self.assertEqual(user.role, Role.SYSTEM_ADMIN)
        self.assertEqual(user.address, "N/A")

    def test_weak_password_is_rejected(self) -> None:
        code, err = self._run("Platform Administrator Account", "ops@example.com", "secret")
        self.assertEqual(code, 1)
        self.assertIn("uppercase", err)
        with self.database.session() as s:
            self.assertEqual(s.query(User).count(), 0)

    def test_duplicate_email_is_reported(self) -> None:
        args = ("Platform Administrator Account", "ops@example.com", "Secret#123")
        self.assertEqual(self._run(*args)[0], 0)
        code, err = self._run(*args)
        self.assertEqual(code, 1)
        self.assertIn("User with this email already exists", err)


if __name__ == "__main__":
    unittest.main()
