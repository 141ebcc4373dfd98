"""Shared fixtures for database-backed tests: in-memory SQLite, app client, factories."""

import itertools
import unittest

from fastapi.testclient import TestClient

from storerate.core.database import Database
from storerate.core.security import create_access_token
from storerate.main import create_app
from storerate.models import Base, Rating, Role, Store, User
from storerate.services.stores import create_store
from storerate.services.users import create_user

DEFAULT_PASSWORD = "Passw0rd!"

_counter = itertools.count(1)


def _unique(prefix: str) -> str:
    return f"{prefix}{next(_counter)}"


class DatabaseTestCase(unittest.TestCase):
    """Fresh in-memory database per test, plus user and store factories."""

    def setUp(self) -> None:
        self.database = Database("sqlite://")
        Base.metadata.create_all(self.database.engine)
        self.session = self.database.session()

    def tearDown(self) -> None:
        self.session.close()
        Base.metadata.drop_all(self.database.engine)
        self.database.dispose()

    def make_user(
        self,
        role: Role = Role.NORMAL_USER,
        name: str = "Test User With A Long Enough Name",
        password: str = DEFAULT_PASSWORD,
    ) -> User:
        return create_user(
            self.session,
            name=name,
            email=f"{_unique(role.value.lower())}@example.com",
            password=password,
            address="1 Test Street",
            role=role,
        )

    def make_store(self, owner: User | None = None, name: str = "Corner Shop Test Store Name") -> Store:
        owner = owner or self.make_user(Role.STORE_OWNER)
        return create_store(
            self.session,
            name=name,
            email=f"{_unique('store')}@example.com",
            address="2 Market Street",
            owner_id=owner.id,
        )

    def fresh_store(self, store_id: str) -> Store | None:
        """Read a store through a new session so cached ORM state cannot mask the database."""
        with self.database.session() as s:
            return s.get(Store, store_id)

    def rating_rows(self, user_id: str, store_id: str) -> int:
        with self.database.session() as s:
            return (
                s.query(Rating)
                .filter(Rating.user_id == user_id, Rating.store_id == store_id)
                .count()
            )


class ApiTestCase(DatabaseTestCase):
    """DatabaseTestCase plus a TestClient for an app bound to the same database."""

    def setUp(self) -> None:
        super().setUp()
        self.client = TestClient(create_app(database=self.database))

    def tearDown(self) -> None:
        self.client.close()
        super().tearDown()

    @staticmethod
    def auth(user: User) -> dict[str, str]:
        token = create_access_token(sub=user.id, role=user.role.value)
        return {"Authorization": f"Bearer {token}"}
