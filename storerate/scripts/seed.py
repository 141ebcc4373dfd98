"""
Seed the database. Run from project root:

  python -m storerate.scripts.seed

Bootstraps an admin from ADMIN_EMAIL / ADMIN_PASSWORD when both are set.
With SEED_DEMO=true also creates a demo store owner, normal users, stores
and ratings. Safe to run repeatedly: existing emails are left untouched.
"""

import logging
import sys

from sqlalchemy.orm import Session

from storerate.core.config import Settings, get_settings
from storerate.core.database import Database
from storerate.models import Role, Store, User
from storerate.services.ratings import submit_rating
from storerate.services.stores import create_store
from storerate.services.users import create_user

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

DEMO_OWNER = {
    "name": "John Store Owner Demo Account",
    "email": "owner@mystore.com",
    "password": "Owner123!",
    "address": "456 Business Avenue, Commerce City, CC 67890",
}

DEMO_USERS = [
    {
        "name": "Alice Johnson Normal User",
        "email": "alice@example.com",
        "password": "User123!",
        "address": "123 Main Street, Springfield, SP 12345",
    },
    {
        "name": "Bob Smith Regular Customer",
        "email": "bob@example.com",
        "password": "User123!",
        "address": "789 Oak Lane, Riverside, RS 54321",
    },
]

DEMO_STORES = [
    {
        "name": "Downtown Coffee Roasters Shop",
        "email": "coffee@mystore.com",
        "address": "12 Market Square, Commerce City, CC 67890",
    },
    {
        "name": "Greenleaf Organic Grocery Market",
        "email": "grocery@mystore.com",
        "address": "98 Harvest Road, Commerce City, CC 67891",
    },
]

# (user email, store email, stars, comment)
DEMO_RATINGS = [
    ("alice@example.com", "coffee@mystore.com", 5, "Best espresso in town."),
    ("bob@example.com", "coffee@mystore.com", 4, None),
    ("alice@example.com", "grocery@mystore.com", 3, "Good produce, long queues."),
]


def _ensure_user(db: Session, role: Role, **fields: str) -> User:
    existing = db.query(User).filter(User.email == fields["email"]).first()
    if existing is not None:
        return existing
    user = create_user(db, role=role, **fields)
    logger.info("Created %s %s", role.value, user.email)
    return user


def _ensure_store(db: Session, owner: User, **fields: str) -> Store:
    existing = db.query(Store).filter(Store.email == fields["email"]).first()
    if existing is not None:
        return existing
    store = create_store(db, owner_id=owner.id, **fields)
    logger.info("Created store %s", store.email)
    return store


def seed(db: Session, settings: Settings) -> None:
    """Create the bootstrap admin and, optionally, demo data."""
    if settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD is not None:
        _ensure_user(
            db,
            Role.SYSTEM_ADMIN,
            name="System Administrator Account",
            email=settings.ADMIN_EMAIL,
            password=settings.ADMIN_PASSWORD.get_secret_value(),
            address="N/A",
        )
    else:
        logger.info("Skipping admin bootstrap (set ADMIN_EMAIL and ADMIN_PASSWORD to create one).")

    if not settings.SEED_DEMO:
        logger.info("SEED_DEMO is false; skipping demo users, stores and ratings.")
        return

    owner = _ensure_user(db, Role.STORE_OWNER, **DEMO_OWNER)
    users = {u["email"]: _ensure_user(db, Role.NORMAL_USER, **u) for u in DEMO_USERS}
    stores = {s["email"]: _ensure_store(db, owner, **s) for s in DEMO_STORES}
    for user_email, store_email, stars, comment in DEMO_RATINGS:
        submit_rating(
            db,
            author_id=users[user_email].id,
            store_id=stores[store_email].id,
            rating=stars,
            comment=comment,
        )
    logger.info("Demo data seeded: %s ratings", len(DEMO_RATINGS))


def main() -> int:
    settings = get_settings()
    database = Database(settings.DATABASE_URL)
    db = database.session()
    try:
        seed(db, settings)
        return 0
    except Exception as e:
        logger.exception("Seeding failed: %s", e)
        return 1
    finally:
        db.close()
        database.dispose()


if __name__ == "__main__":
    sys.exit(main())
