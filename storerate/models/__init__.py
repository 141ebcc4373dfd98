"""SQLAlchemy ORM models."""

from storerate.models.base import Base
from storerate.models.rating import Rating
from storerate.models.store import Store
from storerate.models.user import Role, User

__all__ = ["Base", "Rating", "Role", "Store", "User"]
