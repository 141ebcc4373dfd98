"""ORM model for application users (auth and RBAC)."""

import enum

from sqlalchemy import Column, Enum, String
from sqlalchemy.orm import relationship

from storerate.models.base import Base, TimestampMixin, new_id


class Role(str, enum.Enum):
    """Closed set of roles; every role-based branch compares against these members."""

    NORMAL_USER = "NORMAL_USER"
    STORE_OWNER = "STORE_OWNER"
    SYSTEM_ADMIN = "SYSTEM_ADMIN"


class User(TimestampMixin, Base):
    """
    User account for JWT authentication and role-based access control.

    Deleting a user removes the stores they own (and those stores' ratings)
    and every rating they authored.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(60), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    address = Column(String(400), nullable=False, default="")
    role = Column(
        Enum(Role, name="user_role"),
        nullable=False,
        default=Role.NORMAL_USER,
    )

    owned_stores = relationship(
        "Store",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    ratings = relationship(
        "Rating",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
