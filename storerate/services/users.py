"""User accounts: signup, login, profile and password changes, admin role and delete guards."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from storerate.core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
    mark_logged,
)
from storerate.core.security import hash_password, verify_password
from storerate.models import Rating, Role, Store, User
from storerate.services.ratings import recompute_store_averages

if TYPE_CHECKING:
    from storerate.schemas.common import PageParams

logger = logging.getLogger(__name__)

USER_SORT_COLUMNS = {
    "name": User.name,
    "email": User.email,
    "address": User.address,
    "createdAt": User.created_at,
}


def get_user(session: Session, user_id: str) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def create_user(
    session: Session,
    name: str,
    email: str,
    password: str,
    address: str,
    role: Role = Role.NORMAL_USER,
) -> User:
    """Create a user with a hashed password. Raises ConflictError on a duplicate email."""
    if session.query(User.id).filter(User.email == email).first() is not None:
        raise ConflictError("User with this email already exists")
    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        address=address,
        role=role,
    )
    session.add(user)
    session.commit()
    logger.info("User created", extra={"user_id": user.id, "role": role.value})
    return user


def signup_role(requested: Role | None, allow_admin_signup: bool) -> Role:
    """
    Role granted to a self-service signup.

    NORMAL_USER unless STORE_OWNER is requested; SYSTEM_ADMIN only when admin
    signup is enabled, otherwise ForbiddenError.
    """
    if requested is None or requested == Role.NORMAL_USER:
        return Role.NORMAL_USER
    if requested == Role.STORE_OWNER:
        return Role.STORE_OWNER
    if requested == Role.SYSTEM_ADMIN:
        if not allow_admin_signup:
            raise ForbiddenError("Admin signup is disabled.")
        return Role.SYSTEM_ADMIN
    raise ValidationError.for_field("role", f"Unknown role {requested!r}")


def authenticate(session: Session, email: str, password: str) -> User:
    """Return the user for valid credentials; UnauthorizedError otherwise."""
    user = session.query(User).filter(User.email == email).first()
    if user is None or not verify_password(password, user.password_hash):
        raise UnauthorizedError("Invalid credentials")
    return user


def user_counts(session: Session, user_ids: list[str]) -> dict[str, dict[str, int]]:
    """Owned-store and rating counts per user id."""
    counts = {uid: {"owned_stores": 0, "ratings": 0} for uid in user_ids}
    if not user_ids:
        return counts
    for uid, n in (
        session.query(Store.owner_id, func.count(Store.id))
        .filter(Store.owner_id.in_(user_ids))
        .group_by(Store.owner_id)
    ):
        counts[uid]["owned_stores"] = int(n)
    for uid, n in (
        session.query(Rating.user_id, func.count(Rating.id))
        .filter(Rating.user_id.in_(user_ids))
        .group_by(Rating.user_id)
    ):
        counts[uid]["ratings"] = int(n)
    return counts


def list_users(
    session: Session,
    params: PageParams,
    sort_by: str = "createdAt",
    search: str | None = None,
    role: Role | None = None,
) -> tuple[list[User], int]:
    """Page through users with optional search over name/email/address and role filter."""
    query = session.query(User)
    if search:
        pattern = f"%{search.lower()}%"
        query = query.filter(
            or_(
                func.lower(User.name).like(pattern),
                func.lower(User.email).like(pattern),
                func.lower(User.address).like(pattern),
            )
        )
    if role is not None:
        query = query.filter(User.role == role)
    total = query.count()
    column = USER_SORT_COLUMNS[sort_by]
    users = (
        query.order_by(column.asc() if params.sort_order == "asc" else column.desc(), User.id)
        .offset(params.offset)
        .limit(params.limit)
        .all()
    )
    return users, total


def update_profile(
    session: Session,
    user_id: str,
    name: str | None = None,
    address: str | None = None,
) -> User:
    user = get_user(session, user_id)
    if name:
        user.name = name
    if address:
        user.address = address
    session.commit()
    return user


def change_password(
    session: Session,
    user_id: str,
    new_password: str,
    current_password: str | None,
    verify_current: bool,
) -> None:
    """
    Replace a user's password. When verify_current is set (non-admin callers)
    the current password must match.
    """
    user = get_user(session, user_id)
    if verify_current and (
        not current_password or not verify_password(current_password, user.password_hash)
    ):
        raise ValidationError("Current password is incorrect")
    user.password_hash = hash_password(new_password)
    session.commit()
    logger.info("Password changed", extra={"user_id": user_id})


def change_role(session: Session, actor_id: str, user_id: str, role: Role) -> User:
    """
    Admin operation: set another user's role.

    The target must exist (NotFoundError) and an admin can never change their
    own role (ValidationError), even to demote themselves.
    """
    user = get_user(session, user_id)
    if user_id == actor_id:
        raise ValidationError("You cannot change your own role")
    user.role = role
    session.commit()
    logger.info("User role changed", extra={"user_id": user_id, "role": role.value})
    return user


def delete_user(session: Session, actor_id: str, user_id: str) -> None:
    """
    Admin operation: delete a user with their stores and ratings.

    Stores the user had rated (and that are not being deleted with them) get
    their averages recomputed in the same transaction. An admin can never
    delete their own account (ValidationError).
    """
    user = get_user(session, user_id)
    if user_id == actor_id:
        raise ValidationError("You cannot delete your own account")

    affected = [
        store_id
        for (store_id,) in session.query(Rating.store_id)
        .join(Store, Store.id == Rating.store_id)
        .filter(Rating.user_id == user_id, Store.owner_id != user_id)
        .distinct()
    ]
    try:
        session.delete(user)
        session.flush()
        recompute_store_averages(session, affected)
        session.commit()
    except Exception as exc:
        session.rollback()
        logger.exception("User deletion rolled back", extra={"user_id": user_id})
        mark_logged(exc)
        raise
    logger.info(
        "User deleted",
        extra={"user_id": user_id, "recomputed_stores": len(affected)},
    )
