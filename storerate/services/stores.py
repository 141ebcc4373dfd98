"""Store management: creation guards, updates, listing and owner feedback."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from storerate.core.errors import ConflictError, NotFoundError, ValidationError
from storerate.models import Rating, Role, Store, User
from storerate.models.rating import RATING_MAX, RATING_MIN
from storerate.services.ratings import round_average

if TYPE_CHECKING:
    from storerate.schemas.common import PageParams

logger = logging.getLogger(__name__)

STORE_SORT_COLUMNS = {
    "name": Store.name,
    "email": Store.email,
    "address": Store.address,
    "createdAt": Store.created_at,
    "avgRating": Store.avg_rating,
}


def _ensure_email_free(session: Session, email: str, exclude_store_id: str | None = None) -> None:
    query = session.query(Store.id).filter(Store.email == email)
    if exclude_store_id is not None:
        query = query.filter(Store.id != exclude_store_id)
    if query.first() is not None:
        raise ConflictError("Store with this email already exists")


def get_store(session: Session, store_id: str) -> Store:
    """Load one store with its owner or raise NotFoundError."""
    store = session.get(Store, store_id, options=[joinedload(Store.owner)])
    if store is None:
        raise NotFoundError("Store not found")
    return store


def rating_counts(session: Session, store_ids: list[str]) -> dict[str, int]:
    """Number of ratings per store id (stores without ratings map to 0)."""
    if not store_ids:
        return {}
    rows = (
        session.query(Rating.store_id, func.count(Rating.id))
        .filter(Rating.store_id.in_(store_ids))
        .group_by(Rating.store_id)
        .all()
    )
    counts = {store_id: 0 for store_id in store_ids}
    counts.update({store_id: int(n) for store_id, n in rows})
    return counts


def create_store(
    session: Session,
    name: str,
    email: str,
    address: str,
    owner_id: str,
) -> Store:
    """
    Create a store for an existing STORE_OWNER.

    Raises NotFoundError if the owner does not exist, ValidationError if the
    owner's role is not STORE_OWNER and ConflictError if the email is taken.
    """
    owner = session.get(User, owner_id)
    if owner is None:
        raise NotFoundError("Owner not found")
    if owner.role != Role.STORE_OWNER:
        raise ValidationError(
            "Owner must have STORE_OWNER role",
            errors=[{"field": "ownerId", "message": "Owner must have STORE_OWNER role"}],
        )
    _ensure_email_free(session, email)

    store = Store(name=name, email=email, address=address, owner_id=owner_id, avg_rating=0.0)
    session.add(store)
    session.commit()
    logger.info("Store created", extra={"store_id": store.id, "owner_id": owner_id})
    return get_store(session, store.id)


def update_store(
    session: Session,
    store_id: str,
    name: str | None = None,
    email: str | None = None,
    address: str | None = None,
) -> Store:
    """Change a store's name, email or address. avg_rating is not writable here."""
    store = get_store(session, store_id)
    if email is not None and email != store.email:
        _ensure_email_free(session, email, exclude_store_id=store_id)
        store.email = email
    if name is not None:
        store.name = name
    if address is not None:
        store.address = address
    session.commit()
    logger.info("Store updated", extra={"store_id": store_id})
    return store


def delete_store(session: Session, store_id: str) -> None:
    """Delete a store; its ratings go with it."""
    store = get_store(session, store_id)
    session.delete(store)
    session.commit()
    logger.info("Store deleted", extra={"store_id": store_id})


def list_stores(
    session: Session,
    params: PageParams,
    sort_by: str = "createdAt",
    search: str | None = None,
) -> tuple[list[Store], int]:
    """Page through stores, optionally filtered by a case-insensitive search term."""
    query = session.query(Store)
    if search:
        pattern = f"%{search.lower()}%"
        query = query.filter(
            or_(
                func.lower(Store.name).like(pattern),
                func.lower(Store.address).like(pattern),
                func.lower(Store.email).like(pattern),
            )
        )
    total = query.count()
    column = STORE_SORT_COLUMNS[sort_by]
    stores = (
        query.options(joinedload(Store.owner))
        .order_by(column.asc() if params.sort_order == "asc" else column.desc(), Store.id)
        .offset(params.offset)
        .limit(params.limit)
        .all()
    )
    return stores, total


def rating_distribution(session: Session, store_id: str) -> dict[str, int]:
    """Count of ratings per star value, keys "1".."5"."""
    rows = (
        session.query(Rating.rating, func.count(Rating.id))
        .filter(Rating.store_id == store_id)
        .group_by(Rating.rating)
        .all()
    )
    distribution = {str(star): 0 for star in range(RATING_MIN, RATING_MAX + 1)}
    for star, n in rows:
        distribution[str(star)] = int(n)
    return distribution


def owner_feedback(session: Session, owner_id: str) -> tuple[User, list[dict], int, float]:
    """
    Aggregated feedback for every store an owner has.

    Returns (owner, per-store feedback dicts, total rating count, overall
    average across all of the owner's ratings).
    """
    owner = session.get(User, owner_id)
    if owner is None:
        raise NotFoundError("User not found")

    stores = (
        session.query(Store)
        .filter(Store.owner_id == owner_id)
        .order_by(Store.created_at.desc(), Store.id)
        .all()
    )
    counts = rating_counts(session, [s.id for s in stores])
    feedback = [
        {
            "store": store,
            "rating_count": counts.get(store.id, 0),
            "rating_distribution": rating_distribution(session, store.id),
        }
        for store in stores
    ]

    count, total = (
        session.query(func.count(Rating.id), func.coalesce(func.sum(Rating.rating), 0))
        .join(Store, Store.id == Rating.store_id)
        .filter(Store.owner_id == owner_id)
        .one()
    )
    return owner, feedback, int(count), round_average(int(total), int(count))
