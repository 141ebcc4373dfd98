"""
Rating ledger and store average aggregator.

Every rating mutation runs in one transaction together with the recompute of
the affected store's cached average, so Store.avg_rating always matches the
committed rating rows. The store row is locked first (SELECT ... FOR UPDATE on
PostgreSQL; SQLite serializes writers on its own) so concurrent submissions to
the same store apply their recomputes one after the other.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session, joinedload

from storerate.core.errors import NotFoundError, mark_logged
from storerate.models import Rating, Store
from storerate.models.base import new_id, utcnow

if TYPE_CHECKING:
    from storerate.schemas.common import PageParams

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")

# Client-facing sortBy values -> rating columns.
RATING_SORT_COLUMNS = {
    "createdAt": Rating.created_at,
    "updatedAt": Rating.updated_at,
    "rating": Rating.rating,
}


@dataclass
class RatingSubmission:
    """Result of submit_rating: the stored row and whether it was newly inserted."""

    rating: Rating
    created: bool


def round_average(total: int, count: int) -> float:
    """Mean of count ratings summing to total, rounded half-up to 2 places; 0 when empty."""
    if count == 0:
        return 0.0
    mean = Decimal(total) / Decimal(count)
    return float(mean.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def _lock_store(session: Session, store_id: str) -> Store | None:
    return (
        session.query(Store)
        .filter(Store.id == store_id)
        .with_for_update()
        .first()
    )


def _upsert_statement(session: Session, values: dict):
    """INSERT ... ON CONFLICT (user_id, store_id) DO UPDATE, returning the row id."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = pg_insert(Rating).values(**values)
    elif dialect == "sqlite":
        stmt = sqlite_insert(Rating).values(**values)
    else:
        raise RuntimeError(f"Atomic rating upsert is not supported on dialect {dialect!r}")
    return stmt.on_conflict_do_update(
        index_elements=[Rating.user_id, Rating.store_id],
        set_={
            "rating": stmt.excluded.rating,
            "comment": stmt.excluded.comment,
            "updated_at": stmt.excluded.updated_at,
        },
    ).returning(Rating.id)


def recompute_store_average(session: Session, store_id: str) -> float:
    """
    Recompute and write the cached average rating of one store.

    Reads the store's ratings inside the caller's transaction, so it sees the
    triggering write. Does not commit. Returns the new average; a store that
    no longer exists is skipped and reported as 0.
    """
    session.flush()
    count, total = (
        session.query(func.count(Rating.id), func.coalesce(func.sum(Rating.rating), 0))
        .filter(Rating.store_id == store_id)
        .one()
    )
    average = round_average(int(total), int(count))
    store = session.get(Store, store_id)
    if store is None:
        return 0.0
    store.avg_rating = average
    session.flush()
    logger.info(
        "Store average recomputed",
        extra={"store_id": store_id, "rating_count": int(count), "avg_rating": average},
    )
    return average


def recompute_store_averages(session: Session, store_ids: Iterable[str]) -> None:
    """Recompute several stores in a stable order (keeps row locks ordered)."""
    for store_id in sorted(set(store_ids)):
        _lock_store(session, store_id)
        recompute_store_average(session, store_id)


def submit_rating(
    session: Session,
    author_id: str,
    store_id: str,
    rating: int,
    comment: str | None = None,
) -> RatingSubmission:
    """
    Create or overwrite the author's rating for a store and refresh its average.

    author_id must come from the authenticated identity. An empty or omitted
    comment clears any previous comment. Raises NotFoundError when the store
    does not exist; nothing is written in that case.
    """
    store = _lock_store(session, store_id)
    if store is None:
        session.rollback()
        raise NotFoundError("Store not found")

    candidate_id = new_id()
    values = {
        "id": candidate_id,
        "user_id": author_id,
        "store_id": store_id,
        "rating": rating,
        "comment": comment or None,
        "created_at": utcnow(),
        "updated_at": utcnow(),
    }
    try:
        rating_id = session.execute(_upsert_statement(session, values)).scalar_one()
        recompute_store_average(session, store_id)
        session.commit()
    except Exception as exc:
        session.rollback()
        logger.exception(
            "Rating submission rolled back",
            extra={"store_id": store_id, "user_id": author_id},
        )
        mark_logged(exc)
        raise

    created = rating_id == candidate_id
    record = session.get(
        Rating,
        rating_id,
        options=[joinedload(Rating.user), joinedload(Rating.store)],
        populate_existing=True,
    )
    logger.info(
        "Rating %s",
        "created" if created else "updated",
        extra={"rating_id": rating_id, "store_id": store_id, "user_id": author_id},
    )
    return RatingSubmission(rating=record, created=created)


def get_rating(session: Session, rating_id: str) -> Rating:
    """Load one rating or raise NotFoundError."""
    rating = session.get(Rating, rating_id)
    if rating is None:
        raise NotFoundError("Rating not found")
    return rating


def delete_rating(session: Session, rating_id: str) -> None:
    """Delete a rating and refresh its store's average in the same transaction."""
    rating = get_rating(session, rating_id)
    store_id = rating.store_id
    try:
        _lock_store(session, store_id)
        session.delete(rating)
        recompute_store_average(session, store_id)
        session.commit()
    except Exception as exc:
        session.rollback()
        logger.exception(
            "Rating deletion rolled back",
            extra={"rating_id": rating_id, "store_id": store_id},
        )
        mark_logged(exc)
        raise
    logger.info("Rating deleted", extra={"rating_id": rating_id, "store_id": store_id})


def list_store_ratings(
    session: Session,
    store_id: str,
    params: PageParams,
    sort_by: str = "createdAt",
) -> tuple[Store, list[Rating], int]:
    """Page through one store's ratings with their authors."""
    store = session.get(Store, store_id)
    if store is None:
        raise NotFoundError("Store not found")
    query = session.query(Rating).filter(Rating.store_id == store_id)
    total = query.count()
    column = RATING_SORT_COLUMNS[sort_by]
    ratings = (
        query.options(joinedload(Rating.user))
        .order_by(column.asc() if params.sort_order == "asc" else column.desc(), Rating.id)
        .offset(params.offset)
        .limit(params.limit)
        .all()
    )
    return store, ratings, total


def list_user_ratings(
    session: Session,
    user_id: str,
    params: PageParams,
    sort_by: str = "createdAt",
) -> tuple[list[Rating], int]:
    """Page through the ratings one user has written, with each store's average."""
    query = session.query(Rating).filter(Rating.user_id == user_id)
    total = query.count()
    column = RATING_SORT_COLUMNS[sort_by]
    ratings = (
        query.options(joinedload(Rating.store))
        .order_by(column.asc() if params.sort_order == "asc" else column.desc(), Rating.id)
        .offset(params.offset)
        .limit(params.limit)
        .all()
    )
    return ratings, total
