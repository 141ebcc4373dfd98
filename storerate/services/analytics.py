"""Platform statistics for the admin dashboard and analytics endpoints."""

from datetime import UTC, datetime, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from storerate.models import Rating, Role, Store, User
from storerate.services.ratings import round_average

RECENT_LIMIT = 5
TOP_DASHBOARD_LIMIT = 5
TOP_ANALYTICS_LIMIT = 10


def _ranked_stores(session: Session, limit: int) -> list[dict]:
    rows = (
        session.query(Store, func.count(Rating.id))
        .outerjoin(Rating, Rating.store_id == Store.id)
        .group_by(Store.id)
        .order_by(Store.avg_rating.desc(), Store.id)
        .limit(limit)
        .all()
    )
    return [
        {
            "id": store.id,
            "name": store.name,
            "avg_rating": store.avg_rating,
            "rating_count": int(n),
        }
        for store, n in rows
    ]


def _daily_counts(session: Session, column, since: datetime) -> list[dict]:
    day = func.date(column)
    rows = (
        session.query(day, func.count())
        .filter(column >= since)
        .group_by(day)
        .order_by(day)
        .all()
    )
    return [{"day": d, "count": int(n)} for d, n in rows]


def dashboard(session: Session) -> dict:
    """Totals, role distribution, recent users/stores and the best-rated stores."""
    count, total = session.query(
        func.count(Rating.id), func.coalesce(func.sum(Rating.rating), 0)
    ).one()
    role_rows = dict(
        session.query(User.role, func.count(User.id)).group_by(User.role).all()
    )
    return {
        "statistics": {
            "total_users": session.query(func.count(User.id)).scalar(),
            "total_stores": session.query(func.count(Store.id)).scalar(),
            "total_ratings": int(count),
            "average_rating": round_average(int(total), int(count)),
        },
        "user_role_distribution": [
            {"role": role, "count": int(role_rows.get(role, 0))} for role in Role
        ],
        "recent_users": (
            session.query(User)
            .order_by(User.created_at.desc(), User.id)
            .limit(RECENT_LIMIT)
            .all()
        ),
        "recent_stores": (
            session.query(Store)
            .options(joinedload(Store.owner))
            .order_by(Store.created_at.desc(), Store.id)
            .limit(RECENT_LIMIT)
            .all()
        ),
        "top_rated_stores": _ranked_stores(session, TOP_DASHBOARD_LIMIT),
    }


def analytics(session: Session, period_days: int) -> dict:
    """Growth over the last period_days plus rankings and the star distribution."""
    since = datetime.now(UTC) - timedelta(days=period_days)

    active_rows = (
        session.query(User.id, User.name, func.count(Rating.id).label("rating_count"))
        .outerjoin(Rating, Rating.user_id == User.id)
        .group_by(User.id, User.name)
        .order_by(func.count(Rating.id).desc(), User.id)
        .limit(TOP_ANALYTICS_LIMIT)
        .all()
    )
    distribution_rows = (
        session.query(Rating.rating, func.count(Rating.id))
        .group_by(Rating.rating)
        .order_by(Rating.rating)
        .all()
    )
    return {
        "period": f"{period_days} days",
        "user_growth": _daily_counts(session, User.created_at, since),
        "store_growth": _daily_counts(session, Store.created_at, since),
        "rating_growth": _daily_counts(session, Rating.created_at, since),
        "top_rated_stores": _ranked_stores(session, TOP_ANALYTICS_LIMIT),
        "most_active_users": [
            {"id": uid, "name": name, "rating_count": int(n)}
            for uid, name, n in active_rows
        ],
        "rating_distribution": [
            {"rating": int(star), "count": int(n)} for star, n in distribution_rows
        ],
    }
