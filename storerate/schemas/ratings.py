"""Request/response schemas for rating endpoints."""

from datetime import datetime

from pydantic import Field

from storerate.models.rating import COMMENT_MAX_LEN, RATING_MAX, RATING_MIN
from storerate.schemas.common import CamelModel, Pagination, StoreRef, UserRef


class RatingSubmitRequest(CamelModel):
    """
    Create-or-update a rating. The author is the authenticated user; any
    userId in the body is ignored.
    """

    store_id: str = Field(..., min_length=1, max_length=36)
    rating: int = Field(..., ge=RATING_MIN, le=RATING_MAX, strict=True)
    comment: str | None = Field(default=None, max_length=COMMENT_MAX_LEN)


class RatingOut(CamelModel):
    """Persisted rating with author and store names for display."""

    id: str
    rating: int
    comment: str | None
    created_at: datetime
    updated_at: datetime
    user: UserRef
    store: StoreRef


class RatingSubmitData(CamelModel):
    rating: RatingOut
    comment: str | None


class StoreRatingItem(CamelModel):
    id: str
    rating: int
    comment: str | None
    created_at: datetime
    user: UserRef


class StoreRatingsData(CamelModel):
    store: StoreRef
    ratings: list[StoreRatingItem]
    pagination: Pagination


class RatedStore(CamelModel):
    id: str
    name: str
    address: str
    avg_rating: float


class UserRatingItem(CamelModel):
    id: str
    rating: int
    comment: str | None
    created_at: datetime
    store: RatedStore


class UserRatingsData(CamelModel):
    ratings: list[UserRatingItem]
    pagination: Pagination
