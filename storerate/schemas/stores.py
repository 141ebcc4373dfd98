"""Request/response schemas for store endpoints."""

from datetime import datetime

from pydantic import Field

from storerate.core.security import NAME_MAX_LEN, NAME_MIN_LEN
from storerate.schemas.auth import Address, Email
from storerate.schemas.common import CamelModel, Pagination, UserRef


class CreateStoreRequest(CamelModel):
    """Admin-supplied store details; owner_id must reference a STORE_OWNER."""

    name: str = Field(..., min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)
    email: Email
    address: Address
    owner_id: str = Field(..., min_length=1, max_length=36)


class UpdateStoreRequest(CamelModel):
    """Mutable store fields. avg_rating is never client-writable."""

    name: str | None = Field(default=None, min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)
    email: Email | None = None
    address: Address | None = None


class StoreOut(CamelModel):
    """Store as returned on every read; avg_rating is the cached aggregate."""

    id: str
    name: str
    email: str
    address: str
    avg_rating: float
    created_at: datetime
    owner: UserRef
    rating_count: int = 0


class StoreData(CamelModel):
    store: StoreOut


class StoreListData(CamelModel):
    stores: list[StoreOut]
    total: int
    pagination: Pagination


class StoreFeedback(StoreOut):
    """A store plus how its ratings are spread over 1-5 stars."""

    rating_distribution: dict[str, int]


class OwnerStoresData(CamelModel):
    """Aggregated feedback for every store one owner has."""

    owner: UserRef
    stores: list[StoreFeedback]
    total_ratings: int
    overall_avg_rating: float
