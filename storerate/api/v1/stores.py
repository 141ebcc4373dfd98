"""Store endpoints: public browsing, admin create/delete, owner-or-admin update, owner feedback."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from storerate.api.v1.auth import (
    require_admin,
    require_self_or_admin,
    require_store_access,
)
from storerate.api.v1.params import page_params
from storerate.core.database import get_db
from storerate.models import Store
from storerate.schemas.auth import CurrentUser
from storerate.schemas.common import (
    ApiResponse,
    MessageResponse,
    PageParams,
    Pagination,
    UserRef,
)
from storerate.schemas.stores import (
    CreateStoreRequest,
    OwnerStoresData,
    StoreData,
    StoreFeedback,
    StoreListData,
    StoreOut,
    UpdateStoreRequest,
)
from storerate.services import stores as store_service

router = APIRouter()

StoreSortBy = Literal["name", "email", "address", "createdAt", "avgRating"]


def store_out(store: Store, rating_count: int) -> StoreOut:
    """Serialize a store (owner loaded) with its rating count."""
    return StoreOut(
        id=store.id,
        name=store.name,
        email=store.email,
        address=store.address,
        avg_rating=store.avg_rating,
        created_at=store.created_at,
        owner=UserRef.model_validate(store.owner),
        rating_count=rating_count,
    )


def store_data(db: Session, store: Store) -> StoreData:
    counts = store_service.rating_counts(db, [store.id])
    return StoreData(store=store_out(store, counts[store.id]))


@router.get("", response_model=ApiResponse[StoreListData])
def list_stores(
    db: Annotated[Session, Depends(get_db)],
    params: Annotated[PageParams, Depends(page_params)],
    sort_by: Annotated[StoreSortBy, Query(alias="sortBy")] = "createdAt",
    search: Annotated[str | None, Query(max_length=100)] = None,
) -> ApiResponse[StoreListData]:
    """Browse stores with their cached average ratings (public)."""
    stores, total = store_service.list_stores(db, params, sort_by=sort_by, search=search)
    counts = store_service.rating_counts(db, [s.id for s in stores])
    return ApiResponse(
        data=StoreListData(
            stores=[store_out(s, counts[s.id]) for s in stores],
            total=total,
            pagination=Pagination.build(params, total),
        )
    )


@router.get("/owner/{id}", response_model=ApiResponse[OwnerStoresData])
def get_owner_stores(
    owner_id: Annotated[str, Path(alias="id")],
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[
        CurrentUser,
        Depends(require_self_or_admin("Access denied. You can only view your own stores.")),
    ],
) -> ApiResponse[OwnerStoresData]:
    """Aggregated feedback for every store the owner has (that owner or an admin)."""
    owner, feedback, total_ratings, overall = store_service.owner_feedback(db, owner_id)
    stores = [
        StoreFeedback(
            **store_out(item["store"], item["rating_count"]).model_dump(),
            rating_distribution=item["rating_distribution"],
        )
        for item in feedback
    ]
    return ApiResponse(
        data=OwnerStoresData(
            owner=UserRef.model_validate(owner),
            stores=stores,
            total_ratings=total_ratings,
            overall_avg_rating=overall,
        )
    )


@router.get("/{id}", response_model=ApiResponse[StoreData])
def get_store(
    store_id: Annotated[str, Path(alias="id")],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[StoreData]:
    store = store_service.get_store(db, store_id)
    return ApiResponse(data=store_data(db, store))


@router.post(
    "",
    response_model=ApiResponse[StoreData],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_store(
    body: CreateStoreRequest,
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[StoreData]:
    store = store_service.create_store(
        db,
        name=body.name,
        email=body.email,
        address=body.address,
        owner_id=body.owner_id,
    )
    return ApiResponse(message="Store created successfully", data=store_data(db, store))


@router.put(
    "/{id}",
    response_model=ApiResponse[StoreData],
    dependencies=[Depends(require_store_access)],
)
def update_store(
    store_id: Annotated[str, Path(alias="id")],
    body: UpdateStoreRequest,
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[StoreData]:
    """Update name, email or address (the store's owner or an admin)."""
    store = store_service.update_store(
        db,
        store_id,
        name=body.name,
        email=body.email,
        address=body.address,
    )
    return ApiResponse(message="Store updated successfully", data=store_data(db, store))


@router.delete(
    "/{id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
def delete_store(
    store_id: Annotated[str, Path(alias="id")],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Delete a store and all of its ratings (admin only)."""
    store_service.delete_store(db, store_id)
    return MessageResponse(message="Store deleted successfully")
