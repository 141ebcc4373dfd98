"""Rating endpoints: submit (create-or-update), list by store or author, delete."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from storerate.api.v1.auth import (
    get_current_user,
    require_normal_user,
    require_rating_access,
    require_self_or_admin,
)
from storerate.api.v1.params import page_params
from storerate.core.database import get_db
from storerate.schemas.auth import CurrentUser
from storerate.schemas.common import (
    ApiResponse,
    MessageResponse,
    PageParams,
    Pagination,
    StoreRef,
)
from storerate.schemas.ratings import (
    RatingOut,
    RatingSubmitData,
    RatingSubmitRequest,
    StoreRatingItem,
    StoreRatingsData,
    UserRatingItem,
    UserRatingsData,
)
from storerate.services import ratings as rating_service

router = APIRouter()

RatingSortBy = Literal["createdAt", "updatedAt", "rating"]


@router.post(
    "",
    response_model=ApiResponse[RatingSubmitData],
    status_code=status.HTTP_201_CREATED,
)
def submit_rating(
    body: RatingSubmitRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(require_normal_user)],
) -> ApiResponse[RatingSubmitData]:
    """
    Create or update the caller's rating for a store.

    The author is always the authenticated user. Re-submitting for the same
    store overwrites the previous rating and comment.
    """
    result = rating_service.submit_rating(
        db,
        author_id=current_user.id,
        store_id=body.store_id,
        rating=body.rating,
        comment=body.comment,
    )
    message = (
        "Rating created successfully" if result.created else "Rating updated successfully"
    )
    return ApiResponse(
        message=message,
        data=RatingSubmitData(
            rating=RatingOut.model_validate(result.rating),
            comment=result.rating.comment,
        ),
    )


@router.get("/store/{storeId}", response_model=ApiResponse[StoreRatingsData])
def get_store_ratings(
    store_id: Annotated[str, Path(alias="storeId")],
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    params: Annotated[PageParams, Depends(page_params)],
    sort_by: Annotated[RatingSortBy, Query(alias="sortBy")] = "createdAt",
) -> ApiResponse[StoreRatingsData]:
    """Paginated ratings of one store with their authors."""
    store, ratings, total = rating_service.list_store_ratings(db, store_id, params, sort_by)
    return ApiResponse(
        data=StoreRatingsData(
            store=StoreRef.model_validate(store),
            ratings=[StoreRatingItem.model_validate(r) for r in ratings],
            pagination=Pagination.build(params, total),
        )
    )


@router.get("/user/{id}", response_model=ApiResponse[UserRatingsData])
def get_user_ratings(
    user_id: Annotated[str, Path(alias="id")],
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[
        CurrentUser,
        Depends(require_self_or_admin("Access denied. You can only view your own ratings.")),
    ],
    params: Annotated[PageParams, Depends(page_params)],
    sort_by: Annotated[RatingSortBy, Query(alias="sortBy")] = "createdAt",
) -> ApiResponse[UserRatingsData]:
    """Paginated ratings written by one user (that user or an admin only)."""
    ratings, total = rating_service.list_user_ratings(db, user_id, params, sort_by)
    return ApiResponse(
        data=UserRatingsData(
            ratings=[UserRatingItem.model_validate(r) for r in ratings],
            pagination=Pagination.build(params, total),
        )
    )


@router.delete(
    "/{id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_rating_access)],
)
def delete_rating(
    rating_id: Annotated[str, Path(alias="id")],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Delete a rating (its author or an admin) and refresh the store average."""
    rating_service.delete_rating(db, rating_id)
    return MessageResponse(message="Rating deleted successfully")
