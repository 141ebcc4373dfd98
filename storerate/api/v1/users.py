"""User endpoints: admin listing and deletion, self-or-admin profile and password changes."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from storerate.api.v1.auth import require_admin, require_self_or_admin
from storerate.api.v1.params import page_params
from storerate.core.database import get_db
from storerate.models import Role, User
from storerate.schemas.auth import CurrentUser, UserOut
from storerate.schemas.common import ApiResponse, MessageResponse, PageParams, Pagination
from storerate.schemas.users import (
    UpdatePasswordRequest,
    UpdateProfileRequest,
    UserCounts,
    UserData,
    UserDetail,
    UserDetailData,
    UserListData,
)
from storerate.services import users as user_service

router = APIRouter()

UserSortBy = Literal["name", "email", "address", "createdAt"]


def user_detail(user: User, counts: dict[str, int]) -> UserDetail:
    return UserDetail(
        **UserOut.model_validate(user).model_dump(),
        counts=UserCounts(**counts),
    )


@router.get("", response_model=ApiResponse[UserListData])
def list_users(
    db: Annotated[Session, Depends(get_db)],
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    params: Annotated[PageParams, Depends(page_params)],
    sort_by: Annotated[UserSortBy, Query(alias="sortBy")] = "createdAt",
    search: Annotated[str | None, Query(max_length=100)] = None,
    role: Role | None = None,
) -> ApiResponse[UserListData]:
    """List users with search, role filter and pagination (admin only)."""
    users, total = user_service.list_users(
        db, params, sort_by=sort_by, search=search, role=role
    )
    counts = user_service.user_counts(db, [u.id for u in users])
    return ApiResponse(
        data=UserListData(
            users=[user_detail(u, counts[u.id]) for u in users],
            pagination=Pagination.build(params, total),
        )
    )


@router.get("/{id}", response_model=ApiResponse[UserDetailData])
def get_user(
    user_id: Annotated[str, Path(alias="id")],
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[
        CurrentUser,
        Depends(require_self_or_admin("Access denied. You can only view your own profile.")),
    ],
) -> ApiResponse[UserDetailData]:
    user = user_service.get_user(db, user_id)
    counts = user_service.user_counts(db, [user.id])
    return ApiResponse(data=UserDetailData(user=user_detail(user, counts[user.id])))


@router.put("/{id}", response_model=ApiResponse[UserData])
def update_user(
    user_id: Annotated[str, Path(alias="id")],
    body: UpdateProfileRequest,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[
        CurrentUser,
        Depends(require_self_or_admin("Access denied. You can only update your own profile.")),
    ],
) -> ApiResponse[UserData]:
    """Update name and/or address. Role and email are not changeable here."""
    user = user_service.update_profile(db, user_id, name=body.name, address=body.address)
    return ApiResponse(
        message="Profile updated successfully",
        data=UserData(user=UserOut.model_validate(user)),
    )


@router.put("/{id}/password", response_model=MessageResponse)
def update_password(
    user_id: Annotated[str, Path(alias="id")],
    body: UpdatePasswordRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[
        CurrentUser,
        Depends(require_self_or_admin("Access denied. You can only update your own password.")),
    ],
) -> MessageResponse:
    """Change a password; non-admins must confirm the current one."""
    user_service.change_password(
        db,
        user_id,
        new_password=body.new_password,
        current_password=body.current_password,
        verify_current=current_user.role != Role.SYSTEM_ADMIN,
    )
    return MessageResponse(message="Password updated successfully")


@router.delete("/{id}", response_model=MessageResponse)
def delete_user(
    user_id: Annotated[str, Path(alias="id")],
    db: Annotated[Session, Depends(get_db)],
    admin: Annotated[CurrentUser, Depends(require_admin)],
) -> MessageResponse:
    """Delete a user with their stores and ratings (admin only, never yourself)."""
    user_service.delete_user(db, actor_id=admin.id, user_id=user_id)
    return MessageResponse(message="User deleted successfully")
