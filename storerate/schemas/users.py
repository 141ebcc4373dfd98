"""Request/response schemas for user management endpoints."""

from pydantic import Field

from storerate.core.security import NAME_MAX_LEN, PROFILE_NAME_MIN_LEN
from storerate.models.user import Role
from storerate.schemas.auth import Address, Password, UserOut
from storerate.schemas.common import CamelModel, Pagination


class UpdateProfileRequest(CamelModel):
    """Profile fields a user may change on themselves (admins on anyone)."""

    name: str | None = Field(
        default=None, min_length=PROFILE_NAME_MIN_LEN, max_length=NAME_MAX_LEN
    )
    address: Address | None = None


class UpdatePasswordRequest(CamelModel):
    """Password change. current_password is required unless the caller is an admin."""

    current_password: str | None = Field(default=None, max_length=128)
    new_password: Password


class UpdateRoleRequest(CamelModel):
    role: Role


class UserCounts(CamelModel):
    owned_stores: int = 0
    ratings: int = 0


class UserDetail(UserOut):
    """User with counts of owned stores and authored ratings."""

    counts: UserCounts = Field(default_factory=UserCounts)


class UserData(CamelModel):
    user: UserOut


class UserDetailData(CamelModel):
    user: UserDetail


class UserListData(CamelModel):
    users: list[UserDetail]
    pagination: Pagination
