"""Pydantic request/response schemas."""

from storerate.schemas.admin import AnalyticsData, DashboardData
from storerate.schemas.auth import (
    AuthData,
    CurrentUser,
    LoginRequest,
    SignupRequest,
    UserOut,
)
from storerate.schemas.common import (
    ApiResponse,
    ErrorResponse,
    MessageResponse,
    PageParams,
    Pagination,
)
from storerate.schemas.health import HealthResponse
from storerate.schemas.ratings import RatingOut, RatingSubmitData, RatingSubmitRequest
from storerate.schemas.stores import CreateStoreRequest, StoreOut, UpdateStoreRequest
from storerate.schemas.users import (
    UpdatePasswordRequest,
    UpdateProfileRequest,
    UpdateRoleRequest,
    UserDetail,
)

__all__ = [
    "AnalyticsData",
    "ApiResponse",
    "AuthData",
    "CreateStoreRequest",
    "CurrentUser",
    "DashboardData",
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "PageParams",
    "Pagination",
    "RatingOut",
    "RatingSubmitData",
    "RatingSubmitRequest",
    "SignupRequest",
    "StoreOut",
    "UpdatePasswordRequest",
    "UpdateProfileRequest",
    "UpdateRoleRequest",
    "UpdateStoreRequest",
    "UserDetail",
    "UserOut",
]
