"""Admin endpoints: dashboard, analytics, user/store creation and role changes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from storerate.api.v1.auth import require_admin
from storerate.api.v1.stores import store_data
from storerate.core.database import get_db
from storerate.models import Role
from storerate.schemas.admin import AnalyticsData, DashboardData
from storerate.schemas.auth import CurrentUser, SignupRequest, UserOut
from storerate.schemas.common import ApiResponse
from storerate.schemas.stores import CreateStoreRequest, StoreData
from storerate.schemas.users import UpdateRoleRequest, UserData
from storerate.services import analytics as analytics_service
from storerate.services import stores as store_service
from storerate.services import users as user_service

# Every admin route requires an authenticated SYSTEM_ADMIN.
router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/dashboard", response_model=ApiResponse[DashboardData])
def get_dashboard(
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[DashboardData]:
    """Platform totals, role distribution, recent activity and top-rated stores."""
    return ApiResponse(data=DashboardData.model_validate(analytics_service.dashboard(db)))


@router.get("/analytics", response_model=ApiResponse[AnalyticsData])
def get_analytics(
    db: Annotated[Session, Depends(get_db)],
    period: Annotated[int, Query(ge=1, le=365)] = 30,
) -> ApiResponse[AnalyticsData]:
    """Per-day growth over the last `period` days plus rankings and star distribution."""
    return ApiResponse(
        data=AnalyticsData.model_validate(analytics_service.analytics(db, period))
    )


@router.post(
    "/users",
    response_model=ApiResponse[UserData],
    status_code=status.HTTP_201_CREATED,
)
def create_user(
    body: SignupRequest,
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[UserData]:
    """Create a user with any role (defaults to NORMAL_USER)."""
    user = user_service.create_user(
        db,
        name=body.name,
        email=body.email,
        password=body.password,
        address=body.address,
        role=body.role or Role.NORMAL_USER,
    )
    return ApiResponse(
        message="User created successfully",
        data=UserData(user=UserOut.model_validate(user)),
    )


@router.post(
    "/stores",
    response_model=ApiResponse[StoreData],
    status_code=status.HTTP_201_CREATED,
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


@router.put("/users/{id}/role", response_model=ApiResponse[UserData])
def update_user_role(
    user_id: Annotated[str, Path(alias="id")],
    body: UpdateRoleRequest,
    db: Annotated[Session, Depends(get_db)],
    admin: Annotated[CurrentUser, Depends(require_admin)],
) -> ApiResponse[UserData]:
    """Change another user's role. Admins cannot change their own role."""
    user = user_service.change_role(db, actor_id=admin.id, user_id=user_id, role=body.role)
    return ApiResponse(
        message="User role updated successfully",
        data=UserData(user=UserOut.model_validate(user)),
    )
