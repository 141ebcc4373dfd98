"""Response schemas for the admin dashboard and analytics endpoints."""

from datetime import date, datetime

from storerate.models.user import Role
from storerate.schemas.common import CamelModel, UserRef


class PlatformStatistics(CamelModel):
    total_users: int
    total_stores: int
    total_ratings: int
    average_rating: float


class RoleCount(CamelModel):
    role: Role
    count: int


class RecentUser(CamelModel):
    id: str
    name: str
    email: str
    role: Role
    created_at: datetime


class RecentStore(CamelModel):
    id: str
    name: str
    address: str
    avg_rating: float
    created_at: datetime
    owner: UserRef


class RankedStore(CamelModel):
    id: str
    name: str
    avg_rating: float
    rating_count: int


class DashboardData(CamelModel):
    statistics: PlatformStatistics
    user_role_distribution: list[RoleCount]
    recent_users: list[RecentUser]
    recent_stores: list[RecentStore]
    top_rated_stores: list[RankedStore]


class DailyCount(CamelModel):
    day: date
    count: int


class ActiveUser(CamelModel):
    id: str
    name: str
    rating_count: int


class StarCount(CamelModel):
    rating: int
    count: int


class AnalyticsData(CamelModel):
    period: str
    user_growth: list[DailyCount]
    store_growth: list[DailyCount]
    rating_growth: list[DailyCount]
    top_rated_stores: list[RankedStore]
    most_active_users: list[ActiveUser]
    rating_distribution: list[StarCount]
