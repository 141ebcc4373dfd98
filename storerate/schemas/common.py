"""Shared schema pieces: camelCase base model, response envelope, pagination."""

import math
from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")

PAGE_LIMIT_MAX = 100


class CamelModel(BaseModel):
    """Base for API models: snake_case attributes, camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope returned by every endpoint."""

    success: bool = True
    message: str | None = None
    data: T | None = None


class MessageResponse(BaseModel):
    """Envelope for endpoints that only acknowledge."""

    success: bool = True
    message: str


class FieldError(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    """Error envelope rendered by the exception handlers in storerate.main."""

    success: Literal[False] = False
    message: str
    errors: list[FieldError] | None = None


class PageParams(CamelModel):
    """Common pagination query parameters."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=PAGE_LIMIT_MAX)
    sort_order: Literal["asc", "desc"] = "desc"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, params: PageParams, total: int) -> "Pagination":
        return cls(
            page=params.page,
            limit=params.limit,
            total=total,
            pages=math.ceil(total / params.limit),
        )


class UserRef(CamelModel):
    """Minimal user reference embedded in other resources."""

    id: str
    name: str


class StoreRef(CamelModel):
    """Minimal store reference embedded in other resources."""

    id: str
    name: str
