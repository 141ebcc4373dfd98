"""Request/response schemas for auth endpoints."""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, Field, field_validator

from storerate.core.security import (
    ADDRESS_MAX_LEN,
    NAME_MAX_LEN,
    NAME_MIN_LEN,
    is_valid_email,
    password_problems,
)
from storerate.models.user import Role
from storerate.schemas.common import CamelModel


def _normalize_email(v: str) -> str:
    v = v.strip().lower()
    if not is_valid_email(v):
        raise ValueError("Please provide a valid email address")
    return v


def _check_password(v: str) -> str:
    problems = password_problems(v)
    if problems:
        raise ValueError("; ".join(problems))
    return v


# Reused by user, store and admin schemas.
Email = Annotated[str, Field(max_length=255), AfterValidator(_normalize_email)]
Password = Annotated[str, AfterValidator(_check_password)]
Address = Annotated[str, Field(max_length=ADDRESS_MAX_LEN)]


class SignupRequest(CamelModel):
    """New account details (public signup and admin user creation)."""

    name: str = Field(..., min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)
    email: Email
    password: Password
    address: Address
    role: Role | None = None


class LoginRequest(CamelModel):
    """Credentials for login."""

    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class CurrentUser(CamelModel):
    """Authenticated user resolved from the bearer token."""

    id: str
    name: str
    email: str
    address: str
    role: Role


class UserOut(CamelModel):
    """Public representation of a user (no password hash)."""

    id: str
    name: str
    email: str
    address: str
    role: Role
    created_at: datetime
    updated_at: datetime | None = None


class AuthData(CamelModel):
    """Payload returned by signup and login."""

    user: UserOut
    token: str


class MeData(CamelModel):
    user: CurrentUser
