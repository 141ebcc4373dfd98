"""JWT signup/login and the access-control dependencies (get_current_user, require_roles, ownership)."""

from collections.abc import Callable
from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, Path, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from storerate.core.config import get_settings
from storerate.core.database import get_db
from storerate.core.errors import ForbiddenError, NotFoundError, UnauthorizedError
from storerate.core.security import create_access_token, decode_access_token
from storerate.models import Role, Store, User
from storerate.schemas.auth import (
    AuthData,
    CurrentUser,
    LoginRequest,
    MeData,
    SignupRequest,
    UserOut,
)
from storerate.schemas.common import ApiResponse, MessageResponse
from storerate.services import ratings as rating_service
from storerate.services import users as user_service

router = APIRouter()
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """Dependency: require valid Bearer JWT and return the current user. Raises 401 if missing or invalid."""
    if credentials is None:
        raise UnauthorizedError("Access denied. No token provided.")
    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.PyJWTError:
        raise UnauthorizedError("Invalid token.")
    sub = payload.get("sub")
    if not sub:
        raise UnauthorizedError("Invalid token.")
    user = db.get(User, str(sub))
    if user is None:
        raise UnauthorizedError("Invalid token. User not found.")
    return CurrentUser.model_validate(user)


def require_roles(*roles: Role) -> Callable[..., CurrentUser]:
    """Dependency factory: authenticated user whose role is one of roles, else 403."""
    allowed = frozenset(roles)

    def _require(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> CurrentUser:
        if current_user.role not in allowed:
            raise ForbiddenError("Access denied. Insufficient permissions.")
        return current_user

    return _require


require_admin = require_roles(Role.SYSTEM_ADMIN)
require_normal_user = require_roles(Role.NORMAL_USER)
require_store_manager = require_roles(Role.STORE_OWNER, Role.SYSTEM_ADMIN)


def require_store_access(
    store_id: Annotated[str, Path(alias="id")],
    current_user: Annotated[CurrentUser, Depends(require_store_manager)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """
    Dependency: the caller may manage this store.

    Runs after authentication and the role check. SYSTEM_ADMIN passes
    unconditionally; a STORE_OWNER must own the store. 404 if the store does
    not exist, 403 if it belongs to someone else.
    """
    if current_user.role == Role.SYSTEM_ADMIN:
        return current_user
    store = db.get(Store, store_id)
    if store is None:
        raise NotFoundError("Store not found")
    if store.owner_id != current_user.id:
        raise ForbiddenError("Access denied. You can only access your own stores.")
    return current_user


def require_rating_access(
    rating_id: Annotated[str, Path(alias="id")],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """Dependency: the caller wrote this rating or is an admin. 404 if the rating is missing."""
    rating = rating_service.get_rating(db, rating_id)
    if current_user.role != Role.SYSTEM_ADMIN and rating.user_id != current_user.id:
        raise ForbiddenError("Access denied. You can only delete your own ratings.")
    return current_user


def require_self_or_admin(message: str) -> Callable[..., CurrentUser]:
    """Dependency factory for /users/{id} routes: the caller is that user or an admin."""

    def _require(
        user_id: Annotated[str, Path(alias="id")],
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> CurrentUser:
        if current_user.role != Role.SYSTEM_ADMIN and user_id != current_user.id:
            raise ForbiddenError(message)
        return current_user

    return _require


@router.post(
    "/signup",
    response_model=ApiResponse[AuthData],
    status_code=status.HTTP_201_CREATED,
)
def signup(
    body: SignupRequest,
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[AuthData]:
    """Register a new account and return it with an access token."""
    role = user_service.signup_role(body.role, get_settings().ALLOW_ADMIN_SIGNUP)
    user = user_service.create_user(
        db,
        name=body.name,
        email=body.email,
        password=body.password,
        address=body.address,
        role=role,
    )
    token = create_access_token(sub=user.id, role=user.role.value)
    return ApiResponse(
        message="User registered successfully",
        data=AuthData(user=UserOut.model_validate(user), token=token),
    )


@router.post("/login", response_model=ApiResponse[AuthData])
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[AuthData]:
    """
    Authenticate with email and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <token>
    """
    user = user_service.authenticate(db, body.email, body.password)
    token = create_access_token(sub=user.id, role=user.role.value)
    return ApiResponse(
        message="Login successful",
        data=AuthData(user=UserOut.model_validate(user), token=token),
    )


@router.get("/me", response_model=ApiResponse[MeData])
def me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ApiResponse[MeData]:
    return ApiResponse(data=MeData(user=current_user))


@router.post("/logout", response_model=MessageResponse)
def logout(
    _user: Annotated[CurrentUser, Depends(get_current_user)],
) -> MessageResponse:
    """Tokens are stateless; the client discards its copy."""
    return MessageResponse(message="Logout successful")
