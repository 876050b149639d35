"""Authentication routes: register, login and the current user."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from placement_portal.core.auth import CurrentUser, get_current_user
from placement_portal.core.exceptions import (
    ApplicationError,
    NotFoundError,
    unauthorized_exception,
)
from placement_portal.core.storage import get_session
from placement_portal.models.user import User
from placement_portal.routers.errors import database_error, rejected
from placement_portal.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from placement_portal.schemas.common import ApiResponse
from placement_portal.services.dependencies import get_user_service
from placement_portal.services.user_service import UserService

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=ApiResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register(
    request: RegisterRequest,
    service: UserService = Depends(get_user_service),
):
    try:
        user = await service.register(request)
        return ApiResponse(data=UserResponse.model_validate(user), message="Registered")
    except ApplicationError as e:
        raise rejected("register", e)
    except SQLAlchemyError as e:
        raise database_error("register", e)


@router.post("/login", response_model=ApiResponse[TokenResponse])
async def login(
    request: LoginRequest,
    service: UserService = Depends(get_user_service),
):
    """Exchange email and password for a bearer token."""
    try:
        result = await service.authenticate(request.email, request.password)
    except SQLAlchemyError as e:
        raise database_error("login", e)
    if result is None:
        raise unauthorized_exception("Invalid email or password")
    user, token = result
    return ApiResponse(
        data=TokenResponse(access_token=token, user=UserResponse.model_validate(user))
    )


@router.get("/me", response_model=ApiResponse[UserResponse])
async def me(
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    try:
        profile = await session.get(User, user.id)
        if profile is None:
            raise NotFoundError("User", user.id)
        return ApiResponse(data=UserResponse.model_validate(profile))
    except ApplicationError as e:
        raise rejected("current user", e)
    except SQLAlchemyError as e:
        raise database_error("current user", e)
