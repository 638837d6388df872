"""
Users router: registration and profile management.

Endpoints:
  POST   /v1/users            Register (public)
  GET    /v1/users/{userId}   Get own profile
  PATCH  /v1/users/{userId}   Update own profile
  DELETE /v1/users/{userId}   Delete own profile (only without accounts)

The {userId} endpoints go through require_user_access: a malformed id is a
400 and someone else's id is a 403.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import require_user_access
from app.models.user import User
from app.schemas.user import UserCreateRequest, UserResponse, UserUpdateRequest
from app.services import user_service

router = APIRouter()


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def create_user(
    request: UserCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Register a new bank customer.

    - **email**: Must be a valid email and not already registered
    - **phoneNumber**: E.164 format, e.g. +441234567890
    - **address**: line1, town, county and postcode are required
    """
    user = await user_service.create_user(db, request.to_columns())
    return UserResponse.from_model(user)


@router.get(
    "/{userId}",
    response_model=UserResponse,
    summary="Get your profile",
)
async def get_user(user: User = Depends(require_user_access)):
    return UserResponse.from_model(user)


@router.patch(
    "/{userId}",
    response_model=UserResponse,
    summary="Update your profile",
)
async def update_user(
    request: UserUpdateRequest,
    user: User = Depends(require_user_access),
    db: AsyncSession = Depends(get_db),
):
    """Update any subset of the profile fields. At least one is required."""
    user = await user_service.update_user(db, user, request.to_columns())
    return UserResponse.from_model(user)


@router.delete(
    "/{userId}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete your profile",
)
async def delete_user(
    user: User = Depends(require_user_access),
    db: AsyncSession = Depends(get_db),
):
    """Delete the profile. Users who still own accounts get 409."""
    await user_service.delete_user(db, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
