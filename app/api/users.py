"""User management API routes.

Handles account registration and lookup.
"""

import logging
import uuid

import bcrypt
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from app.api.deps import get_access_policy, get_current_user, get_user_repository
from app.api.schemas import UserCreate, UserResponse
from app.core.permissions import AccessPolicy, Permission
from app.db.models import User
from app.interfaces.repository import BaseUserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password.

    Returns:
        Hashed password.
    """
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    users: BaseUserRepository = Depends(get_user_repository),
) -> UserResponse:
    """Register a new user or creator account.

    Args:
        user_data: User creation data.
        users: User repository.

    Returns:
        The created user.

    Raises:
        HTTPException: If the email is taken or creation fails.
    """
    try:
        logger.info(f"Creating user: {user_data.email}")

        existing_user = await users.get_by_email(user_data.email)
        if existing_user:
            logger.warning(f"User with email '{user_data.email}' already exists")
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"User with email '{user_data.email}' already exists",
            )

        user = User(
            email=user_data.email,
            full_name=user_data.full_name,
            hashed_password=hash_password(user_data.password),
            role=user_data.role,
            is_active=True,
        )

        try:
            user = await users.add(user)
        except SQLAlchemyError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create user",
            ) from e

        logger.info(f"Created user: {user.id} ({user.role})")
        return UserResponse.model_validate(user)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error in create_user: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred",
        ) from e


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    users: BaseUserRepository = Depends(get_user_repository),
    policy: AccessPolicy = Depends(get_access_policy),
) -> UserResponse:
    """Get a user by ID.

    Callers may read their own profile; reading others needs MANAGE_USERS.

    Raises:
        HTTPException: If the caller may not read the profile or it does not exist.
    """
    if user_id == current_user.id:
        allowed = policy.allows(current_user.role, Permission.READ_OWN_PROFILE)
    else:
        allowed = policy.allows(current_user.role, Permission.MANAGE_USERS)
    if not allowed:
        logger.warning(f"User {current_user.id} may not read profile {user_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )

    user = await users.get(user_id)
    if not user:
        logger.warning(f"User not found: {user_id}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    return UserResponse.model_validate(user)
