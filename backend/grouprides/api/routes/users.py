"""
User profile routes.
"""
from fastapi import APIRouter, Depends
from typing import List
from grouprides.core.exceptions import NotFoundError, AuthorizationError, ValidationError
from grouprides.core.security import get_password_hash
from grouprides.models.user import User
from grouprides.schemas.user import UserResponse, UserUpdate
from grouprides.services.storage import Storage
from grouprides.api.dependencies import get_current_user, get_storage

router = APIRouter(prefix="/users", tags=["users"])

NULLABLE_PROFILE_FIELDS = {"bio"}


@router.get("", response_model=List[UserResponse])
def list_users(storage: Storage = Depends(get_storage)):
    """List all users."""
    return storage.list_users()


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: str, storage: Storage = Depends(get_storage)):
    """Get user by ID."""
    user = storage.get_user(user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


@router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    user_data: UserUpdate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage)
):
    """Update your own profile."""
    if user_id != current_user.id:
        raise AuthorizationError("You can only update your own profile")

    changes = user_data.model_dump(exclude_unset=True)
    null_fields = sorted(
        field for field, value in changes.items()
        if value is None and field not in NULLABLE_PROFILE_FIELDS
    )
    if null_fields:
        raise ValidationError(
            "Invalid user data",
            errors=[{"field": field, "message": f"{field} cannot be null"} for field in null_fields]
        )

    if "password" in changes:
        changes["hashed_password"] = get_password_hash(changes.pop("password"))

    user = storage.update_user(user_id, changes)
    if not user:
        raise NotFoundError("User not found")
    return user
