from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from flatflow.database import get_db
from flatflow.dependencies import get_current_user
from flatflow.models.user import User
from flatflow.schemas.user import ProfileResponse, ProfileUpdate, UserResponse
from flatflow.schemas.result import Result
from flatflow.services.user_service import UserService

router = APIRouter()


@router.get("/me/profile", response_model=Result[ProfileResponse])
async def get_my_profile(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Current user's profile, created on first access if missing."""
    profile = UserService(db).ensure_profile(current_user)
    return Result.successful(data=profile)


@router.put("/me/profile", response_model=Result[ProfileResponse])
async def update_my_profile(
    profile_update: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update display name and avatar. Only provided fields change."""
    profile = UserService(db).update_profile(current_user, profile_update)
    return Result.successful(data=profile, message="Profile updated")


@router.post("/me/deactivate", response_model=Result[UserResponse])
async def deactivate_my_account(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Deactivate the current account. Existing tokens stop working."""
    user = UserService(db).deactivate_account(current_user.id)
    return Result.successful(data=user, message="Account deactivated")
