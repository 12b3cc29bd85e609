from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional

from flatflow.database import get_db
from flatflow.dependencies import get_current_user, get_invitation_mailer
from flatflow.models.invitation import InvitationStatus
from flatflow.models.user import User
from flatflow.schemas.household import (
    HouseholdCreate,
    HouseholdUpdate,
    HouseholdResponse,
    HouseholdMemberResponse,
    PromoteMemberRequest,
)
from flatflow.schemas.invitation import InvitationCreate, InvitationIssueResponse, InvitationResponse
from flatflow.schemas.result import Result
from flatflow.services.email_service import InvitationMailer
from flatflow.services.household_service import HouseholdService
from flatflow.services.invitation_service import InvitationService

router = APIRouter()


@router.post("", response_model=Result[HouseholdResponse], status_code=status.HTTP_201_CREATED)
async def create_household(
    household_data: HouseholdCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new household with current user as admin."""
    household = HouseholdService(db).create_household(current_user, household_data)
    return Result.successful(
        data=household, message="Your household has been set up successfully."
    )


@router.get("", response_model=Result[List[HouseholdResponse]])
async def get_my_households(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    households = HouseholdService(db).get_user_households(current_user.id)
    return Result.successful(data=households)


@router.get("/{household_id}", response_model=Result[HouseholdResponse])
async def get_household(
    household_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    household = HouseholdService(db).get_household(household_id, current_user.id)
    return Result.successful(data=household)


@router.put("/{household_id}", response_model=Result[HouseholdResponse])
async def rename_household(
    household_id: int,
    household_data: HouseholdUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Rename the household (admin only)."""
    household = HouseholdService(db).rename_household(household_id, current_user.id, household_data)
    return Result.successful(data=household, message="The household name has been changed successfully.")


@router.delete("/{household_id}", response_model=Result[dict])
async def delete_household(
    household_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete household and everything in it (admin only)."""
    HouseholdService(db).delete_household(household_id, current_user.id)
    return Result.successful(data={"message": "The household has been deleted successfully."})


@router.get("/{household_id}/members", response_model=Result[List[HouseholdMemberResponse]])
async def get_members(
    household_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Members in rotation order, with profile details."""
    members = HouseholdService(db).get_members(household_id, current_user.id)
    return Result.successful(data=members)


@router.post("/{household_id}/members/{user_id}/promote", response_model=Result[dict])
async def promote_member(
    household_id: int,
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    result = HouseholdService(db).promote_member(household_id, current_user.id, user_id)
    return Result.successful(data=result)


@router.delete("/{household_id}/members/{user_id}", response_model=Result[dict])
async def remove_member(
    household_id: int,
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Remove a member from the household (admin only)."""
    result = HouseholdService(db).remove_member(household_id, current_user.id, user_id)
    return Result.successful(data=result)


@router.post("/{household_id}/leave", response_model=Result[dict])
async def leave_household(
    household_id: int,
    promotion_data: Optional[PromoteMemberRequest] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Leave a household. The last admin must name a successor unless they are the only member."""
    new_admin_id = promotion_data.new_admin_id if promotion_data else None
    result = HouseholdService(db).leave_household(household_id, current_user.id, new_admin_id)
    return Result.successful(data=result)


@router.post(
    "/{household_id}/invitations",
    response_model=Result[InvitationIssueResponse],
    status_code=status.HTTP_201_CREATED,
)
async def invite_member(
    household_id: int,
    invite_data: InvitationCreate,
    current_user: User = Depends(get_current_user),
    mailer: InvitationMailer = Depends(get_invitation_mailer),
    db: Session = Depends(get_db)
):
    """
    Invite someone by email (admin only).

    The response is successful whenever the invitation was stored;
    ``email_sent`` is false when the email could not be delivered.
    """
    outcome = InvitationService(db, mailer=mailer).issue_invitation(
        household_id, current_user, invite_data.email
    )
    return Result.successful(data=outcome, message=outcome.message)


@router.get("/{household_id}/invitations", response_model=Result[List[InvitationResponse]])
async def list_invitations(
    household_id: int,
    invitation_status: Optional[InvitationStatus] = None,
    current_user: User = Depends(get_current_user),
    mailer: InvitationMailer = Depends(get_invitation_mailer),
    db: Session = Depends(get_db)
):
    """Invitations of the household, newest first (admin only)."""
    invitations = InvitationService(db, mailer=mailer).list_invitations(
        household_id, current_user.id, invitation_status
    )
    return Result.successful(data=invitations)
