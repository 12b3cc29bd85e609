from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from flatflow.database import get_db
from flatflow.dependencies import get_current_user, get_invitation_mailer
from flatflow.models.user import User
from flatflow.schemas.invitation import InvitationPreview, InvitationAcceptResponse, InvitationResponse
from flatflow.schemas.result import Result
from flatflow.services.email_service import InvitationMailer
from flatflow.services.invitation_service import InvitationService

router = APIRouter()


@router.get("/{token}", response_model=Result[InvitationPreview])
async def preview_invitation(
    token: str,
    mailer: InvitationMailer = Depends(get_invitation_mailer),
    db: Session = Depends(get_db),
):
    """Public details behind an invitation link, shown before signing in."""
    preview = InvitationService(db, mailer=mailer).preview_invitation(token)
    return Result.successful(data=preview)


@router.post("/{token}/accept", response_model=Result[InvitationAcceptResponse])
async def accept_invitation(
    token: str,
    current_user: User = Depends(get_current_user),
    mailer: InvitationMailer = Depends(get_invitation_mailer),
    db: Session = Depends(get_db),
):
    """Join the household. Accepting again is a no-op reported as ``already_member``."""
    outcome = InvitationService(db, mailer=mailer).accept_invitation(token, current_user)
    return Result.successful(data=outcome, message=outcome.message)


@router.post("/{token}/decline", response_model=Result[InvitationResponse])
async def decline_invitation(
    token: str,
    current_user: User = Depends(get_current_user),
    mailer: InvitationMailer = Depends(get_invitation_mailer),
    db: Session = Depends(get_db),
):
    invitation = InvitationService(db, mailer=mailer).decline_invitation(token, current_user)
    return Result.successful(data=invitation, message="Invitation declined")
