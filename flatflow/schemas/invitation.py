from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Literal
from datetime import datetime
from flatflow.models.invitation import InvitationStatus


class InvitationCreate(BaseModel):
    email: EmailStr = Field(..., description="Email address to invite")


class InvitationResponse(BaseModel):
    id: int
    household_id: int
    email: str
    token: str
    invited_by_id: int
    invited_user_id: Optional[int] = None
    status: InvitationStatus
    expires_at: datetime
    created_at: datetime

    class Config:
        from_attributes = True


class InvitationIssueResponse(BaseModel):
    """
    Outcome of issuing an invitation. The invitation is persisted even when
    the email could not be sent; ``email_sent`` tells the two apart.
    """
    invitation: InvitationResponse
    invite_url: str
    email_sent: bool
    email_error: Optional[str] = None
    message: str


class InvitationPreview(BaseModel):
    """What the accept page shows before the user decides."""
    household_id: int
    household_name: str
    email: str
    inviter_name: str
    status: InvitationStatus
    expires_at: datetime
    is_expired: bool


class InvitationAcceptResponse(BaseModel):
    outcome: Literal["joined", "already_member"]
    household_id: int
    household_name: str
    message: str
    redirect_to: str = "/"
