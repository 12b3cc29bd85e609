from sqlalchemy.orm import Session
from typing import List, Optional
from flatflow.models.invitation import HouseholdInvitation, InvitationStatus
from flatflow.models.base import utcnow
from flatflow.repositories.repository import HouseholdScopedRepository
from flatflow.utils.security import generate_invitation_token


class InvitationRepository(HouseholdScopedRepository[HouseholdInvitation]):
    """Repository for household invitations."""

    def __init__(self, db: Session):
        super().__init__(HouseholdInvitation, db)

    def get_by_token(self, token: str) -> Optional[HouseholdInvitation]:
        return (
            self.db.query(HouseholdInvitation)
            .filter(HouseholdInvitation.token == token)
            .first()
        )

    def get_pending_for_email(self, household_id: int, email: str) -> Optional[HouseholdInvitation]:
        """Newest unexpired pending invitation for (household, email)."""
        invitations = (
            self.db.query(HouseholdInvitation)
            .filter(
                HouseholdInvitation.household_id == household_id,
                HouseholdInvitation.email == email,
                HouseholdInvitation.status == InvitationStatus.PENDING,
            )
            .order_by(HouseholdInvitation.id.desc())
            .all()
        )
        now = utcnow()
        return next((inv for inv in invitations if not inv.is_expired(now)), None)

    def list_for_household(
        self, household_id: int, status: Optional[InvitationStatus] = None
    ) -> List[HouseholdInvitation]:
        query = self.db.query(HouseholdInvitation).filter(
            HouseholdInvitation.household_id == household_id
        )
        if status is not None:
            query = query.filter(HouseholdInvitation.status == status)
        return query.order_by(HouseholdInvitation.created_at.desc(), HouseholdInvitation.id.desc()).all()

    def generate_token(self) -> str:
        """Generate a token no other invitation uses."""
        while True:
            token = generate_invitation_token()
            if not self.get_by_token(token):
                return token

    def set_status(self, invitation: HouseholdInvitation, status: InvitationStatus) -> HouseholdInvitation:
        invitation.status = status
        return self.save(invitation)
