import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List, Optional
from flatflow.models.invitation import HouseholdInvitation, InvitationStatus
from flatflow.models.membership import MemberRole
from flatflow.models.user import User
from flatflow.repositories.invitation_repository import InvitationRepository
from flatflow.repositories.user_repository import UserRepository
from flatflow.services.household_service import HouseholdService
from flatflow.services.email_service import InvitationMailer, EmailDispatchError, build_invite_url
from flatflow.schemas.invitation import (
    InvitationResponse,
    InvitationIssueResponse,
    InvitationPreview,
    InvitationAcceptResponse,
)
from flatflow.core.events import ChangeNotifier, notifier as default_notifier
from flatflow.core.exception import (
    ResourceNotFoundException,
    BadRequestException,
    DuplicateResourceException,
)

logger = logging.getLogger(__name__)

INVITATIONS = HouseholdInvitation.__tablename__

INVALID_INVITATION = "This invitation link is invalid or has expired."


class InvitationService:
    """
    Invite-by-email workflow.

    Issuing checks, in order: admin role, existing membership of the invited
    email, an unexpired pending invitation for the same email. Only then is
    the invitation stored and the email sent. A failed email does not undo
    the invitation.

    Accepting checks the token, expiry and existing membership before adding
    the user as a plain member and marking the invitation accepted.
    """

    def __init__(
        self,
        db: Session,
        mailer: Optional[InvitationMailer] = None,
        notifier: Optional[ChangeNotifier] = None,
    ):
        self.db = db
        self.invitation_repo = InvitationRepository(db)
        self.user_repo = UserRepository(db)
        self.notifier = notifier or default_notifier
        self.household_service = HouseholdService(db, notifier=self.notifier)
        self.mailer = mailer or InvitationMailer.from_settings()

    def issue_invitation(self, household_id: int, inviter: User, email: str) -> InvitationIssueResponse:
        """
        Invite an email address into a household.

        Raises:
            ResourceNotFoundException: If household not found
            AuthorizationException: If the inviter is not an admin
            DuplicateResourceException: If the email is already a member or has a pending invitation
        """
        email = email.strip().lower()
        household = self.household_service.require_admin(
            household_id, inviter.id, "You must be an admin to invite members."
        )

        existing_user = self.user_repo.get_by_email(email)
        if existing_user and self.household_service.household_repo.is_member(household_id, existing_user.id):
            raise DuplicateResourceException(
                "Member", message="This user is already a member of your household."
            )

        if self.invitation_repo.get_pending_for_email(household_id, email):
            raise DuplicateResourceException(
                "Invitation", message="There is already a pending invitation for this email."
            )

        invitation = self.invitation_repo.create(
            HouseholdInvitation(
                household_id=household_id,
                email=email,
                token=self.invitation_repo.generate_token(),
                invited_by_id=inviter.id,
                invited_user_id=existing_user.id if existing_user else None,
                status=InvitationStatus.PENDING,
            )
        )
        logger.info("Invitation %s created for %s in household %s", invitation.id, email, household_id)
        self.notifier.publish(INVITATIONS, household_id, "insert")

        inviter_name = self.household_service.user_service.get_display_name(inviter)
        email_error = None
        try:
            self.mailer.send_invitation(
                email=email,
                household_id=household_id,
                household_name=household.name,
                inviter_name=inviter_name,
                token=invitation.token,
            )
        except EmailDispatchError as exc:
            logger.warning("Invitation %s created but not emailed: %s", invitation.id, exc)
            email_error = str(exc)

        if email_error is None:
            message = f"An invitation email has been sent to {email}."
        else:
            message = "The invitation has been created but no email was sent."

        return InvitationIssueResponse(
            invitation=InvitationResponse.model_validate(invitation),
            invite_url=build_invite_url(invitation.token, self.mailer.site_url),
            email_sent=email_error is None,
            email_error=email_error,
            message=message,
        )

    def list_invitations(
        self, household_id: int, user_id: int, status: Optional[InvitationStatus] = None
    ) -> List[HouseholdInvitation]:
        self.household_service.require_admin(household_id, user_id, "Only admins can view invitations")
        return self.invitation_repo.list_for_household(household_id, status)

    def preview_invitation(self, token: str) -> InvitationPreview:
        invitation = self._get_by_token(token)
        inviter = invitation.invited_by
        return InvitationPreview(
            household_id=invitation.household_id,
            household_name=invitation.household.name,
            email=invitation.email,
            inviter_name=self.household_service.user_service.get_display_name(inviter),
            status=invitation.status,
            expires_at=invitation.expires_at,
            is_expired=invitation.is_expired(),
        )

    def accept_invitation(self, token: str, user: User) -> InvitationAcceptResponse:
        """
        Join the invitation's household as a member.

        Accepting twice is a no-op reported as ``already_member``. If the
        membership is stored but the status update fails, the failure is
        logged and the join still counts.

        Raises:
            ResourceNotFoundException: Unknown token
            BadRequestException: Expired, declined or already used by someone else
        """
        invitation = self._get_by_token(token)
        household_id = invitation.household_id
        household_name = invitation.household.name

        if invitation.is_expired():
            raise BadRequestException("This invitation has expired.")

        if self.household_service.household_repo.is_member(invitation.household_id, user.id):
            return self._already_member(household_id, household_name)

        if invitation.status == InvitationStatus.ACCEPTED:
            raise BadRequestException("This invitation has already been accepted.")
        if invitation.status == InvitationStatus.DECLINED:
            raise BadRequestException("This invitation has been declined.")

        membership = self.household_service.add_member(household_id, user, role=MemberRole.MEMBER)
        if membership is None:
            # a concurrent accept got there first
            return self._already_member(household_id, household_name)
        logger.info("User %s joined household %s via invitation %s", user.id, household_id, invitation.id)

        try:
            self.invitation_repo.set_status(invitation, InvitationStatus.ACCEPTED)
        except SQLAlchemyError:
            self.db.rollback()
            logger.warning(
                "Member was added but invitation %s status update failed", invitation.id, exc_info=True
            )
        else:
            self.notifier.publish(INVITATIONS, household_id)

        return InvitationAcceptResponse(
            outcome="joined",
            household_id=household_id,
            household_name=household_name,
            message=f"You have successfully joined {household_name}!",
        )

    def decline_invitation(self, token: str, user: User) -> HouseholdInvitation:
        invitation = self._get_by_token(token)

        if invitation.is_expired():
            raise BadRequestException("This invitation has expired.")
        if not invitation.is_pending:
            raise BadRequestException("This invitation is no longer valid.")

        invitation = self.invitation_repo.set_status(invitation, InvitationStatus.DECLINED)
        logger.info("Invitation %s declined by user %s", invitation.id, user.id)
        self.notifier.publish(INVITATIONS, invitation.household_id)
        return invitation

    @staticmethod
    def _already_member(household_id: int, household_name: str) -> InvitationAcceptResponse:
        return InvitationAcceptResponse(
            outcome="already_member",
            household_id=household_id,
            household_name=household_name,
            message="You are already a member of this household.",
        )

    def _get_by_token(self, token: str) -> HouseholdInvitation:
        invitation = self.invitation_repo.get_by_token(token)
        if invitation is None:
            raise ResourceNotFoundException("Invitation", message=INVALID_INVITATION)
        return invitation
