import logging
from sqlalchemy.orm import Session
from typing import List, Optional
from flatflow.models.household import Household
from flatflow.models.membership import HouseholdMember, MemberRole
from flatflow.models.user import User
from flatflow.repositories.household_repository import HouseholdRepository
from flatflow.repositories.chore_repository import ChoreRepository
from flatflow.repositories.shopping_repository import ShoppingItemRepository
from flatflow.services.user_service import UserService
from flatflow.schemas.household import HouseholdCreate, HouseholdUpdate
from flatflow.core.events import ChangeNotifier, notifier as default_notifier
from flatflow.core.exception import (
    ResourceNotFoundException,
    BadRequestException,
    AuthorizationException
)

logger = logging.getLogger(__name__)

HOUSEHOLDS = Household.__tablename__
MEMBERS = HouseholdMember.__tablename__


class HouseholdService:
    """Household directory and membership rules."""

    def __init__(self, db: Session, notifier: Optional[ChangeNotifier] = None):
        self.db = db
        self.household_repo = HouseholdRepository(db)
        self.chore_repo = ChoreRepository(db)
        self.shopping_repo = ShoppingItemRepository(db)
        self.notifier = notifier or default_notifier
        self.user_service = UserService(db, notifier=self.notifier)

    # ----- access checks -----

    def get_existing(self, household_id: int) -> Household:
        household = self.household_repo.get(household_id)
        if not household:
            raise ResourceNotFoundException("Household", household_id)
        return household

    def require_member(self, household_id: int, user_id: int) -> Household:
        """
        Raises:
            ResourceNotFoundException: If household not found
            AuthorizationException: If user is not a member
        """
        household = self.get_existing(household_id)
        if not self.household_repo.is_member(household_id, user_id):
            raise AuthorizationException("You are not a member of this household")
        return household

    def require_admin(self, household_id: int, user_id: int, message: Optional[str] = None) -> Household:
        """The single admin gate: raises unless the user is an admin of the household."""
        household = self.get_existing(household_id)
        if not self.household_repo.is_admin(household_id, user_id):
            raise AuthorizationException(message or "Only admins can perform this action")
        return household

    # ----- directory -----

    def create_household(self, user: User, data: HouseholdCreate) -> Household:
        """
        Create a new household with the user as admin.
        Backfills the creator's profile first so members lists show a name.
        """
        self.user_service.ensure_profile(user)

        household = self.household_repo.create(
            Household(name=data.name, created_by_id=user.id)
        )
        self.household_repo.add_member(household.id, user.id, role=MemberRole.ADMIN)
        logger.info("Household %s created by user %s", household.id, user.id)

        self.notifier.publish(HOUSEHOLDS, household.id, "insert")
        self.notifier.publish(MEMBERS, household.id, "insert")
        return household

    def get_user_households(self, user_id: int) -> List[Household]:
        return self.household_repo.get_user_households(user_id)

    def get_household(self, household_id: int, user_id: int) -> Household:
        return self.require_member(household_id, user_id)

    def rename_household(self, household_id: int, user_id: int, data: HouseholdUpdate) -> Household:
        """Rename a household (admin only)."""
        self.require_admin(household_id, user_id, "Only admins can rename the household")

        household = self.household_repo.update(household_id, {"name": data.name})
        if not household:
            raise ResourceNotFoundException("Household", household_id)

        self.notifier.publish(HOUSEHOLDS, household_id)
        return household

    def delete_household(self, household_id: int, user_id: int) -> bool:
        """
        Delete a household (admin only).
        Members, invitations, chores, shopping items and expenses go with it.
        """
        self.require_admin(household_id, user_id, "Only admins can delete the household")

        deleted = self.household_repo.delete(household_id)
        logger.info("Household %s deleted by user %s", household_id, user_id)
        self.notifier.publish(HOUSEHOLDS, household_id, "delete")
        return deleted

    # ----- membership -----

    def get_members(self, household_id: int, user_id: int) -> List[dict]:
        self.require_member(household_id, user_id)
        return self.household_repo.get_members(household_id)

    def get_participant_ids(self, household_id: int) -> List[int]:
        return self.household_repo.get_participant_ids(household_id)

    def add_member(self, household_id: int, user: User, role: MemberRole = MemberRole.MEMBER) -> Optional[HouseholdMember]:
        """Insert a membership row; None if the user already belongs to the household."""
        self.user_service.ensure_profile(user)
        membership = self.household_repo.add_member(household_id, user.id, role=role)
        if membership is not None:
            self.notifier.publish(MEMBERS, household_id, "insert")
        return membership

    def promote_member(self, household_id: int, admin_id: int, member_id: int) -> dict:
        self.require_admin(household_id, admin_id, "Only admins can promote members")

        if not self.household_repo.set_role(household_id, member_id, MemberRole.ADMIN):
            raise BadRequestException("User is not a member of this household")

        self.notifier.publish(MEMBERS, household_id)
        return {"message": "Member promoted to admin"}

    def leave_household(self, household_id: int, user_id: int, new_admin_id: Optional[int] = None) -> dict:
        """
        Leave a household.

        The last admin must hand the role to another member (``new_admin_id``)
        unless they are the only member, in which case the household is deleted.
        """
        self.require_member(household_id, user_id)

        is_admin = self.household_repo.is_admin(household_id, user_id)
        admin_count = self.household_repo.get_admin_count(household_id)
        member_count = self.household_repo.get_member_count(household_id)

        if is_admin and admin_count == 1:
            if member_count == 1:
                self.household_repo.delete(household_id)
                self.notifier.publish(HOUSEHOLDS, household_id, "delete")
                return {"message": "Household deleted as you were the only member"}

            if not new_admin_id:
                raise BadRequestException(
                    "You are the last admin. Please promote another member to admin before leaving."
                )

            if new_admin_id == user_id:
                raise BadRequestException("Cannot promote yourself")

            if not self.household_repo.is_member(household_id, new_admin_id):
                raise BadRequestException("New admin must be a household member")

            self.household_repo.set_role(household_id, new_admin_id, MemberRole.ADMIN)

        self._drop_member(household_id, user_id)
        return {"message": "Successfully left household"}

    def remove_member(self, household_id: int, admin_id: int, member_id: int) -> dict:
        """
        Remove a member from the household (admin only).

        Raises:
            BadRequestException: If removing yourself or a non-member
        """
        self.require_admin(household_id, admin_id, "Only admins can remove members")

        if admin_id == member_id:
            raise BadRequestException("Use leave endpoint to remove yourself")

        if not self.household_repo.is_member(household_id, member_id):
            raise BadRequestException("User is not a member of this household")

        self._drop_member(household_id, member_id)
        return {"message": "Member removed successfully"}

    def _drop_member(self, household_id: int, user_id: int) -> None:
        """Delete the membership and shift rotation cursors so every turn keeps its person."""
        removed_index = self.household_repo.get_participant_ids(household_id).index(user_id)
        self.household_repo.remove_member(household_id, user_id)

        participant_count = self.household_repo.get_member_count(household_id)
        self.chore_repo.shift_turns(household_id, removed_index, participant_count)
        self.shopping_repo.shift_assignments(household_id, removed_index, participant_count)

        self.notifier.publish(MEMBERS, household_id, "delete")
