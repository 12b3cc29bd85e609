from sqlalchemy.orm import Session
from sqlalchemy import select, and_, func
from sqlalchemy.exc import IntegrityError
from typing import List, Optional
from flatflow.models.household import Household
from flatflow.models.membership import HouseholdMember, MemberRole
from flatflow.models.user import User, Profile
from flatflow.repositories.repository import BaseRepository


class HouseholdRepository(BaseRepository[Household]):
    """Repository for households and their membership rows."""

    def __init__(self, db: Session):
        super().__init__(Household, db)

    def get_user_households(self, user_id: int) -> List[Household]:
        """Get all households a user belongs to, newest first."""
        stmt = (
            select(Household)
            .join(HouseholdMember, HouseholdMember.household_id == Household.id)
            .where(HouseholdMember.user_id == user_id)
            .order_by(Household.created_at.desc(), Household.id.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_membership(self, household_id: int, user_id: int) -> Optional[HouseholdMember]:
        stmt = select(HouseholdMember).where(
            and_(
                HouseholdMember.household_id == household_id,
                HouseholdMember.user_id == user_id,
            )
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def add_member(
        self, household_id: int, user_id: int, role: MemberRole = MemberRole.MEMBER
    ) -> Optional[HouseholdMember]:
        """
        Add a member to a household.

        Returns:
            The new membership row, or None if the user is already a member
        """
        if self.is_member(household_id, user_id):
            return None

        membership = HouseholdMember(household_id=household_id, user_id=user_id, role=role)
        self.db.add(membership)
        try:
            self.db.commit()
        except IntegrityError:
            # another request inserted the same membership first
            self.db.rollback()
            return None
        self.db.refresh(membership)
        return membership

    def remove_member(self, household_id: int, user_id: int) -> bool:
        """
        Remove a member from a household.

        Returns:
            True if removed, False if not a member
        """
        membership = self.get_membership(household_id, user_id)
        if membership is None:
            return False

        self.db.delete(membership)
        self.db.commit()
        return True

    def get_members(self, household_id: int) -> List[dict]:
        """
        Get all members of a household with their roles and profile details,
        in participant order.
        """
        stmt = (
            select(
                HouseholdMember.id,
                HouseholdMember.user_id,
                HouseholdMember.role,
                HouseholdMember.joined_at,
                User.email,
                Profile.full_name,
                Profile.avatar_url,
            )
            .join(User, User.id == HouseholdMember.user_id)
            .outerjoin(Profile, Profile.id == User.id)
            .where(HouseholdMember.household_id == household_id)
            .order_by(HouseholdMember.joined_at, HouseholdMember.id)
        )

        results = self.db.execute(stmt).all()
        return [
            {
                "id": r.id,
                "user_id": r.user_id,
                "role": r.role,
                "joined_at": r.joined_at,
                "email": r.email,
                "full_name": r.full_name,
                "avatar_url": r.avatar_url,
            }
            for r in results
        ]

    def get_participant_ids(self, household_id: int) -> List[int]:
        """User ids of the household's members ordered by join time: the rotation list."""
        stmt = (
            select(HouseholdMember.user_id)
            .where(HouseholdMember.household_id == household_id)
            .order_by(HouseholdMember.joined_at, HouseholdMember.id)
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_member_role(self, household_id: int, user_id: int) -> Optional[MemberRole]:
        membership = self.get_membership(household_id, user_id)
        return membership.role if membership else None

    def is_member(self, household_id: int, user_id: int) -> bool:
        return self.get_membership(household_id, user_id) is not None

    def is_admin(self, household_id: int, user_id: int) -> bool:
        return self.get_member_role(household_id, user_id) == MemberRole.ADMIN

    def get_admin_count(self, household_id: int) -> int:
        stmt = select(func.count(HouseholdMember.id)).where(
            and_(
                HouseholdMember.household_id == household_id,
                HouseholdMember.role == MemberRole.ADMIN,
            )
        )
        return self.db.execute(stmt).scalar_one()

    def get_member_count(self, household_id: int) -> int:
        stmt = select(func.count(HouseholdMember.id)).where(
            HouseholdMember.household_id == household_id
        )
        return self.db.execute(stmt).scalar_one()

    def set_role(self, household_id: int, user_id: int, role: MemberRole) -> bool:
        membership = self.get_membership(household_id, user_id)
        if membership is None:
            return False

        membership.role = role
        self.db.commit()
        return True
