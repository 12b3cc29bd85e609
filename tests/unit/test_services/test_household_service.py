import pytest
from sqlalchemy.orm import Session
from flatflow.core.exception import (
    AuthorizationException,
    BadRequestException,
    ResourceNotFoundException,
)
from flatflow.models import Chore, Household, HouseholdMember, MemberRole, ShoppingItem
from flatflow.schemas.household import HouseholdCreate, HouseholdUpdate
from flatflow.services.household_service import HouseholdService


@pytest.mark.unit
class TestHouseholdService:
    """Unit tests for the household directory and membership rules."""

    def test_create_household_makes_creator_admin(self, db_session: Session, admin_user):
        service = HouseholdService(db_session)

        household = service.create_household(admin_user, HouseholdCreate(name="  Flat 3B  "))

        assert household.name == "Flat 3B"
        assert household.created_by_id == admin_user.id
        assert service.household_repo.is_admin(household.id, admin_user.id)
        assert household.member_count == 1

    def test_blank_name_rejected(self):
        with pytest.raises(ValueError):
            HouseholdCreate(name="   ")

    def test_get_user_households(self, db_session: Session, shared_household, member_user, outsider):
        service = HouseholdService(db_session)

        assert [h.id for h in service.get_user_households(member_user.id)] == [shared_household.id]
        assert service.get_user_households(outsider.id) == []

    def test_get_household_requires_membership(self, db_session: Session, household, outsider):
        with pytest.raises(AuthorizationException):
            HouseholdService(db_session).get_household(household.id, outsider.id)

    def test_get_missing_household(self, db_session: Session, admin_user):
        with pytest.raises(ResourceNotFoundException):
            HouseholdService(db_session).get_household(999, admin_user.id)

    def test_rename_household_admin_only(self, db_session: Session, shared_household, admin_user, member_user):
        service = HouseholdService(db_session)

        with pytest.raises(AuthorizationException):
            service.rename_household(shared_household.id, member_user.id, HouseholdUpdate(name="Mine"))

        renamed = service.rename_household(shared_household.id, admin_user.id, HouseholdUpdate(name="Flat 4C"))
        assert renamed.name == "Flat 4C"

    def test_delete_household_cascades(self, db_session: Session, shared_household, admin_user, member_user):
        db_session.add(Chore(household_id=shared_household.id, created_by_id=admin_user.id, name="Bins"))
        db_session.commit()
        service = HouseholdService(db_session)

        with pytest.raises(AuthorizationException):
            service.delete_household(shared_household.id, member_user.id)

        assert service.delete_household(shared_household.id, admin_user.id) is True
        assert db_session.query(Household).count() == 0
        assert db_session.query(HouseholdMember).count() == 0
        assert db_session.query(Chore).count() == 0

    def test_get_members_in_participant_order(self, db_session: Session, shared_household, admin_user, member_user):
        members = HouseholdService(db_session).get_members(shared_household.id, member_user.id)

        assert [m["user_id"] for m in members] == [admin_user.id, member_user.id]
        assert members[0]["role"] == MemberRole.ADMIN
        assert members[0]["full_name"] == "Alice"
        assert members[1]["email"] == "bob@example.com"

    def test_add_member_twice_is_noop(self, db_session: Session, shared_household, member_user):
        service = HouseholdService(db_session)

        assert service.add_member(shared_household.id, member_user) is None
        assert service.household_repo.get_member_count(shared_household.id) == 2

    def test_promote_member(self, db_session: Session, shared_household, admin_user, member_user, outsider):
        service = HouseholdService(db_session)

        with pytest.raises(AuthorizationException):
            service.promote_member(shared_household.id, member_user.id, member_user.id)
        with pytest.raises(BadRequestException):
            service.promote_member(shared_household.id, admin_user.id, outsider.id)

        service.promote_member(shared_household.id, admin_user.id, member_user.id)
        assert service.household_repo.is_admin(shared_household.id, member_user.id)

    def test_remove_member(self, db_session: Session, shared_household, admin_user, member_user):
        service = HouseholdService(db_session)

        with pytest.raises(AuthorizationException):
            service.remove_member(shared_household.id, member_user.id, admin_user.id)
        with pytest.raises(BadRequestException):
            service.remove_member(shared_household.id, admin_user.id, admin_user.id)

        service.remove_member(shared_household.id, admin_user.id, member_user.id)
        assert not service.household_repo.is_member(shared_household.id, member_user.id)

    def test_remove_co_admin(self, db_session: Session, shared_household, admin_user, member_user):
        service = HouseholdService(db_session)
        service.promote_member(shared_household.id, admin_user.id, member_user.id)

        service.remove_member(shared_household.id, admin_user.id, member_user.id)

        assert service.household_repo.get_admin_count(shared_household.id) == 1

    def test_remove_non_member(self, db_session: Session, household, admin_user, outsider):
        with pytest.raises(BadRequestException):
            HouseholdService(db_session).remove_member(household.id, admin_user.id, outsider.id)

    def test_last_admin_must_promote_before_leaving(self, db_session: Session, shared_household, admin_user, member_user):
        service = HouseholdService(db_session)

        with pytest.raises(BadRequestException) as exc_info:
            service.leave_household(shared_household.id, admin_user.id)
        assert "last admin" in str(exc_info.value)

        with pytest.raises(BadRequestException):
            service.leave_household(shared_household.id, admin_user.id, new_admin_id=admin_user.id)

        service.leave_household(shared_household.id, admin_user.id, new_admin_id=member_user.id)
        assert service.household_repo.is_admin(shared_household.id, member_user.id)
        assert not service.household_repo.is_member(shared_household.id, admin_user.id)

    def test_sole_member_leaving_deletes_household(self, db_session: Session, household, admin_user):
        result = HouseholdService(db_session).leave_household(household.id, admin_user.id)

        assert "deleted" in result["message"]
        assert db_session.query(Household).count() == 0

    def test_last_member_leaving_wraps_cursors(self, db_session: Session, shared_household, admin_user, member_user):
        chore = Chore(household_id=shared_household.id, created_by_id=admin_user.id, name="Dishes", current_turn=1)
        item = ShoppingItem(household_id=shared_household.id, added_by_id=admin_user.id, name="Milk", assigned_index=1)
        db_session.add_all([chore, item])
        db_session.commit()

        HouseholdService(db_session).leave_household(shared_household.id, member_user.id)

        db_session.refresh(chore)
        db_session.refresh(item)
        assert chore.current_turn == 0
        assert item.assigned_index == 0

    def test_removing_earlier_member_keeps_turns(
        self, db_session: Session, shared_household, admin_user, member_user, outsider
    ):
        service = HouseholdService(db_session)
        service.add_member(shared_household.id, outsider)
        assert service.get_participant_ids(shared_household.id) == [admin_user.id, member_user.id, outsider.id]

        chore = Chore(household_id=shared_household.id, created_by_id=admin_user.id, name="Bins", current_turn=2)
        item = ShoppingItem(household_id=shared_household.id, added_by_id=admin_user.id, name="Eggs", assigned_index=2)
        db_session.add_all([chore, item])
        db_session.commit()

        service.remove_member(shared_household.id, admin_user.id, member_user.id)

        db_session.refresh(chore)
        db_session.refresh(item)
        participants = service.get_participant_ids(shared_household.id)
        assert participants[chore.current_turn] == outsider.id
        assert participants[item.assigned_index] == outsider.id
