import pytest
from datetime import date
from decimal import Decimal
from sqlalchemy.orm import Session
from flatflow.core.exception import AuthorizationException, BadRequestException, ResourceNotFoundException
from flatflow.models import Expense, SplitType
from flatflow.schemas.expense import ExpenseCreate
from flatflow.services.expense_service import ExpenseService
from flatflow.services.household_service import HouseholdService


@pytest.fixture
def flat_of_three(db_session, shared_household, make_user):
    erin = make_user("erin@example.com", full_name="Erin")
    HouseholdService(db_session).add_member(shared_household.id, erin)
    return shared_household, erin


@pytest.mark.unit
class TestExpenseService:
    """Unit tests for the expense ledger."""

    def test_even_split_three_ways(self, db_session: Session, flat_of_three, admin_user, member_user):
        household, erin = flat_of_three

        expense = ExpenseService(db_session).create_expense(
            household.id, admin_user.id, ExpenseCreate(description="Groceries", amount=Decimal("45.50"))
        )

        assert expense.paid_by_id == admin_user.id
        assert expense.amount == Decimal("45.50")
        assert expense.split_type == SplitType.ALL
        assert {share.user_id: share.amount for share in expense.shares} == {
            member_user.id: Decimal("15.17"),
            erin.id: Decimal("15.17"),
        }

    def test_individual_expense_has_no_shares(self, db_session: Session, shared_household, admin_user):
        expense = ExpenseService(db_session).create_expense(
            shared_household.id,
            admin_user.id,
            ExpenseCreate(description="Deposit", amount=Decimal("100"), split_type=SplitType.INDIVIDUAL),
        )

        assert expense.shares == []

    def test_paid_by_other_member(self, db_session: Session, shared_household, admin_user, member_user):
        expense = ExpenseService(db_session).create_expense(
            shared_household.id,
            admin_user.id,
            ExpenseCreate(description="Internet", amount=Decimal("30.00"), paid_by_id=member_user.id,
                          bank_details="NL00 BANK 0123 4567 89", date=date(2024, 5, 1)),
        )

        assert expense.paid_by_id == member_user.id
        assert expense.date == date(2024, 5, 1)
        assert expense.bank_details == "NL00 BANK 0123 4567 89"
        assert [(s.user_id, s.amount) for s in expense.shares] == [(admin_user.id, Decimal("15.00"))]

    def test_payer_must_be_member(self, db_session: Session, household, admin_user, outsider):
        with pytest.raises(BadRequestException):
            ExpenseService(db_session).create_expense(
                household.id, admin_user.id,
                ExpenseCreate(description="Pizza", amount=Decimal("20"), paid_by_id=outsider.id),
            )
        assert db_session.query(Expense).count() == 0

    def test_negative_amount_rejected(self):
        with pytest.raises(ValueError):
            ExpenseCreate(description="Refund", amount=Decimal("-1.00"))

    def test_list_newest_first(self, db_session: Session, shared_household, admin_user):
        service = ExpenseService(db_session)
        service.create_expense(shared_household.id, admin_user.id,
                               ExpenseCreate(description="Old", amount=Decimal("10"), date=date(2024, 1, 1)))
        service.create_expense(shared_household.id, admin_user.id,
                               ExpenseCreate(description="New", amount=Decimal("10"), date=date(2024, 2, 1)))

        expenses = service.list_expenses(shared_household.id, admin_user.id)

        assert [e.description for e in expenses] == ["New", "Old"]

    def test_get_and_delete(self, db_session: Session, shared_household, admin_user, member_user):
        service = ExpenseService(db_session)
        expense = service.create_expense(shared_household.id, admin_user.id,
                                         ExpenseCreate(description="Gas", amount=Decimal("60")))

        fetched = service.get_expense(shared_household.id, expense.id, member_user.id)
        assert fetched.shares[0].amount == Decimal("30.00")

        service.delete_expense(shared_household.id, expense.id, member_user.id)
        with pytest.raises(ResourceNotFoundException):
            service.get_expense(shared_household.id, expense.id, member_user.id)

    def test_balances(self, db_session: Session, flat_of_three, admin_user, member_user):
        household, erin = flat_of_three
        service = ExpenseService(db_session)
        service.create_expense(household.id, admin_user.id,
                               ExpenseCreate(description="Groceries", amount=Decimal("45.50")))
        service.create_expense(household.id, member_user.id,
                               ExpenseCreate(description="Soap", amount=Decimal("9.00")))
        service.create_expense(household.id, erin.id,
                               ExpenseCreate(description="Bike", amount=Decimal("80"), split_type=SplitType.INDIVIDUAL))

        balances = {b.user_id: b for b in service.get_balances(household.id, erin.id)}

        alice = balances[admin_user.id]
        assert alice.paid == Decimal("45.50")
        assert alice.owed == Decimal("30.34")
        assert alice.owes == Decimal("3.00")
        assert alice.net == Decimal("27.34")

        bob = balances[member_user.id]
        assert bob.paid == Decimal("9.00")
        assert bob.owed == Decimal("6.00")
        assert bob.owes == Decimal("15.17")
        assert bob.net == Decimal("-9.17")

        erin_balance = balances[erin.id]
        assert erin_balance.paid == Decimal("80.00")
        assert erin_balance.owes == Decimal("18.17")
        assert erin_balance.net == Decimal("-18.17")

    def test_outsider_rejected(self, db_session: Session, household, outsider):
        with pytest.raises(AuthorizationException):
            ExpenseService(db_session).get_balances(household.id, outsider.id)
