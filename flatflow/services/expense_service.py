from collections import defaultdict
from decimal import Decimal
from sqlalchemy.orm import Session
from typing import Dict, List, Optional
from flatflow.models.expense import Expense, SplitType
from flatflow.repositories.expense_repository import ExpenseRepository
from flatflow.services.household_service import HouseholdService
from flatflow.schemas.expense import ExpenseCreate, ExpenseResponse, ExpenseShare, MemberBalance
from flatflow.core.events import ChangeNotifier, notifier as default_notifier
from flatflow.core.exception import ResourceNotFoundException, BadRequestException
from flatflow.utils.splits import even_split, to_money

EXPENSES = Expense.__tablename__


class ExpenseService:
    """Shared expense ledger and split calculation."""

    def __init__(self, db: Session, notifier: Optional[ChangeNotifier] = None):
        self.db = db
        self.expense_repo = ExpenseRepository(db)
        self.notifier = notifier or default_notifier
        self.household_service = HouseholdService(db, notifier=self.notifier)

    def create_expense(self, household_id: int, user_id: int, data: ExpenseCreate) -> ExpenseResponse:
        """
        Record an expense. The payer defaults to the current user and must
        be a member of the household.
        """
        self.household_service.require_member(household_id, user_id)

        paid_by_id = data.paid_by_id or user_id
        if not self.household_service.household_repo.is_member(household_id, paid_by_id):
            raise BadRequestException("The payer must be a member of the household")

        values = dict(
            household_id=household_id,
            created_by_id=user_id,
            description=data.description,
            amount=to_money(data.amount),
            paid_by_id=paid_by_id,
            split_type=data.split_type,
            bank_details=data.bank_details,
        )
        if data.expense_date is not None:
            values["date"] = data.expense_date

        expense = self.expense_repo.create(Expense(**values))
        self.notifier.publish(EXPENSES, household_id, "insert")
        return self._to_response(expense, self.household_service.get_participant_ids(household_id))

    def list_expenses(self, household_id: int, user_id: int, skip: int = 0, limit: int = 100) -> List[ExpenseResponse]:
        self.household_service.require_member(household_id, user_id)
        participants = self.household_service.get_participant_ids(household_id)
        return [
            self._to_response(expense, participants)
            for expense in self.expense_repo.get_by_household(household_id, skip, limit)
        ]

    def get_expense(self, household_id: int, expense_id: int, user_id: int) -> ExpenseResponse:
        self.household_service.require_member(household_id, user_id)
        expense = self._get(household_id, expense_id)
        return self._to_response(expense, self.household_service.get_participant_ids(household_id))

    def delete_expense(self, household_id: int, expense_id: int, user_id: int) -> dict:
        self.household_service.require_member(household_id, user_id)
        expense = self._get(household_id, expense_id)

        self.expense_repo.delete(expense.id)
        self.notifier.publish(EXPENSES, household_id, "delete")
        return {"message": "Expense deleted successfully"}

    def get_balances(self, household_id: int, user_id: int) -> List[MemberBalance]:
        """
        Per-member totals: what each member paid, what others owe them and
        what they owe others on evenly split expenses. A positive ``net``
        means the member is owed money. Individually settled expenses count
        towards ``paid`` only.
        """
        self.household_service.require_member(household_id, user_id)
        participants = self.household_service.get_participant_ids(household_id)

        paid: Dict[int, Decimal] = defaultdict(Decimal)
        owed: Dict[int, Decimal] = defaultdict(Decimal)
        owes: Dict[int, Decimal] = defaultdict(Decimal)
        for expense in self.expense_repo.get_all_for_household(household_id):
            paid[expense.paid_by_id] += to_money(expense.amount)
            for debtor, share in self.split(expense, participants).items():
                owes[debtor] += share
                owed[expense.paid_by_id] += share

        user_ids = list(participants) + [uid for uid in paid if uid not in participants]
        return [
            MemberBalance(
                user_id=uid,
                paid=to_money(paid[uid]),
                owed=to_money(owed[uid]),
                owes=to_money(owes[uid]),
                net=to_money(owed[uid] - owes[uid]),
            )
            for uid in user_ids
        ]

    @staticmethod
    def split(expense: Expense, participants: List[int]) -> Dict[int, Decimal]:
        """Amount each non-payer owes for one expense; empty for individual splits."""
        if expense.split_type != SplitType.ALL:
            return {}
        return even_split(expense.amount, expense.paid_by_id, participants)

    def _get(self, household_id: int, expense_id: int) -> Expense:
        expense = self.expense_repo.get_in_household(expense_id, household_id)
        if not expense:
            raise ResourceNotFoundException("Expense", expense_id)
        return expense

    def _to_response(self, expense: Expense, participants: List[int]) -> ExpenseResponse:
        response = ExpenseResponse.model_validate(expense)
        response.shares = [
            ExpenseShare(user_id=uid, amount=amount)
            for uid, amount in self.split(expense, participants).items()
        ]
        return response
