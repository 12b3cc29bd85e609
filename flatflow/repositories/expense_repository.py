from sqlalchemy.orm import Session
from typing import List
from flatflow.models.expense import Expense
from flatflow.repositories.repository import HouseholdScopedRepository


class ExpenseRepository(HouseholdScopedRepository[Expense]):
    """Repository for expenses."""

    def __init__(self, db: Session):
        super().__init__(Expense, db)

    def get_by_household(self, household_id: int, skip: int = 0, limit: int = 100) -> List[Expense]:
        """Expenses of a household, most recent date first."""
        return (
            self.db.query(Expense)
            .filter(Expense.household_id == household_id)
            .order_by(Expense.date.desc(), Expense.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_all_for_household(self, household_id: int) -> List[Expense]:
        return (
            self.db.query(Expense)
            .filter(Expense.household_id == household_id)
            .order_by(Expense.id)
            .all()
        )
