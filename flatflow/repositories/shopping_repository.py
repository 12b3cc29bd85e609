from sqlalchemy.orm import Session
from typing import List
from flatflow.models.shopping import ShoppingItem
from flatflow.repositories.repository import HouseholdScopedRepository
from flatflow.utils.rotation import shift_after_removal


class ShoppingItemRepository(HouseholdScopedRepository[ShoppingItem]):
    """Repository for shopping list items."""

    def __init__(self, db: Session):
        super().__init__(ShoppingItem, db)

    def get_low_items(self, household_id: int, skip: int = 0, limit: int = 100) -> List[ShoppingItem]:
        """Items flagged as running low."""
        return (
            self.db.query(ShoppingItem)
            .filter(
                ShoppingItem.household_id == household_id,
                ShoppingItem.is_low.is_(True),
            )
            .order_by(ShoppingItem.updated_at.desc(), ShoppingItem.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def shift_assignments(self, household_id: int, removed_index: int, participant_count: int) -> int:
        changed = 0
        for item in self.db.query(ShoppingItem).filter(ShoppingItem.household_id == household_id):
            index = shift_after_removal(item.assigned_index, removed_index, participant_count)
            if index != item.assigned_index:
                item.assigned_index = index
                changed += 1
        if changed:
            self.db.commit()
        return changed
