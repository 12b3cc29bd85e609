from sqlalchemy.orm import Session
from flatflow.models.chore import Chore
from flatflow.repositories.repository import HouseholdScopedRepository
from flatflow.utils.rotation import shift_after_removal


class ChoreRepository(HouseholdScopedRepository[Chore]):
    """Repository for chores."""

    def __init__(self, db: Session):
        super().__init__(Chore, db)

    def shift_turns(self, household_id: int, removed_index: int, participant_count: int) -> int:
        """
        Move every chore's cursor after the participant at ``removed_index``
        left, so each turn stays with the same person. Returns the number of
        chores changed.
        """
        changed = 0
        for chore in self.db.query(Chore).filter(Chore.household_id == household_id):
            turn = shift_after_removal(chore.current_turn, removed_index, participant_count)
            if turn != chore.current_turn:
                chore.current_turn = turn
                changed += 1
        if changed:
            self.db.commit()
        return changed
