from sqlalchemy.orm import Session
from typing import List, Optional
from flatflow.models.base import utcnow
from flatflow.models.chore import Chore
from flatflow.repositories.chore_repository import ChoreRepository
from flatflow.services.household_service import HouseholdService
from flatflow.schemas.chore import ChoreCreate, ChoreUpdate, ChoreResponse
from flatflow.core.events import ChangeNotifier, notifier as default_notifier
from flatflow.core.exception import ResourceNotFoundException, BadRequestException
from flatflow.utils.rotation import next_turn, normalize_turn, participant_at

CHORES = Chore.__tablename__


class ChoreService:
    """Chores and their turn rotation. Every operation requires household membership."""

    def __init__(self, db: Session, notifier: Optional[ChangeNotifier] = None):
        self.db = db
        self.chore_repo = ChoreRepository(db)
        self.notifier = notifier or default_notifier
        self.household_service = HouseholdService(db, notifier=self.notifier)

    def create_chore(self, household_id: int, user_id: int, data: ChoreCreate) -> ChoreResponse:
        self.household_service.require_member(household_id, user_id)
        participants = self.household_service.get_participant_ids(household_id)

        chore = self.chore_repo.create(
            Chore(
                household_id=household_id,
                created_by_id=user_id,
                name=data.name,
                frequency=data.frequency,
                description=data.description,
                current_turn=normalize_turn(data.current_turn, len(participants)),
            )
        )
        self.notifier.publish(CHORES, household_id, "insert")
        return self._to_response(chore, participants)

    def list_chores(self, household_id: int, user_id: int, skip: int = 0, limit: int = 100) -> List[ChoreResponse]:
        self.household_service.require_member(household_id, user_id)
        participants = self.household_service.get_participant_ids(household_id)
        return [
            self._to_response(chore, participants)
            for chore in self.chore_repo.get_by_household(household_id, skip, limit)
        ]

    def get_chore(self, household_id: int, chore_id: int, user_id: int) -> ChoreResponse:
        self.household_service.require_member(household_id, user_id)
        chore = self._get(household_id, chore_id)
        return self._to_response(chore, self.household_service.get_participant_ids(household_id))

    def update_chore(self, household_id: int, chore_id: int, user_id: int, data: ChoreUpdate) -> ChoreResponse:
        self.household_service.require_member(household_id, user_id)
        chore = self._get(household_id, chore_id)

        chore = self.chore_repo.update(chore.id, data.model_dump(exclude_unset=True))
        self.notifier.publish(CHORES, household_id)
        return self._to_response(chore, self.household_service.get_participant_ids(household_id))

    def delete_chore(self, household_id: int, chore_id: int, user_id: int) -> dict:
        self.household_service.require_member(household_id, user_id)
        chore = self._get(household_id, chore_id)

        self.chore_repo.delete(chore.id)
        self.notifier.publish(CHORES, household_id, "delete")
        return {"message": "Chore deleted successfully"}

    def complete_chore(self, household_id: int, chore_id: int, user_id: int) -> ChoreResponse:
        """
        Mark a chore done: the turn passes to the next participant, wrapping
        from the last back to the first, and ``last_completed`` is stamped.
        """
        self.household_service.require_member(household_id, user_id)
        chore = self._get(household_id, chore_id)

        participants = self.household_service.get_participant_ids(household_id)
        if not participants:
            raise BadRequestException("This household has no participants to rotate through")

        chore.current_turn = next_turn(chore.current_turn, len(participants))
        chore.last_completed = utcnow()
        chore = self.chore_repo.save(chore)

        self.notifier.publish(CHORES, household_id)
        return self._to_response(chore, participants)

    def _get(self, household_id: int, chore_id: int) -> Chore:
        chore = self.chore_repo.get_in_household(chore_id, household_id)
        if not chore:
            raise ResourceNotFoundException("Chore", chore_id)
        return chore

    @staticmethod
    def _to_response(chore: Chore, participants: List[int]) -> ChoreResponse:
        response = ChoreResponse.model_validate(chore)
        response.assigned_user_id = participant_at(participants, chore.current_turn)
        return response
