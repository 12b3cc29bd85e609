from sqlalchemy.orm import Session
from typing import List, Optional
from flatflow.models.base import utcnow
from flatflow.models.shopping import ShoppingItem
from flatflow.repositories.shopping_repository import ShoppingItemRepository
from flatflow.services.household_service import HouseholdService
from flatflow.schemas.shopping import ShoppingItemCreate, ShoppingItemUpdate, ShoppingItemResponse
from flatflow.core.events import ChangeNotifier, notifier as default_notifier
from flatflow.core.exception import ResourceNotFoundException, BadRequestException
from flatflow.utils.rotation import next_turn, normalize_turn, participant_at

SHOPPING_ITEMS = ShoppingItem.__tablename__


class ShoppingService:
    """Shopping list: low-stock flags and rotating purchase responsibility."""

    def __init__(self, db: Session, notifier: Optional[ChangeNotifier] = None):
        self.db = db
        self.item_repo = ShoppingItemRepository(db)
        self.notifier = notifier or default_notifier
        self.household_service = HouseholdService(db, notifier=self.notifier)

    def add_item(self, household_id: int, user_id: int, data: ShoppingItemCreate) -> ShoppingItemResponse:
        self.household_service.require_member(household_id, user_id)
        participants = self.household_service.get_participant_ids(household_id)

        item = self.item_repo.create(
            ShoppingItem(
                household_id=household_id,
                added_by_id=user_id,
                name=data.name,
                quantity=data.quantity,
                category=data.category,
                is_low=data.is_low,
                flagged_by_id=user_id if data.is_low else None,
                assigned_index=normalize_turn(data.assigned_index, len(participants)),
            )
        )
        self.notifier.publish(SHOPPING_ITEMS, household_id, "insert")
        return self._to_response(item, participants)

    def list_items(
        self, household_id: int, user_id: int, low_only: bool = False, skip: int = 0, limit: int = 100
    ) -> List[ShoppingItemResponse]:
        self.household_service.require_member(household_id, user_id)
        participants = self.household_service.get_participant_ids(household_id)
        if low_only:
            items = self.item_repo.get_low_items(household_id, skip, limit)
        else:
            items = self.item_repo.get_by_household(household_id, skip, limit)
        return [self._to_response(item, participants) for item in items]

    def update_item(
        self, household_id: int, item_id: int, user_id: int, data: ShoppingItemUpdate
    ) -> ShoppingItemResponse:
        self.household_service.require_member(household_id, user_id)
        item = self._get(household_id, item_id)

        item = self.item_repo.update(item.id, data.model_dump(exclude_unset=True))
        self.notifier.publish(SHOPPING_ITEMS, household_id)
        return self._to_response(item, self.household_service.get_participant_ids(household_id))

    def delete_item(self, household_id: int, item_id: int, user_id: int) -> dict:
        self.household_service.require_member(household_id, user_id)
        item = self._get(household_id, item_id)

        self.item_repo.delete(item.id)
        self.notifier.publish(SHOPPING_ITEMS, household_id, "delete")
        return {"message": "Item deleted successfully"}

    def flag_low(self, household_id: int, item_id: int, user_id: int) -> ShoppingItemResponse:
        """Flag an item as running low on behalf of the current user."""
        self.household_service.require_member(household_id, user_id)
        item = self._get(household_id, item_id)

        item.is_low = True
        item.flagged_by_id = user_id
        item = self.item_repo.save(item)

        self.notifier.publish(SHOPPING_ITEMS, household_id)
        return self._to_response(item, self.household_service.get_participant_ids(household_id))

    def complete_purchase(self, household_id: int, item_id: int, user_id: int) -> ShoppingItemResponse:
        """Record that the item was bought: clear the flag and rotate the assignment."""
        self.household_service.require_member(household_id, user_id)
        item = self._get(household_id, item_id)

        participants = self.household_service.get_participant_ids(household_id)
        if not participants:
            raise BadRequestException("This household has no participants to rotate through")

        item.is_low = False
        item.flagged_by_id = None
        item.assigned_index = next_turn(item.assigned_index, len(participants))
        item.last_purchased = utcnow()
        item = self.item_repo.save(item)

        self.notifier.publish(SHOPPING_ITEMS, household_id)
        return self._to_response(item, participants)

    def _get(self, household_id: int, item_id: int) -> ShoppingItem:
        item = self.item_repo.get_in_household(item_id, household_id)
        if not item:
            raise ResourceNotFoundException("Shopping item", item_id)
        return item

    @staticmethod
    def _to_response(item: ShoppingItem, participants: List[int]) -> ShoppingItemResponse:
        response = ShoppingItemResponse.model_validate(item)
        response.assigned_user_id = participant_at(participants, item.assigned_index)
        return response
