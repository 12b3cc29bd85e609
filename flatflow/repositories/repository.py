from sqlalchemy.orm import Session
from typing import Generic, Type, TypeVar, List, Optional, Dict, Any
from flatflow.models.base import BaseModel

T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    """Common CRUD operations shared by every repository."""

    def __init__(self, model: Type[T], db: Session):
        self.model = model
        self.db = db

    def get(self, id: int) -> Optional[T]:
        return self.db.get(self.model, id)

    def create(self, obj: T) -> T:
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def save(self, obj: T) -> T:
        """Commit pending changes made to an already loaded object."""
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def update(self, id: int, data: Dict[str, Any]) -> Optional[T]:
        """Update a record by ID. Unknown keys are ignored."""
        obj = self.get(id)
        if not obj:
            return None

        for key, value in data.items():
            if hasattr(obj, key):
                setattr(obj, key, value)

        return self.save(obj)

    def delete(self, id: int) -> bool:
        """Delete a record by ID. Returns True if deleted, False if not found."""
        obj = self.get(id)
        if not obj:
            return False

        self.db.delete(obj)
        self.db.commit()
        return True


class HouseholdScopedRepository(BaseRepository[T]):
    """Repository for models carrying a ``household_id`` column."""

    def get_by_household(self, household_id: int, skip: int = 0, limit: int = 100) -> List[T]:
        return (
            self.db.query(self.model)
            .filter(self.model.household_id == household_id)
            .order_by(self.model.created_at, self.model.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_in_household(self, id: int, household_id: int) -> Optional[T]:
        return (
            self.db.query(self.model)
            .filter(self.model.id == id, self.model.household_id == household_id)
            .first()
        )
