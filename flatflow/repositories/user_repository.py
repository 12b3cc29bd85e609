from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import Optional
from flatflow.models.user import User, Profile
from flatflow.repositories.repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for accounts and their profiles."""

    def __init__(self, db: Session):
        super().__init__(User, db)

    def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup by email."""
        return (
            self.db.query(User)
            .filter(func.lower(User.email) == email.strip().lower())
            .first()
        )

    def email_exists(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def get_profile(self, user_id: int) -> Optional[Profile]:
        return self.db.get(Profile, user_id)

    def upsert_profile(self, user_id: int, **fields) -> Profile:
        """Create the profile row if missing, otherwise update the given fields."""
        profile = self.get_profile(user_id)
        if profile is None:
            profile = Profile(id=user_id, **fields)
            self.db.add(profile)
        else:
            for key, value in fields.items():
                setattr(profile, key, value)

        self.db.commit()
        self.db.refresh(profile)
        return profile

    def deactivate_user(self, user_id: int) -> Optional[User]:
        return self.update(user_id, {"is_active": False})
