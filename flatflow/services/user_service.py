from sqlalchemy.orm import Session
from typing import Optional
from flatflow.models.user import User, Profile
from flatflow.repositories.user_repository import UserRepository
from flatflow.schemas.user import UserCreate, ProfileUpdate
from flatflow.utils.security import get_password_hash, verify_password
from flatflow.core.events import ChangeNotifier, notifier as default_notifier
from flatflow.core.exception import (
    ResourceNotFoundException,
    DuplicateResourceException,
)


class UserService:
    """Service layer for accounts and profiles."""

    def __init__(self, db: Session, notifier: Optional[ChangeNotifier] = None):
        self.db = db
        self.user_repo = UserRepository(db)
        self.notifier = notifier or default_notifier

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self.user_repo.get(user_id)

    def create_user(self, user_data: UserCreate) -> User:
        """
        Create a new account and its profile.

        Raises:
            DuplicateResourceException: If the email is already registered
        """
        email = user_data.email.lower()
        if self.user_repo.email_exists(email):
            raise DuplicateResourceException("User", email)

        user = self.user_repo.create(
            User(
                email=email,
                hashed_password=get_password_hash(user_data.password),
                is_active=True,
            )
        )
        self.user_repo.upsert_profile(
            user.id, email=email, full_name=user_data.full_name or default_full_name(email)
        )
        return user

    def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """Returns the user if the credentials are valid, None otherwise."""
        user = self.user_repo.get_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            return None
        return user

    def ensure_profile(self, user: User) -> Profile:
        """
        Make sure the user has a profile with a display name, creating or
        backfilling it from the account email.
        """
        profile = self.user_repo.get_profile(user.id)
        if profile is not None and profile.full_name:
            return profile
        return self.user_repo.upsert_profile(
            user.id, email=user.email, full_name=default_full_name(user.email)
        )

    def update_profile(self, user: User, data: ProfileUpdate) -> Profile:
        self.ensure_profile(user)
        update_data = data.model_dump(exclude_unset=True)
        profile = self.user_repo.upsert_profile(user.id, **update_data)
        for membership in user.memberships:
            self.notifier.publish(Profile.__tablename__, membership.household_id)
        return profile

    def get_display_name(self, user: User) -> str:
        profile = self.user_repo.get_profile(user.id)
        if profile and profile.full_name:
            return profile.full_name
        return user.email or "Someone"

    def deactivate_account(self, user_id: int) -> User:
        user = self.user_repo.deactivate_user(user_id)
        if not user:
            raise ResourceNotFoundException("User", user_id)
        return user


def default_full_name(email: str) -> str:
    """Local part of the email, the fallback display name."""
    return email.split("@")[0] if email else "User"
