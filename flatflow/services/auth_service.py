from sqlalchemy.orm import Session
from datetime import timedelta
from flatflow.models.user import User
from flatflow.services.user_service import UserService
from flatflow.schemas.user import UserCreate, Token
from flatflow.utils.security import (
    create_access_token,
    create_refresh_token,
    decode_access_token,
)
from flatflow.config import settings
from flatflow.core.exception import AuthenticationException, AuthorizationException


class AuthService:
    """Issues and verifies session tokens."""

    def __init__(self, db: Session):
        self.db = db
        self.user_service = UserService(db)

    def register(self, user_data: UserCreate) -> User:
        return self.user_service.create_user(user_data)

    def login(self, email: str, password: str) -> Token:
        user = self.user_service.authenticate_user(email, password)

        if not user:
            raise AuthenticationException("Incorrect email or password")

        if not user.is_active:
            raise AuthorizationException(message="Account is deactivated")

        access_token = create_access_token(
            data={"sub": str(user.id), "email": user.email},
            expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )
        refresh_token = create_refresh_token(data={"sub": str(user.id)})

        return Token(
            access_token=access_token, token_type="bearer", refresh_token=refresh_token
        )

    def refresh_access_token(self, refresh_token: str) -> Token:
        payload = decode_access_token(refresh_token)

        if payload is None or payload.get("type") != "refresh":
            raise AuthenticationException("Could not validate refresh token")

        user = self._load_user(payload)
        if not user.is_active:
            raise AuthenticationException("Invalid user or inactive account")

        new_access_token = create_access_token(
            data={"sub": str(user.id), "email": user.email},
            expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )
        return Token(access_token=new_access_token, token_type="bearer")

    def verify_token(self, token: str) -> User:
        """
        Resolve an access token to an active user.

        Raises:
            AuthenticationException: missing, invalid or non-access token
            AuthorizationException: deactivated account
        """
        payload = decode_access_token(token)
        if payload is None or payload.get("type") != "access":
            raise AuthenticationException("Could not validate credentials")

        user = self._load_user(payload)
        if not user.is_active:
            raise AuthorizationException(message="Account is deactivated")

        return user

    def _load_user(self, payload: dict) -> User:
        user_id_str = payload.get("sub")
        if user_id_str is None:
            raise AuthenticationException("Could not validate credentials")

        try:
            user_id = int(user_id_str)
        except (ValueError, TypeError):
            raise AuthenticationException("Invalid token format")

        user = self.user_service.get_user_by_id(user_id)
        if user is None:
            raise AuthenticationException("User not found")
        return user
