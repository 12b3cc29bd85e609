from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from .database import get_db
from .config import settings
from .models.user import User
from .services.auth_service import AuthService
from .services.email_service import InvitationMailer

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)
) -> User:
    """
    Resolve the bearer token to the current user.
    Raises CustomException subclasses so errors share the Result envelope.
    """
    return AuthService(db).verify_token(token)


def get_invitation_mailer() -> InvitationMailer:
    """Mailer used by the invitation endpoints; overridden in tests."""
    return InvitationMailer.from_settings()
