from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from flatflow.database import get_db
from flatflow.dependencies import get_current_user
from flatflow.models.user import User
from flatflow.schemas.user import UserCreate, UserResponse, Token, RefreshRequest
from flatflow.schemas.result import Result
from flatflow.services.auth_service import AuthService

router = APIRouter()


@router.post(
    "/register",
    response_model=Result[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register(user_data: UserCreate, db: Session = Depends(get_db)):
    """
    Register a new account.

    - **email**: Valid email address (unique)
    - **password**: Password (8-72 chars)
    - **full_name**: Optional display name, defaults to the email's local part
    """
    user = AuthService(db).register(user_data)
    return Result.successful(data=user)


@router.post("/swagger-login", response_model=Token)
async def swagger_login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """Plain token response for the OpenAPI "Authorize" dialog."""
    token = AuthService(db).login(form_data.username, form_data.password)
    return Token(access_token=token.access_token, token_type=token.token_type)


@router.post("/login", response_model=Result[Token])
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)
):
    """Login with email (sent as ``username``) and password."""
    token = AuthService(db).login(form_data.username, form_data.password)
    return Result.successful(data=token)


@router.post("/refresh", response_model=Result[Token])
async def refresh_token(body: RefreshRequest, db: Session = Depends(get_db)):
    """Exchange a refresh token for a new access token."""
    new_token = AuthService(db).refresh_access_token(body.refresh_token)
    return Result.successful(data=new_token)


@router.get("/me", response_model=Result[UserResponse])
async def get_current_account(current_user: User = Depends(get_current_user)):
    return Result.successful(data=current_user)
