import os
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

# Set required environment variables for testing
os.environ["API_V1_STR"] = "/api/v1"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RESEND_API_KEY"] = ""
os.environ["SITE_URL"] = "http://flatflow.test"

from flatflow.main import app
from flatflow.database import get_db
from flatflow.dependencies import get_invitation_mailer
from flatflow.models.base import Base
from flatflow.services.email_service import EmailDispatchError, build_invite_url

TEST_DATABASE_URL = "sqlite://"


class FakeMailer:
    """Records invitation emails instead of calling the email API."""

    def __init__(self, site_url: str = "http://flatflow.test"):
        self.site_url = site_url
        self.sent = []
        self.fail_with = None

    def send_invitation(self, email, household_id, household_name, inviter_name, token):
        if self.fail_with:
            raise EmailDispatchError(self.fail_with)
        message = {
            "email": email,
            "household_id": household_id,
            "household_name": household_name,
            "inviter_name": inviter_name,
            "token": token,
            "invite_url": build_invite_url(token, self.site_url),
        }
        self.sent.append(message)
        return {"id": f"fake-{len(self.sent)}"}


@pytest.fixture
def engine():
    """A fresh in-memory database for every test."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    """Session bound to the test database; also served to the API through get_db."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    yield session

    session.close()
    app.dependency_overrides.clear()


@pytest.fixture
def mailer(db_session):
    fake = FakeMailer()
    app.dependency_overrides[get_invitation_mailer] = lambda: fake
    return fake


@pytest.fixture
def client(db_session, mailer):
    """Create a FastAPI TestClient with database and mailer overrides."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(db_session):
    """Factory creating accounts (with profiles) through the user service."""
    from flatflow.schemas.user import UserCreate
    from flatflow.services.user_service import UserService

    def _make_user(email: str, password: str = "testpass123", full_name: str = None):
        return UserService(db_session).create_user(
            UserCreate(email=email, password=password, full_name=full_name)
        )

    return _make_user


@pytest.fixture
def test_user(make_user):
    return make_user("test@example.com", full_name="Test User")


@pytest.fixture
def admin_user(make_user):
    return make_user("alice@example.com", full_name="Alice")


@pytest.fixture
def member_user(make_user):
    return make_user("bob@example.com", full_name="Bob")


@pytest.fixture
def outsider(make_user):
    return make_user("carol@example.com", full_name="Carol")


@pytest.fixture
def household(db_session, admin_user):
    """Household administered by ``admin_user``."""
    from flatflow.schemas.household import HouseholdCreate
    from flatflow.services.household_service import HouseholdService

    return HouseholdService(db_session).create_household(
        admin_user, HouseholdCreate(name="Flat 3B")
    )


@pytest.fixture
def shared_household(db_session, household, member_user):
    """``household`` with ``member_user`` joined as a plain member."""
    from flatflow.services.household_service import HouseholdService

    HouseholdService(db_session).add_member(household.id, member_user)
    return household


@pytest.fixture
def token_for():
    from flatflow.utils.security import create_access_token

    def _token_for(user) -> str:
        return create_access_token(data={"sub": str(user.id), "email": user.email})

    return _token_for


@pytest.fixture
def headers_for(token_for):
    """Bearer headers for any user."""

    def _headers_for(user) -> dict:
        return {"Authorization": f"Bearer {token_for(user)}"}

    return _headers_for


@pytest.fixture
def auth_token(client, test_user):
    """Get authentication token for test user."""
    response = client.post(
        "/api/v1/auth/login",
        data={"username": "test@example.com", "password": "testpass123"}
    )
    return response.json()["data"]["access_token"]


@pytest.fixture
def auth_headers(auth_token):
    """Get authorization headers with bearer token."""
    return {"Authorization": f"Bearer {auth_token}"}
