import pytest
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from app.database import Base, get_db
from app.main import app
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "Password123!"


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Get a clean database session for each test function.
    Services commit and roll back on their own, so tables are emptied
    afterwards instead of wrapping the test in an outer transaction.
    """
    session = TestingSessionLocal()

    yield session

    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(scope="function")
def make_user(db_session):
    """Factory for users; password is DEFAULT_PASSWORD."""
    from app.models.user import User, UserRole
    from app.services import auth as auth_service

    hashed = auth_service.get_password_hash(DEFAULT_PASSWORD)

    def _make_user(email, name="Test User", role=UserRole.EMPLOYEE, team=None, vacation=22, sick=3):
        user = User(
            email=email,
            hashed_password=hashed,
            name=name,
            role=role,
            team_id=team.id if team else None,
            vacation_days_balance=vacation,
            sick_days_balance=sick,
            is_active=True,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture(scope="function")
def hr_user(make_user):
    from app.models.user import UserRole
    return make_user("ana.ruiz@acme.com", name="Ana Ruiz", role=UserRole.HR, vacation=30, sick=15)


@pytest.fixture(scope="function")
def manager_user(make_user):
    from app.models.user import UserRole
    return make_user("carlos.lopez@acme.com", name="Carlos López", role=UserRole.MANAGER, vacation=20, sick=5)


@pytest.fixture(scope="function")
def team(db_session, manager_user):
    from app.models.team import Team
    team = Team(name="Development", manager_id=manager_user.id)
    db_session.add(team)
    db_session.commit()
    db_session.refresh(team)
    return team


@pytest.fixture(scope="function")
def employee_user(make_user, team):
    return make_user("maria.garcia@acme.com", name="María García", team=team, vacation=12)


@pytest.fixture(scope="function")
def ctx_for():
    """Build the SessionContext a request by this user would carry."""
    from app.core.permissions import SessionContext
    return SessionContext.for_user


@pytest.fixture(scope="function")
def get_token():
    """Helper fixture to create access tokens."""
    from app.services.auth import create_access_token

    def _get_token(user):
        return create_access_token(data={
            "sub": user.email,
            "role": user.role.value,
            "user_id": user.id,
        })
    return _get_token


@pytest.fixture(scope="function")
def auth_headers(get_token):
    def _auth_headers(user):
        return {"Authorization": f"Bearer {get_token(user)}"}
    return _auth_headers


@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
