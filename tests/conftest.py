"""
Centralized Test Configuration.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from buildbooks.core.database import Base
from buildbooks.core.dependencies import get_db
from buildbooks.core.identity import ActingUser
from buildbooks.core.security import create_access_token
from buildbooks.main import app
from buildbooks.models import Project, User, UserRole, Vendor
from buildbooks.models.project import ProjectType

# Setup In-Memory Test Database
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(
    bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
)


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test function and drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides = {}


def _make_user(db_session, role: UserRole, name: str) -> User:
    user = User(name=name, email=f"{name.lower()}@test.com", role=role)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def owner_user(db_session):
    return _make_user(db_session, UserRole.owner, "Owner")


@pytest.fixture
def accountant_user(db_session):
    return _make_user(db_session, UserRole.accountant, "Accountant")


@pytest.fixture
def owner(owner_user):
    return ActingUser(id=owner_user.id, role=UserRole.owner)


@pytest.fixture
def accountant(accountant_user):
    return ActingUser(id=accountant_user.id, role=UserRole.accountant)


def auth_headers(acting_user: ActingUser) -> dict:
    token = create_access_token({"sub": acting_user.id, "role": acting_user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner_headers(owner):
    return auth_headers(owner)


@pytest.fixture
def accountant_headers(accountant):
    return auth_headers(accountant)


def make_project(db_session, name: str = "Gulberg Villa") -> Project:
    project = Project(
        name=name,
        type=ProjectType.customer,
        agreement_total_amount=Decimal("1000000.00"),
        agreement_start_date=date(2024, 1, 1),
        agreement_end_date=date(2024, 12, 31),
    )
    db_session.add(project)
    db_session.commit()
    return project


@pytest.fixture
def project(db_session):
    return make_project(db_session)


@pytest.fixture
def other_project(db_session):
    return make_project(db_session, name="DHA Plaza")


@pytest.fixture
def vendor(db_session, project):
    vendor = Vendor(project_id=project.id, name="Lucky Cement")
    db_session.add(vendor)
    db_session.commit()
    return vendor
