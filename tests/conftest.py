import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import worklog.models  # noqa: F401
from worklog.core.database import Base, get_db
from worklog.core.security import create_access_token, get_password_hash
from worklog.models.activity import Activity
from worklog.models.project import Project
from worklog.models.user import User, UserRole
from main import app

# Test database
SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def db():
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _make_user(db, username, role, hourly_rate=None):
    user = User(
        email=f"{username}@example.com",
        username=username,
        hashed_password=get_password_hash(f"{username}password"),
        alias=username.title(),
        role=role,
        is_active=True,
        hourly_rate=hourly_rate,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def test_user(db):
    return _make_user(db, "testuser", UserRole.USER, hourly_rate=60.0)


@pytest.fixture
def other_user(db):
    return _make_user(db, "otheruser", UserRole.USER)


@pytest.fixture
def test_manager(db):
    return _make_user(db, "manager", UserRole.MANAGER)


@pytest.fixture
def test_admin(db):
    return _make_user(db, "admin", UserRole.ADMIN)


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(subject=str(user.id))}"}


@pytest.fixture
def user_headers(test_user):
    return auth_headers(test_user)


@pytest.fixture
def manager_headers(test_manager):
    return auth_headers(test_manager)


@pytest.fixture
def admin_headers(test_admin):
    return auth_headers(test_admin)


@pytest.fixture
def project(db):
    project = Project(name="Website relaunch", hourly_rate=80.0)
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


@pytest.fixture
def activity(db, project):
    activity = Activity(name="Development", project_id=project.id)
    db.add(activity)
    db.commit()
    db.refresh(activity)
    return activity


@pytest.fixture
def global_activity(db):
    activity = Activity(name="Meeting")
    db.add(activity)
    db.commit()
    db.refresh(activity)
    return activity
