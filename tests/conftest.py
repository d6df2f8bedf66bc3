"""Shared fixtures: in-memory database, API client and sample users."""

from datetime import UTC, datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.database import Base, get_db
from app.main import app
from app.models.enums import ReadingStatus, UserRole
from app.models.flat import Flat
from app.models.reading import Reading, year_month_of
from app.models.user import User
from app.services.auth import create_access_token, get_password_hash

ADMIN_PASSWORD = "adminpass123"
TENANT_PASSWORD = "tenantpass123"


@pytest.fixture
def test_db():
    """Create an in-memory test database."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def client(test_db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    """Store meter photos in a per-test directory."""
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(path))
    return path


@pytest.fixture
def flat(test_db):
    """A flat with no initial reading."""
    db_flat = Flat(flat_number="A-101", tenant_name="Asha Rao")
    test_db.add(db_flat)
    test_db.commit()
    test_db.refresh(db_flat)
    return db_flat


@pytest.fixture
def other_flat(test_db):
    """A second flat with an initial reading."""
    db_flat = Flat(flat_number="B-201", tenant_name="Meera Iyer", initial_reading=500)
    test_db.add(db_flat)
    test_db.commit()
    test_db.refresh(db_flat)
    return db_flat


@pytest.fixture
def admin_user(test_db):
    """Create an admin user in the database."""
    user = User(
        username="admin",
        hashed_password=get_password_hash(ADMIN_PASSWORD),
        role=UserRole.ADMIN,
    )
    test_db.add(user)
    test_db.commit()
    test_db.refresh(user)
    return user


@pytest.fixture
def tenant_user(test_db, flat):
    """Create a tenant user linked to the flat."""
    user = User(
        username="tenant",
        hashed_password=get_password_hash(TENANT_PASSWORD),
        role=UserRole.TENANT,
        flat_id=flat.id,
    )
    test_db.add(user)
    test_db.commit()
    test_db.refresh(user)
    return user


def _bearer(user: User) -> dict[str, str]:
    token = create_access_token(data={"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user):
    return _bearer(admin_user)


@pytest.fixture
def tenant_headers(tenant_user):
    return _bearer(tenant_user)


@pytest.fixture
def make_reading(test_db):
    """Factory inserting a reading directly, bypassing the upload gate."""

    def _make(
        flat: Flat,
        created_at: datetime,
        status: ReadingStatus = ReadingStatus.PENDING,
        **fields,
    ) -> Reading:
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=UTC)
        reading = Reading(
            flat_id=flat.id,
            status=status,
            created_at=created_at,
            year_month=fields.pop("year_month", year_month_of(created_at)),
            **fields,
        )
        test_db.add(reading)
        test_db.commit()
        test_db.refresh(reading)
        return reading

    return _make
