"""Tests for whole-database export and import."""

import json
from datetime import UTC, datetime
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base
from app.models.enums import ReadingStatus, UserRole
from app.models.flat import Flat
from app.models.reading import Reading
from app.models.user import User
from app.schemas.tariff import TariffSettingsUpdate
from app.services.auth import authenticate_user
from app.services.backup import export_data, import_data
from app.services.tariff import get_current_settings, update_settings
from tests.conftest import TENANT_PASSWORD


@pytest.fixture
def populated_db(test_db, admin_user, tenant_user, flat, make_reading):
    update_settings(
        test_db,
        TariffSettingsUpdate(tariff_per_unit=Decimal("7.5")),
        user_id=admin_user.id,
    )
    make_reading(
        flat,
        datetime(2024, 3, 5, 8, 30, tzinfo=UTC),
        status=ReadingStatus.APPROVED,
        image_path="flat_1/abc.jpg",
        corrected_reading=Decimal("150.25"),
        previous_reading=Decimal("100"),
        units_used=Decimal("50.25"),
        amount=Decimal("1116.81"),
        approved_at=datetime(2024, 3, 6, tzinfo=UTC),
        tariff_at_approval=Decimal("7.5"),
        unit_factor_at_approval=Decimal("2.3"),
        minimum_price_at_approval=Decimal("250"),
        settings_version_at_approval=1,
        reviewed_by_user_id=admin_user.id,
    )
    return test_db


@pytest.fixture
def empty_db():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    db = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


class TestBackup:
    def test_export_shape(self, populated_db, flat):
        backup = export_data(populated_db)

        assert set(backup) == {"flats", "users", "settings", "readings"}
        assert backup["flats"][str(flat.id)]["flat_number"] == "A-101"
        reading = next(iter(backup["readings"].values()))
        assert reading["status"] == "approved"
        assert reading["amount"] == "1116.81"
        assert reading["year_month"] == "2024-03"
        # Survives a trip through the JSON encoder
        json.dumps(backup)

    def test_import_into_empty_database(self, populated_db, empty_db):
        backup = json.loads(json.dumps(export_data(populated_db)))

        counts = import_data(empty_db, backup)

        assert counts == {"flats": 1, "users": 2, "settings": 1, "readings": 1}
        reading = empty_db.query(Reading).one()
        assert reading.status == ReadingStatus.APPROVED
        assert reading.amount == Decimal("1116.81")
        assert reading.flat.flat_number == "A-101"
        assert empty_db.query(User).filter(User.role == UserRole.ADMIN).count() == 1
        assert get_current_settings(empty_db).tariff_per_unit == Decimal("7.5")
        assert authenticate_user(empty_db, "tenant", TENANT_PASSWORD) is not None

    def test_import_overwrites_same_id(self, populated_db, flat):
        backup = export_data(populated_db)
        backup["flats"][str(flat.id)]["tenant_name"] = "New Tenant"

        import_data(populated_db, backup)

        populated_db.expire_all()
        assert populated_db.query(Flat).count() == 1
        assert populated_db.get(Flat, flat.id).tenant_name == "New Tenant"

    def test_missing_year_month_is_derived(self, empty_db):
        import_data(
            empty_db,
            {
                "flats": {"7": {"flat_number": "C-1"}},
                "readings": {
                    "3": {
                        "flat_id": 7,
                        "status": "pending",
                        "created_at": "2023-11-20T10:00:00+00:00",
                    }
                },
            },
        )
        assert empty_db.get(Reading, 3).year_month == "2023-11"

    def test_invalid_collection(self, empty_db):
        with pytest.raises(ValueError):
            import_data(empty_db, {"flats": ["not", "a", "mapping"]})


class TestBackupEndpoints:
    def test_download_and_restore(self, client, admin_headers, populated_db):
        response = client.get("/api/admin/backup", headers=admin_headers)
        assert response.status_code == 200
        assert "attachment" in response.headers["content-disposition"]

        restore = client.post(
            "/api/admin/restore",
            files={"file": ("backup.json", response.content, "application/json")},
            headers=admin_headers,
        )
        assert restore.status_code == 200
        assert restore.json()["imported"]["readings"] == 1

    def test_restore_rejects_garbage(self, client, admin_headers):
        response = client.post(
            "/api/admin/restore",
            files={"file": ("backup.json", b"{not json", "application/json")},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_tenant_cannot_backup(self, client, tenant_headers):
        assert client.get("/api/admin/backup", headers=tenant_headers).status_code == 403
