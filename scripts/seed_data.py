"""Seed script to populate the database with sample data."""

import argparse
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from app.core.database import Base, SessionLocal, engine
from app.models.enums import ReadingStatus, UserRole
from app.models.flat import Flat
from app.models.reading import Reading, year_month_of
from app.models.user import User
from app.schemas.tariff import TariffSettingsUpdate
from app.services.auth import get_password_hash
from app.services.reading import approve_reading
from app.services.tariff import update_settings

SAMPLE_FLATS = [
    # flat number, tenant name, initial reading, monthly units
    ("A-101", "Asha Rao", Decimal("1200.0"), Decimal("42.5")),
    ("A-102", "Vikram Shah", Decimal("860.0"), Decimal("55.0")),
    ("B-201", "Meera Iyer", None, Decimal("38.2")),
]


def seed_database(admin_password: str, tenant_password: str) -> None:
    """Seed the database with sample data."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        # Check if data already exists
        if db.query(Flat).first():
            print("Database already has data. Skipping seed.")
            return

        print("Seeding database...")

        admin = User(
            username="admin",
            hashed_password=get_password_hash(admin_password),
            role=UserRole.ADMIN,
        )
        db.add(admin)
        db.flush()
        print(f"Created admin user: {admin.username}")

        tariff = update_settings(
            db,
            TariffSettingsUpdate(
                tariff_per_unit=Decimal("7.5"),
                minimum_price=Decimal("250"),
                unit_factor=Decimal("2.3"),
            ),
            user_id=admin.id,
        )
        print(f"Saved tariff settings v{tariff.version}")

        # Two approved months of history per flat
        now = datetime.now(UTC)
        months = [now - timedelta(days=62), now - timedelta(days=31)]

        for flat_number, tenant_name, initial, monthly_units in SAMPLE_FLATS:
            flat = Flat(
                flat_number=flat_number,
                tenant_name=tenant_name,
                owner_name=tenant_name,
                initial_reading=initial,
            )
            db.add(flat)
            db.flush()

            tenant = User(
                username=flat_number.lower().replace("-", ""),
                hashed_password=get_password_hash(tenant_password),
                role=UserRole.TENANT,
                flat_id=flat.id,
            )
            db.add(tenant)
            db.commit()

            value = initial or Decimal("0")
            for submitted_at in months:
                value += monthly_units
                reading = Reading(
                    flat_id=flat.id,
                    tenant_reading=value,
                    status=ReadingStatus.PENDING,
                    created_at=submitted_at,
                    year_month=year_month_of(submitted_at),
                )
                db.add(reading)
                db.commit()
                approve_reading(
                    db,
                    reading.id,
                    value,
                    tariff,
                    reviewer_id=admin.id,
                    now=submitted_at + timedelta(days=1),
                )

            print(f"Created flat {flat_number} with tenant login '{tenant.username}'")

        print("\nSeed data created successfully!")
        print(f"\nAdmin login: admin / {admin_password}")
        print(f"Tenant password: {tenant_password}")
    finally:
        db.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Populate an empty database with sample data")
    parser.add_argument("--admin-password", default="admin123")
    parser.add_argument("--tenant-password", default="tenant123")
    args = parser.parse_args()
    seed_database(args.admin_password, args.tenant_password)


if __name__ == "__main__":
    main()
