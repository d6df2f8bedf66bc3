"""End-to-end month of billing over the ASGI interface."""

from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.database import get_db
from app.main import app
from tests.conftest import ADMIN_PASSWORD, TENANT_PASSWORD


@pytest.fixture
def override_db(test_db):
    def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    yield test_db
    app.dependency_overrides.clear()


async def _login(ac: AsyncClient, username: str, password: str) -> dict[str, str]:
    response = await ac.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.mark.asyncio
async def test_health_endpoint() -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_monthly_billing_cycle(override_db, admin_user, tenant_user) -> None:
    """Tenant uploads, admin approves, both download the results."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        admin = await _login(ac, "admin", ADMIN_PASSWORD)
        tenant = await _login(ac, "tenant", TENANT_PASSWORD)

        response = await ac.patch(
            "/api/settings/tariff",
            json={"tariff_per_unit": "7.5", "minimum_price": "250", "unit_factor": "2.3"},
            headers=admin,
        )
        assert response.status_code == 200

        response = await ac.post(
            "/api/readings/",
            files={"image": ("meter.png", b"\x89PNG\r\n\x1a\nbody", "image/png")},
            data={"tenant_reading": "50"},
            headers=tenant,
        )
        assert response.status_code == 201
        reading = response.json()

        queue = (await ac.get("/api/readings/?status=pending", headers=admin)).json()
        assert [r["id"] for r in queue["readings"]] == [reading["id"]]

        response = await ac.post(
            f"/api/readings/{reading['id']}/approve",
            json={"corrected_reading": "50"},
            headers=admin,
        )
        assert response.status_code == 200
        assert Decimal(response.json()["amount"]) == Decimal("1112.50")

        receipt = await ac.get(f"/api/readings/{reading['id']}/receipt.pdf", headers=tenant)
        assert receipt.status_code == 200
        assert receipt.content.startswith(b"%PDF")

        month = reading["year_month"]
        summary = (await ac.get(f"/api/reports/summary/{month}", headers=admin)).json()
        assert len(summary["rows"]) == 1
        assert Decimal(summary["total_amount"]) == Decimal("1112.50")
