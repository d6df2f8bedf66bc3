"""Integration tests for the reading endpoints."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from app.models.enums import ReadingStatus

JPEG = b"\xff\xd8\xff\xe0fake-jpeg-body"


def upload(client, headers, **data):
    return client.post(
        "/api/readings/",
        files={"image": ("meter.jpg", JPEG, "image/jpeg")},
        data=data,
        headers=headers,
    )


@pytest.fixture
def tariff(client, admin_headers):
    response = client.patch(
        "/api/settings/tariff",
        json={"tariff_per_unit": "7.5", "minimum_price": "250", "unit_factor": "2.3"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    return response.json()


class TestSubmitReading:
    """Tests for POST /api/readings/."""

    def test_tenant_upload(self, client, tenant_headers, flat):
        response = upload(client, tenant_headers, tenant_reading="150.5")
        assert response.status_code == 201
        data = response.json()
        assert data["flat_id"] == flat.id
        assert data["status"] == "pending"
        assert data["has_image"] is True
        assert Decimal(data["tenant_reading"]) == Decimal("150.5")
        assert data["year_month"] == datetime.now(UTC).strftime("%Y-%m")

    def test_second_upload_this_month_conflicts(self, client, tenant_headers):
        assert upload(client, tenant_headers).status_code == 201
        response = upload(client, tenant_headers)
        assert response.status_code == 409
        assert response.json()["detail"].startswith("Upload limit reached.")

    def test_upload_after_rejection(self, client, tenant_headers, admin_headers):
        reading_id = upload(client, tenant_headers).json()["id"]
        client.post(
            f"/api/readings/{reading_id}/reject",
            json={"reason": "Blurry"},
            headers=admin_headers,
        )
        assert upload(client, tenant_headers).status_code == 201

    def test_tenant_cannot_upload_for_other_flat(self, client, tenant_headers, other_flat):
        response = upload(client, tenant_headers, flat_id=str(other_flat.id))
        assert response.status_code == 403

    def test_admin_must_name_flat(self, client, admin_headers):
        assert upload(client, admin_headers).status_code == 400

    def test_admin_uploads_for_flat(self, client, admin_headers, other_flat):
        response = upload(client, admin_headers, flat_id=str(other_flat.id))
        assert response.status_code == 201
        assert response.json()["flat_id"] == other_flat.id

    def test_upload_requires_login(self, client):
        assert upload(client, {}).status_code == 401

    def test_upload_rejects_non_image(self, client, tenant_headers):
        response = client.post(
            "/api/readings/",
            files={"image": ("bill.txt", b"hello", "text/plain")},
            headers=tenant_headers,
        )
        assert response.status_code == 400


class TestReviewWorkflow:
    """Approve, reject and reopen through the API."""

    def test_approve_computes_bill(self, client, tenant_headers, admin_headers, tariff):
        reading_id = upload(client, tenant_headers).json()["id"]

        response = client.post(
            f"/api/readings/{reading_id}/approve",
            json={"corrected_reading": "50"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "approved"
        assert Decimal(data["previous_reading"]) == Decimal("0")
        # 50 * 2.3 * 7.5 + 250
        assert Decimal(data["amount"]) == Decimal("1112.50")
        assert data["settings_version_at_approval"] == tariff["version"]

    def test_approve_without_saved_settings_uses_defaults(
        self, client, tenant_headers, admin_headers
    ):
        reading_id = upload(client, tenant_headers).json()["id"]
        data = client.post(
            f"/api/readings/{reading_id}/approve",
            json={"corrected_reading": "50"},
            headers=admin_headers,
        ).json()
        # Default tariff is 0, so only the minimum price is billed
        assert Decimal(data["amount"]) == Decimal("250.00")
        assert data["settings_version_at_approval"] == 0

    def test_tenant_cannot_approve(self, client, tenant_headers):
        reading_id = upload(client, tenant_headers).json()["id"]
        response = client.post(
            f"/api/readings/{reading_id}/approve",
            json={"corrected_reading": "50"},
            headers=tenant_headers,
        )
        assert response.status_code == 403

    def test_negative_corrected_reading(self, client, tenant_headers, admin_headers):
        reading_id = upload(client, tenant_headers).json()["id"]
        response = client.post(
            f"/api/readings/{reading_id}/approve",
            json={"corrected_reading": "-1"},
            headers=admin_headers,
        )
        assert response.status_code == 422

    def test_reject_then_approve_conflicts(self, client, tenant_headers, admin_headers):
        reading_id = upload(client, tenant_headers).json()["id"]
        response = client.post(
            f"/api/readings/{reading_id}/reject",
            json={"reason": "Meter not visible"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["rejection_reason"] == "Meter not visible"

        response = client.post(
            f"/api/readings/{reading_id}/approve",
            json={"corrected_reading": "10"},
            headers=admin_headers,
        )
        assert response.status_code == 409

    def test_reopen_returns_to_queue(self, client, tenant_headers, admin_headers, tariff):
        reading_id = upload(client, tenant_headers).json()["id"]
        client.post(
            f"/api/readings/{reading_id}/approve",
            json={"corrected_reading": "50"},
            headers=admin_headers,
        )

        response = client.post(
            f"/api/readings/{reading_id}/reopen",
            json={"reason": "Typo"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "pending"
        assert data["amount"] is None
        assert data["reopen_reason"] == "Typo"

        pending = client.get("/api/readings/?status=pending", headers=admin_headers).json()
        assert [r["id"] for r in pending["readings"]] == [reading_id]


class TestReadingAccess:
    """Tenants only see their own flat's readings."""

    def test_tenant_lists_own_readings(
        self, client, tenant_headers, flat, other_flat, make_reading
    ):
        make_reading(other_flat, datetime(2024, 3, 3, tzinfo=UTC))
        mine = make_reading(flat, datetime(2024, 3, 4, tzinfo=UTC))

        data = client.get("/api/readings/", headers=tenant_headers).json()
        assert data["total"] == 1
        assert data["readings"][0]["id"] == mine.id

    def test_tenant_cannot_filter_other_flat(self, client, tenant_headers, other_flat):
        response = client.get(
            f"/api/readings/?flat_id={other_flat.id}", headers=tenant_headers
        )
        assert response.status_code == 403

    def test_tenant_cannot_read_other_flat(self, client, tenant_headers, other_flat, make_reading):
        reading = make_reading(other_flat, datetime(2024, 3, 3, tzinfo=UTC))
        response = client.get(f"/api/readings/{reading.id}", headers=tenant_headers)
        assert response.status_code == 403

    def test_admin_lists_all(self, client, admin_headers, flat, other_flat, make_reading):
        make_reading(flat, datetime(2024, 3, 3, tzinfo=UTC))
        make_reading(other_flat, datetime(2024, 3, 4, tzinfo=UTC))
        assert client.get("/api/readings/", headers=admin_headers).json()["total"] == 2

    def test_missing_reading(self, client, admin_headers):
        assert client.get("/api/readings/999", headers=admin_headers).status_code == 404


class TestBillAndReceipt:
    def _approved(self, make_reading, flat):
        return make_reading(
            flat,
            datetime(2024, 3, 3, tzinfo=UTC),
            status=ReadingStatus.APPROVED,
            corrected_reading=Decimal("150"),
            previous_reading=Decimal("100"),
            units_used=Decimal("50"),
            amount=Decimal("1112.50"),
            approved_at=datetime(2024, 3, 4, tzinfo=UTC),
            tariff_at_approval=Decimal("7.5"),
            unit_factor_at_approval=Decimal("2.3"),
            minimum_price_at_approval=Decimal("250"),
            settings_version_at_approval=1,
        )

    def test_bill_breakdown(self, client, tenant_headers, flat, make_reading):
        reading = self._approved(make_reading, flat)
        response = client.get(f"/api/readings/{reading.id}/bill", headers=tenant_headers)
        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["total_quantity"]) == Decimal("115")
        assert Decimal(data["energy_amount"]) == Decimal("862.50")
        assert Decimal(data["amount"]) == Decimal("1112.50")

    def test_receipt_pdf(self, client, tenant_headers, flat, make_reading):
        reading = self._approved(make_reading, flat)
        response = client.get(f"/api/readings/{reading.id}/receipt.pdf", headers=tenant_headers)
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert "receipt-A-101-2024-03.pdf" in response.headers["content-disposition"]
        assert response.content.startswith(b"%PDF")

    def test_no_receipt_for_pending(self, client, tenant_headers, flat, make_reading):
        reading = make_reading(flat, datetime(2024, 3, 3, tzinfo=UTC))
        response = client.get(f"/api/readings/{reading.id}/receipt.pdf", headers=tenant_headers)
        assert response.status_code == 409

    def test_image_download(self, client, tenant_headers):
        reading_id = upload(client, tenant_headers).json()["id"]
        response = client.get(f"/api/readings/{reading_id}/image", headers=tenant_headers)
        assert response.status_code == 200
        assert response.content == JPEG

    def test_image_missing(self, client, tenant_headers, flat, make_reading):
        reading = make_reading(flat, datetime(2024, 3, 3, tzinfo=UTC))
        response = client.get(f"/api/readings/{reading.id}/image", headers=tenant_headers)
        assert response.status_code == 404
