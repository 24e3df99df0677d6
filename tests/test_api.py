"""HTTP tests for the v1 API"""
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from aetherchat.config.database import get_db
from aetherchat.config.settings import get_settings
from aetherchat.main import create_app
from aetherchat.models import AppointmentReminder
from aetherchat.services.ai.ai_service import AIService
from aetherchat.services.registry import ServiceRegistry
from tests.conftest import TUESDAY, WEDNESDAY


@pytest.fixture
def openai_client():
    return MagicMock()


@pytest.fixture
def client(db, notifier, openai_client):
    settings = get_settings()
    registry = ServiceRegistry(
        settings=settings,
        notifier=notifier,
        _ai_service=AIService(client=openai_client, settings=settings),
    )
    app = create_app(registry=registry)
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as test_client:
        yield test_client


def booking_payload(customer, product, **kwargs):
    payload = {
        "customer_id": str(customer.id),
        "product_id": str(product.id),
        "date": TUESDAY,
        "time": "10:00",
    }
    payload.update(kwargs)
    return payload


@pytest.mark.api
class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        assert client.get("/").json()["status"] == "running"


@pytest.mark.api
class TestAvailabilityRoutes:

    def test_slots(self, client, app_settings, product):
        response = client.get("/api/v1/availability/slots", params={"date": TUESDAY, "product_id": str(product.id)})

        assert response.status_code == 200
        body = response.json()
        assert body["slots"] == ["09:00", "10:00", "11:00"]
        assert body["is_off"] is False
        assert body["service_duration_minutes"] == 60

    def test_slots_on_weekend(self, client, app_settings):
        body = client.get("/api/v1/availability/slots", params={"date": "2030-06-08"}).json()
        assert body["is_off"] is True
        assert body["slots"] == []

    def test_invalid_date(self, client, app_settings):
        response = client.get("/api/v1/availability/slots", params={"date": "2030-13-01"})
        assert response.status_code == 400

    def test_check(self, client, app_settings, product):
        response = client.get(
            "/api/v1/availability/check",
            params={"date": TUESDAY, "time": "12:00", "product_id": str(product.id)},
        )
        body = response.json()
        assert body["is_available"] is False
        assert body["suggested_slots"]

    def test_invalid_time(self, client, app_settings):
        response = client.get("/api/v1/availability/check", params={"date": TUESDAY, "time": "9:00"})
        assert response.status_code == 400


@pytest.mark.api
class TestAppointmentRoutes:

    def test_book_and_get(self, client, app_settings, customer, product, notifier):
        response = client.post("/api/v1/appointments", json=booking_payload(customer, product))

        assert response.status_code == 201
        [appointment] = response.json()
        assert appointment["status"] == "booked"
        assert notifier.kinds() == ["appointment:created"]

        fetched = client.get(f"/api/v1/appointments/{appointment['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["time"] == "10:00"

    def test_conflict_returns_suggestions(self, client, app_settings, customer, other_customer, product):
        client.post("/api/v1/appointments", json=booking_payload(customer, product))

        response = client.post("/api/v1/appointments", json=booking_payload(other_customer, product))

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["reason"]
        assert detail["suggested_slots"][0] == {"date": TUESDAY, "time": "11:00", "branch": None}

    def test_recurrence_count_limit(self, client, app_settings, customer, product):
        response = client.post(
            "/api/v1/appointments",
            json=booking_payload(customer, product, recurrence_type="weekly", recurrence_count=0),
        )
        assert response.status_code == 422

    def test_unknown_branch_not_found(self, client, app_settings, customer, product):
        response = client.post(
            "/api/v1/appointments",
            json=booking_payload(customer, product, branch_id=str(uuid4())),
        )
        assert response.status_code == 404

    def test_missing_appointment(self, client):
        assert client.get(f"/api/v1/appointments/{uuid4()}").status_code == 404

    def test_cancel_reschedule_complete(self, client, app_settings, customer, product, make_customer_product):
        package = make_customer_product(customer, product, total=2)
        [appointment] = client.post(
            "/api/v1/appointments",
            json=booking_payload(customer, product, customer_product_id=str(package.id)),
        ).json()
        appointment_id = appointment["id"]

        moved = client.post(f"/api/v1/appointments/{appointment_id}/reschedule",
                            json={"date": WEDNESDAY, "time": "09:00"})
        assert moved.status_code == 200
        assert moved.json()["status"] == "rescheduled"

        completed = client.post(f"/api/v1/appointments/{appointment_id}/complete")
        assert completed.json()["status"] == "completed"
        assert completed.json()["is_session_used"] is True

        again = client.post(f"/api/v1/appointments/{appointment_id}/use-session")
        assert again.status_code == 200

        packages = client.get("/api/v1/customer-products", params={"customer_id": str(customer.id)}).json()
        assert packages[0]["remaining_sessions"] == 1

    def test_cancel(self, client, app_settings, customer, product):
        [appointment] = client.post("/api/v1/appointments", json=booking_payload(customer, product)).json()

        response = client.post(f"/api/v1/appointments/{appointment['id']}/cancel", json={"reason": "Bận"})

        assert response.json()["status"] == "cancelled"
        listed = client.get("/api/v1/appointments", params={"date": TUESDAY, "status": "cancelled"}).json()
        assert [a["id"] for a in listed] == [appointment["id"]]

    def test_exhausted_package_conflict(self, client, app_settings, customer, product, make_customer_product):
        package = make_customer_product(customer, product, total=1, used=1)
        [appointment] = client.post(
            "/api/v1/appointments",
            json=booking_payload(customer, product, customer_product_id=str(package.id)),
        ).json()

        response = client.post(f"/api/v1/appointments/{appointment['id']}/use-session")
        assert response.status_code == 409


@pytest.mark.api
class TestCustomerProductRoutes:

    def test_assign_update_delete(self, client, customer, make_product):
        product = make_product(default_sessions=10, expiry_days=30)

        created = client.post("/api/v1/customer-products", json={
            "customer_id": str(customer.id), "product_id": str(product.id),
        })
        assert created.status_code == 201
        package_id = created.json()["id"]
        assert created.json()["remaining_sessions"] == 10

        updated = client.patch(f"/api/v1/customer-products/{package_id}", json={"used_sessions": 4})
        assert updated.json()["remaining_sessions"] == 6

        assert client.delete(f"/api/v1/customer-products/{package_id}").status_code == 204
        assert client.get("/api/v1/customer-products").json() == []

    def test_usage(self, client, customer, product, make_customer_product):
        make_customer_product(customer, product, total=3, expiry_date=datetime(2099, 1, 1, tzinfo=timezone.utc))
        body = client.get("/api/v1/customer-service-usage", params={"customer_id": str(customer.id)}).json()
        assert body["products"][0]["remaining_sessions"] == 3
        assert body["last_appointment_date"] is None

    def test_usage_unknown_customer(self, client):
        response = client.get("/api/v1/customer-service-usage", params={"customer_id": str(uuid4())})
        assert response.status_code == 404


@pytest.mark.api
class TestSettingsRoutes:

    def test_get_creates_defaults(self, client):
        body = client.get("/api/v1/settings").json()
        assert body["appointment_reminder_enabled"] is True
        assert body["appointment_reminder_time"] == "09:00"

    def test_update_scheduling(self, client):
        response = client.patch("/api/v1/settings", json={
            "working_hours": ["08:00", "09:00"],
            "weekly_off_days": [0],
            "specific_day_rules": [{"date": TUESDAY, "is_off": True}],
            "break_times": [{"start_time": "12:00", "end_time": "13:00"}],
        })
        assert response.status_code == 200

        saturday = client.get("/api/v1/availability/slots", params={"date": "2030-06-08"}).json()
        assert saturday["slots"] == ["08:00", "09:00"]
        tuesday = client.get("/api/v1/availability/slots", params={"date": TUESDAY}).json()
        assert tuesday["is_off"] is True

    def test_invalid_working_hours(self, client):
        response = client.patch("/api/v1/settings", json={"working_hours": ["8:00"]})
        assert response.status_code == 400

    def test_invalid_weekday(self, client):
        response = client.patch("/api/v1/settings", json={"weekly_off_days": [7]})
        assert response.status_code == 400

    def test_unknown_field(self, client):
        assert client.patch("/api/v1/settings", json={"colour": "red"}).status_code == 422


@pytest.mark.api
class TestAIRoutes:

    def test_answer(self, client, openai_client):
        response = MagicMock()
        response.choices = [MagicMock()]
        response.choices[0].message.content = "Dạ, spa mở cửa lúc 9 giờ."
        openai_client.chat.completions.create.return_value = response

        body = client.post("/api/v1/ai/answer", json={"question": "Mấy giờ mở cửa?"}).json()

        assert body == {"answer": "Dạ, spa mở cửa lúc 9 giờ."}

    def test_empty_question_rejected(self, client):
        assert client.post("/api/v1/ai/answer", json={"question": ""}).status_code == 422


@pytest.mark.api
class TestMiddleware:

    def test_correlation_id_echoed(self, client):
        response = client.get("/health", headers={"X-Correlation-ID": "abc123"})
        assert response.headers["X-Correlation-ID"] == "abc123"

    def test_correlation_id_generated(self, client):
        assert client.get("/health").headers["X-Correlation-ID"]

    def test_detailed_health_reports_reminder_backlog(self, client, db, customer):
        db.add(AppointmentReminder(
            reminder_type="appointment", customer_id=customer.id,
            scheduled_for=datetime(2020, 1, 1, tzinfo=timezone.utc), status="pending",
        ))
        db.commit()

        with patch("aetherchat.core.monitoring._check_redis", AsyncMock(return_value="healthy")):
            body = client.get("/health/detailed").json()

        assert body["database"] == "healthy"
        assert body["redis"] == "healthy"
        assert body["reminders"].startswith("degraded")
        assert body["overall"] == "degraded"
