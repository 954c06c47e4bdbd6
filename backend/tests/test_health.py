import pytest
from sqlalchemy.exc import OperationalError

from app.db import bootstrap
from app.services.booking_registry import BookingRegistry


def test_health_endpoints(client):
    assert client.get("/api/health").json() == {"status": "ok"}

    live = client.get("/api/health/live")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"

    ready = client.get("/api/health/ready")
    assert ready.status_code == 200
    payload = ready.json()
    assert payload["database"]["ok"] is True
    assert payload["database"]["schema_ok"] is True
    assert payload["database"]["missing_indexes"] == []


def test_error_payload_shape(client):
    response = client.get("/api/time-slots/12345")
    assert response.status_code == 404
    assert response.json() == {
        "message": "Time slot with id 12345 not found",
        "code": "not_found",
        "details": {"resource_type": "Time slot", "resource_id": "12345"},
    }


def test_oversized_payload_is_rejected(client):
    response = client.post(
        "/api/time-slots/",
        content=b"x" * 2_000_000,
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 413
    assert response.json()["code"] == "payload_too_large"


def test_runtime_schema_bootstrap_raises_on_validation_failure(monkeypatch):
    def fail(engine):
        raise RuntimeError("missing required schema")

    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: None)
    monkeypatch.setattr(bootstrap, "_assert_required_schema", fail)

    with pytest.raises(RuntimeError, match="Runtime schema compatibility bootstrap failed"):
        bootstrap.ensure_runtime_schema_compatibility()


def test_runtime_schema_bootstrap_accepts_fresh_database(engine):
    bootstrap.ensure_runtime_schema_compatibility(engine)


def test_store_failure_maps_to_service_unavailable(client, monkeypatch):
    def broken(self, **filters):
        raise OperationalError("SELECT 1", {}, Exception("connection lost"))

    monkeypatch.setattr(BookingRegistry, "list_bookings", broken)

    response = client.get("/api/bookings/")
    assert response.status_code == 503
    assert response.json()["code"] == "store_unavailable"
