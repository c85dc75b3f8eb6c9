"""
One-time license key activation.
"""
import pytest

from backoffice.database import db
from backoffice.errors import RequestValidationError
from backoffice.models import LicenseKey, LicenseKeyStatus
from backoffice.services.registry import get_services


@pytest.fixture
def issued_key(services, mailer):
    order = services.licensing.create_order("buyer@example.com", "ER-9001", 100)
    return services.licensing.approve_order(order.id).issued_key


def test_unknown_key_is_not_found(services):
    result = services.licensing.activate_key("ZZZZZZZZZZ")
    assert result.valid is False
    assert result.reason == "not_found"
    assert result.to_dict() == {"valid": False, "key": "ZZZZZZZZZZ", "reason": "not_found"}


def test_key_activates_exactly_once(services, issued_key):
    first = services.licensing.activate_key(issued_key, device_hash="hash-1")
    second = services.licensing.activate_key(issued_key, device_hash="hash-2")

    assert first.valid is True
    assert first.reason is None
    assert first.email == "buyer@example.com"
    assert second.valid is False
    assert second.reason == "already_activated"

    db.session.expire_all()
    row = LicenseKey.query.filter_by(license_key=issued_key).one()
    assert row.status == LicenseKeyStatus.ACTIVATED
    assert row.is_activated
    assert row.activated_at is not None
    assert row.device_hash == "hash-1"


def test_repeated_attempts_yield_a_single_success(services, issued_key):
    results = [services.licensing.activate_key(issued_key) for _ in range(5)]
    assert sum(1 for r in results if r.valid) == 1
    assert all(r.reason == "already_activated" for r in results[1:])


def test_simultaneous_activations_yield_a_single_success(services, issued_key, run_concurrently):
    results, errors = run_concurrently(lambda: get_services().licensing.activate_key(issued_key))

    assert errors == []
    assert len(results) == 8
    assert sum(1 for r in results if r.valid) == 1
    assert sorted(r.reason for r in results if not r.valid) == ["already_activated"] * 7

    db.session.expire_all()
    row = LicenseKey.query.filter_by(license_key=issued_key).one()
    assert row.status == LicenseKeyStatus.ACTIVATED


def test_key_is_normalized_before_lookup(services, issued_key):
    result = services.licensing.activate_key(f"  {issued_key.lower()}  ")
    assert result.valid is True
    assert result.key == issued_key


def test_blank_key_is_rejected(services):
    with pytest.raises(RequestValidationError) as exc_info:
        services.licensing.activate_key("   ")
    assert exc_info.value.field == "key"


def test_activate_endpoint(client, issued_key):
    response = client.post('/api/license/activate', json={"key": issued_key.lower(), "deviceHash": "abc"})
    assert response.status_code == 200
    data = response.get_json()
    assert data["success"] is True
    assert data["valid"] is True
    assert data["key"] == issued_key
    assert "activatedAt" in data

    response = client.post('/api/license/activate', json={"key": issued_key})
    assert response.status_code == 200
    assert response.get_json()["valid"] is False
    assert response.get_json()["reason"] == "already_activated"


def test_activate_endpoint_unknown_key(client):
    response = client.post('/api/license/activate', json={"key": "nope"})
    assert response.status_code == 200
    data = response.get_json()
    assert data["valid"] is False
    assert data["reason"] == "not_found"


def test_activate_endpoint_requires_key(client):
    response = client.post('/api/license/activate', json={})
    assert response.status_code == 400
    data = response.get_json()
    assert data["success"] is False
    assert data["error"] == "validation_error"
    assert data["field"] == "key"


def test_activation_is_rate_limited(tmp_path):
    from backoffice.factory import create_app

    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'limits.db'}",
        "SQLALCHEMY_ENGINE_OPTIONS": {},
        "RATELIMIT_ENABLED": True,
        "RATELIMIT_STORAGE_URI": "memory://",
        "ACTIVATION_RATE_LIMIT": "2 per minute",
    })
    client = app.test_client()

    statuses = [client.post('/api/license/activate', json={"key": "ZZZZZZZZZZ"}).status_code for _ in range(3)]

    assert statuses == [200, 200, 429]
    assert client.post('/api/license/activate', json={"key": "ZZZZZZZZZZ"}).get_json()["error"] == "rate_limited"
