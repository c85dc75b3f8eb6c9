"""
Admin surface: shared-token auth and the order/license console.
"""
import pytest


@pytest.mark.parametrize("headers", [
    {},
    {"Authorization": "Bearer wrong-token"},
    {"X-Admin-Token": "wrong-token"},
])
def test_admin_routes_reject_missing_or_bad_token(client, headers):
    response = client.get('/api/admin/orders', headers=headers)
    assert response.status_code == 401
    assert response.get_json()["success"] is False


@pytest.mark.parametrize("headers", [
    {"Authorization": "Bearer test-admin-token"},
    {"Authorization": "test-admin-token"},
    {"X-Admin-Token": "test-admin-token"},
])
def test_admin_token_formats(client, headers):
    response = client.get('/api/admin/orders', headers=headers)
    assert response.status_code == 200


def test_admin_routes_fail_closed_without_configured_token(app, client):
    app.config["BACKOFFICE_ADMIN_TOKEN"] = None
    response = client.get('/api/admin/orders', headers={"Authorization": "Bearer anything"})
    assert response.status_code == 500
    assert response.get_json()["error"] == "admin_not_configured"


def test_purchase_to_activation_flow(client, admin_headers, mailer):
    response = client.post('/api/orders', json={"email": "Buyer@Example.com", "orderCode": "ER-1", "amount": 1990})
    assert response.status_code == 201
    order = response.get_json()["order"]
    assert order["status"] == "pending"
    assert order["email"] == "buyer@example.com"

    response = client.get('/api/admin/orders?status=pending', headers=admin_headers)
    assert [o["order_code"] for o in response.get_json()["orders"]] == ["ER-1"]

    response = client.post('/api/admin/orders/approve', json={"id": order["id"]}, headers=admin_headers)
    assert response.status_code == 200
    approved = response.get_json()
    assert approved["success"] is True
    assert approved["email"] == "buyer@example.com"
    issued_key = approved["issuedKey"]
    assert len(mailer.sent) == 1

    response = client.get('/api/admin/license-keys?limit=200', headers=admin_headers)
    keys = response.get_json()["keys"]
    assert [(k["key"], k["isActivated"]) for k in keys] == [(issued_key, False)]

    response = client.post('/api/license/activate', json={"key": issued_key})
    assert response.get_json()["valid"] is True

    response = client.get('/api/admin/license-summary', headers=admin_headers)
    summary = response.get_json()
    assert summary["totalKeys"] == 1
    assert summary["activatedKeys"] == 1
    assert summary["waitingOrders"] == 0
    assert summary["revenue"] == 1990


def test_reapprove_returns_conflict_with_existing_key(client, admin_headers, services, mailer):
    order = services.licensing.create_order("buyer@example.com", "ER-2", 100)
    first = client.post('/api/admin/orders/approve', json={"id": order.id}, headers=admin_headers).get_json()

    response = client.post('/api/admin/orders/approve', json={"id": order.id}, headers=admin_headers)
    assert response.status_code == 409
    data = response.get_json()
    assert data["error"] == "not_pending"
    assert data["issuedKey"] == first["issuedKey"]


def test_approve_unknown_order_is_404(client, admin_headers, mailer):
    response = client.post('/api/admin/orders/approve', json={"id": 12345}, headers=admin_headers)
    assert response.status_code == 404
    assert response.get_json()["error"] == "order_not_found"


def test_approve_with_mail_failure_is_502(client, admin_headers, services, failing_mailer):
    order = services.licensing.create_order("buyer@example.com", "ER-3", 100)

    response = client.post('/api/admin/orders/approve', json={"id": order.id}, headers=admin_headers)

    assert response.status_code == 502
    assert response.get_json()["error"] == "mail_failed"
    pending = client.get('/api/admin/orders?status=pending', headers=admin_headers).get_json()["orders"]
    assert [o["id"] for o in pending] == [order.id]


def test_cancel_order_endpoint(client, admin_headers, services):
    order = services.licensing.create_order("buyer@example.com", "ER-4", 100)

    response = client.post('/api/admin/orders/cancel', json={"id": order.id}, headers=admin_headers)
    assert response.status_code == 200

    response = client.post('/api/admin/orders/cancel', json={"id": order.id}, headers=admin_headers)
    assert response.status_code == 404
    assert response.get_json()["error"] == "order_not_found_or_not_pending"


def test_duplicate_order_code_is_409(client):
    payload = {"email": "buyer@example.com", "orderCode": "ER-5", "amount": 100}
    assert client.post('/api/orders', json=payload).status_code == 201

    response = client.post('/api/orders', json=payload)
    assert response.status_code == 409
    assert response.get_json()["error"] == "order_code_exists"


def test_order_validation_names_the_field(client):
    response = client.post('/api/orders', json={"email": "buyer@example.com", "amount": 100})
    assert response.status_code == 400
    data = response.get_json()
    assert data["error"] == "validation_error"
    assert data["field"] == "orderCode"


def test_non_json_body_is_rejected(client):
    response = client.post('/api/orders', data="nope", content_type="text/plain")
    assert response.status_code == 400
    assert response.get_json()["error"] == "validation_error"


def test_key_exhaustion_surfaces_as_server_error(client, admin_headers, services, mailer):
    first = services.licensing.create_order("a@example.com", "ER-6", 100)
    second = services.licensing.create_order("b@example.com", "ER-7", 100)
    services.licensing.key_generator = lambda: "AAAAAAAAAA"
    services.licensing.max_key_attempts = 2
    client.post('/api/admin/orders/approve', json={"id": first.id}, headers=admin_headers)

    response = client.post('/api/admin/orders/approve', json={"id": second.id}, headers=admin_headers)

    assert response.status_code == 500
    data = response.get_json()
    assert data["error"] == "server_error"
    assert data["code"] == "failed_to_generate_unique_key"
