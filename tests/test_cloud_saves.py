"""
Cloud saves, client log upload and the admin save browser.
"""
from backoffice.models import AccountDevice, AccountReport, CloudSave, DeviceBan


def test_sync_then_fetch(client):
    response = client.post('/api/cloud-save/sync', json={
        "email": " Player@Example.com ", "username": "hero", "saveJson": '{"level": 3}',
    })
    assert response.status_code == 200
    data = response.get_json()
    assert data["success"] is True
    assert data["email"] == "player@example.com"
    assert data["id"] is not None

    response = client.get('/api/cloud-save/fetch?email=PLAYER@example.com&username=hero')
    assert response.status_code == 200
    data = response.get_json()
    assert data["saveJson"] == '{"level": 3}'
    assert data["updatedAt"] is not None


def test_sync_overwrites_previous_save(client):
    payload = {"email": "p@example.com", "username": "hero", "saveJson": '{"level": 1}'}
    first_id = client.post('/api/cloud-save/sync', json=payload).get_json()["id"]
    second_id = client.post('/api/cloud-save/sync', json={**payload, "saveJson": '{"level": 2}'}).get_json()["id"]

    assert first_id == second_id
    assert CloudSave.query.count() == 1
    fetched = client.get('/api/cloud-save/fetch?email=p@example.com&username=hero').get_json()
    assert fetched["saveJson"] == '{"level": 2}'


def test_sync_accepts_object_payload(client):
    client.post('/api/cloud-save/sync', json={"email": "p@example.com", "username": "hero", "saveJson": {"gold": 5}})
    fetched = client.get('/api/cloud-save/fetch?email=p@example.com&username=hero').get_json()
    assert fetched["saveJson"] == '{"gold": 5}'


def test_fetch_missing_save(client):
    response = client.get('/api/cloud-save/fetch?email=p@example.com&username=ghost')
    assert response.status_code == 404
    assert response.get_json()["error"] == "save_not_found"


def test_sync_requires_save(client):
    response = client.post('/api/cloud-save/sync', json={"email": "p@example.com", "username": "hero"})
    assert response.status_code == 400
    assert response.get_json()["field"] == "saveJson"


def test_list_by_email(client, services):
    services.cloud_saves.sync("p@example.com", "hero", "{}")
    services.cloud_saves.sync("p@example.com", "alt", "{}")
    services.cloud_saves.sync("q@example.com", "other", "{}")

    data = client.get('/api/cloud-save/list-by-email?email=p@example.com').get_json()
    assert data["email"] == "p@example.com"
    assert sorted(e["username"] for e in data["entries"]) == ["alt", "hero"]


def test_admin_email_listing_and_saves(client, admin_headers, services):
    services.cloud_saves.sync("p@example.com", "hero", "{}")
    services.cloud_saves.sync("p@example.com", "alt", "{}")
    services.cloud_saves.sync("q@example.com", "other", "{}")

    emails = client.get('/api/admin/emails', headers=admin_headers).get_json()["emails"]
    counts = {e["email"]: e["saveCount"] for e in emails}
    assert counts == {"p@example.com": 2, "q@example.com": 1}

    saves = client.get('/api/admin/saves?email=p@example.com', headers=admin_headers).get_json()["saves"]
    assert len(saves) == 2

    response = client.delete('/api/admin/save?email=p@example.com&username=alt', headers=admin_headers)
    assert response.status_code == 200
    response = client.delete('/api/admin/save?email=p@example.com&username=alt', headers=admin_headers)
    assert response.status_code == 404


def test_wipe_email_removes_account_data_but_keeps_bans(client, admin_headers, services):
    services.cloud_saves.sync("p@example.com", "hero", "{}")
    services.reports.record_achievement("p@example.com", "hero", "dev-1", "first_blood")
    services.moderation.warn_device("dev-1")
    services.moderation.set_ban("dev-1", True)
    services.cloud_saves.sync("q@example.com", "other", "{}")

    response = client.delete('/api/admin/email/P@example.com', headers=admin_headers)

    assert response.status_code == 200
    data = response.get_json()
    assert data["email"] == "p@example.com"
    assert data["deletedCount"] == 1
    assert data["deleted"] == {"saves": 1, "reports": 1, "achievements": 1, "devices": 1, "warnings": 1}
    assert CloudSave.query.count() == 1
    assert AccountReport.query.count() == 0
    assert AccountDevice.query.count() == 0
    assert DeviceBan.query.count() == 1


def test_cloud_log_upload_and_listing(client, admin_headers):
    for line in ("boot", "crash"):
        response = client.post('/api/cloud-log', json={
            "email": "p@example.com", "username": "hero", "deviceId": "dev-1", "content": line,
        })
        assert response.status_code == 201

    logs = client.get('/api/admin/logs?email=p@example.com', headers=admin_headers).get_json()["logs"]
    assert [entry["content"] for entry in logs] == ["crash", "boot"]

    logs = client.get('/api/admin/logs?deviceId=dev-2', headers=admin_headers).get_json()["logs"]
    assert logs == []


def test_admin_save_routes_need_token(client):
    assert client.get('/api/admin/emails').status_code == 401
    assert client.delete('/api/admin/email/p@example.com').status_code == 401
