"""
Device bans and device-wide warnings.
"""
from backoffice.models import AccountWarning, DeviceBan


def _seen(services, email, username, device_id):
    services.reports.register(email, username, device_id)


def test_warning_propagates_to_every_account_on_the_device(services):
    _seen(services, "a@example.com", "alice", "dev-1")
    _seen(services, "b@example.com", "bob", "dev-1")
    _seen(services, "c@example.com", "carol", "dev-2")

    affected = services.moderation.warn_device("dev-1")

    assert affected == 2
    assert services.moderation.device_status("a@example.com", "alice", "dev-1").is_warned
    assert services.moderation.device_status("b@example.com", "bob", "dev-1").is_warned
    assert not services.moderation.device_status("c@example.com", "carol", "dev-2").is_warned
    assert AccountWarning.query.count() == 2


def test_warning_follows_the_account_to_other_devices(services):
    _seen(services, "a@example.com", "alice", "dev-1")
    _seen(services, "a@example.com", "alice", "dev-2")

    services.moderation.warn_device("dev-1")

    assert services.moderation.device_status("a@example.com", "alice", "dev-2").is_warned


def test_warning_an_unknown_device_changes_nothing(services):
    _seen(services, "a@example.com", "alice", "dev-1")

    assert services.moderation.warn_device("never-seen") == 0
    assert AccountWarning.query.count() == 0


def test_rewarning_is_idempotent(services):
    _seen(services, "a@example.com", "alice", "dev-1")
    assert services.moderation.warn_device("dev-1") == 1
    assert services.moderation.warn_device("dev-1") == 1
    assert AccountWarning.query.count() == 1


def test_clear_and_acknowledge_warning(services):
    _seen(services, "a@example.com", "alice", "dev-1")
    services.moderation.warn_device("dev-1")

    services.moderation.clear_warning("A@Example.com", "alice")
    assert not services.moderation.device_status("a@example.com", "alice", "dev-1").is_warned

    # clearing twice, or clearing an account that was never warned, is fine
    services.moderation.clear_warning("a@example.com", "alice")
    services.moderation.clear_warning("x@example.com", "nobody")

    services.moderation.warn_device("dev-1")
    services.moderation.acknowledge_warning("a@example.com", "alice")
    assert not services.moderation.device_status("a@example.com", "alice", "dev-1").is_warned


def test_ban_applies_to_the_device_not_the_account(services):
    _seen(services, "a@example.com", "alice", "dev-1")
    _seen(services, "a@example.com", "alice", "dev-2")

    services.moderation.set_ban("dev-1", True)

    assert services.moderation.device_status("a@example.com", "alice", "dev-1").is_banned
    assert not services.moderation.device_status("a@example.com", "alice", "dev-2").is_banned

    services.moderation.set_ban("dev-1", False)
    assert not services.moderation.device_status("a@example.com", "alice", "dev-1").is_banned
    assert DeviceBan.query.count() == 1


def test_identifiers_are_trimmed_like_reports(services):
    _seen(services, "a@example.com", " alice ", " dev-1 ")

    assert services.moderation.warn_device(" dev-1") == 1
    assert services.moderation.device_status(" A@Example.com", "alice ", "dev-1 ").is_warned

    services.moderation.set_ban("dev-1 ", True)
    assert services.moderation.device_status("a@example.com", "alice", " dev-1").is_banned
    assert DeviceBan.query.one().device_id == "dev-1"

    services.moderation.clear_warning("a@example.com", " alice")
    assert not services.moderation.device_status("a@example.com", "alice", "dev-1").is_warned
    assert AccountWarning.query.one().username == "alice"


def test_status_defaults_to_false(services):
    status = services.moderation.device_status("new@example.com", "newbie", "dev-x")
    assert status.to_dict() == {"isBanned": False, "isWarned": False}


def test_search_lists_account_device_pairs(services):
    _seen(services, "a@example.com", "alice", "dev-1")
    _seen(services, "b@example.com", "bob", "dev-2")
    services.moderation.warn_device("dev-1")
    services.moderation.set_ban("dev-2", True)

    rows = {row["deviceId"]: row for row in services.moderation.search()}
    assert rows["dev-1"]["isWarned"] is True
    assert rows["dev-1"]["isBanned"] is False
    assert rows["dev-2"]["isWarned"] is False
    assert rows["dev-2"]["isBanned"] is True

    matches = services.moderation.search(q="bob")
    assert [row["username"] for row in matches] == ["bob"]


def test_ban_console_endpoints(client, admin_headers, services):
    _seen(services, "a@example.com", "alice", "dev-1")
    _seen(services, "b@example.com", "bob", "dev-1")

    response = client.post('/api/admin/ban/warn-device', json={"deviceId": "dev-1"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json()["affectedAccounts"] == 2

    response = client.post('/api/admin/ban/set-ban', json={"deviceId": "dev-1", "isBanned": True},
                           headers=admin_headers)
    assert response.get_json() == {"success": True, "deviceId": "dev-1", "isBanned": True}

    response = client.post('/api/admin/ban/clear-warn', json={"email": "b@example.com", "username": "bob"},
                           headers=admin_headers)
    assert response.status_code == 200

    response = client.get('/api/admin/ban/search?limit=200&q=', headers=admin_headers)
    items = response.get_json()["items"]
    assert {(i["username"], i["isWarned"], i["isBanned"]) for i in items} == {
        ("alice", True, True),
        ("bob", False, True),
    }


def test_player_status_and_acknowledge(client, services):
    _seen(services, "a@example.com", "alice", "dev-1")
    services.moderation.warn_device("dev-1")

    query = "email=a@example.com&username=alice&deviceId=dev-1"
    response = client.get(f'/api/ban/status?{query}')
    assert response.status_code == 200
    assert response.get_json() == {"success": True, "isBanned": False, "isWarned": True}

    response = client.post('/api/ban/ack-warning', json={"email": "a@example.com", "username": "alice"})
    assert response.status_code == 200

    assert client.get(f'/api/ban/status?{query}').get_json()["isWarned"] is False


def test_ban_status_requires_device_id(client):
    response = client.get('/api/ban/status?email=a@example.com&username=alice')
    assert response.status_code == 400
    assert response.get_json()["field"] == "deviceId"
