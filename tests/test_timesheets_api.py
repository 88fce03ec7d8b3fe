from datetime import timedelta

import pytest

from worklog.core.config import RateRule, settings
from worklog.core.dates import utcnow
from worklog.models import Timesheet

URL = "/api/v1/timesheets/"


@pytest.fixture
def payload(project, activity):
    return {
        "project_id": project.id,
        "activity_id": activity.id,
        "begin": "2024-01-01T09:00:00+00:00",
        "end": "2024-01-01T10:30:00+00:00",
        "description": "Landing page",
        "tags": ["frontend"],
    }


@pytest.fixture
def stopped_entry(client, user_headers, payload):
    response = client.post(URL, headers=user_headers, json=payload)
    assert response.status_code == 200
    return response.json()


@pytest.fixture
def running_entry(client, user_headers, payload):
    payload = dict(payload, begin=(utcnow() - timedelta(minutes=15)).isoformat())
    del payload["end"]
    response = client.post(URL, headers=user_headers, json=payload)
    assert response.status_code == 200
    return response.json()


class TestCreateTimesheet:
    def test_create_stopped_entry(self, client, test_user, stopped_entry):
        assert stopped_entry["user_id"] == test_user.id
        assert stopped_entry["duration"] == 5400
        assert stopped_entry["rate"] == 120.0
        assert stopped_entry["tags"] == ["frontend"]
        assert stopped_entry["timezone"] == "UTC"

    def test_naive_begin_uses_default_timezone(self, client, user_headers, payload, db):
        response = client.post(URL, headers=user_headers, json=dict(payload, begin="2024-07-01T09:00:00", end=None))
        assert response.status_code == 200

        entry = db.query(Timesheet).filter(Timesheet.id == response.json()["id"]).one()
        assert entry.timezone == "UTC"

    def test_create_running_entry(self, client, running_entry):
        assert running_entry["end"] is None
        assert running_entry["duration"] >= 15 * 60
        assert running_entry["rate"] >= 20.0

    def test_end_before_begin_is_rejected(self, client, user_headers, payload):
        payload["end"] = "2024-01-01T08:00:00+00:00"

        response = client.post(URL, headers=user_headers, json=payload)

        assert response.status_code == 422

    def test_negative_rate_is_rejected(self, client, user_headers, payload):
        payload["rate"] = -1

        response = client.post(URL, headers=user_headers, json=payload)

        assert response.status_code == 422

    def test_activity_must_fit_project(self, client, user_headers, payload):
        payload["project_id"] = 999

        response = client.post(URL, headers=user_headers, json=payload)

        assert response.status_code == 400

    def test_user_cannot_record_for_others(self, client, user_headers, other_user, payload):
        payload["user_id"] = other_user.id

        response = client.post(URL, headers=user_headers, json=payload)

        assert response.status_code == 403

    def test_manager_can_record_for_others(self, client, manager_headers, test_user, payload):
        payload["user_id"] = test_user.id

        response = client.post(URL, headers=manager_headers, json=payload)

        assert response.status_code == 200
        assert response.json()["user_id"] == test_user.id

    def test_requires_authentication(self, client, payload):
        response = client.post(URL, headers={"Authorization": "Bearer nope"}, json=payload)

        assert response.status_code == 401


class TestReadTimesheets:
    def test_user_sees_only_own_entries(self, client, user_headers, manager_headers, test_manager, payload):
        client.post(URL, headers=user_headers, json=payload)
        client.post(URL, headers=manager_headers, json=payload)

        response = client.get(URL, headers=user_headers)

        assert response.status_code == 200
        assert len(response.json()) == 1

    def test_manager_sees_all_entries(self, client, user_headers, manager_headers, payload):
        client.post(URL, headers=user_headers, json=payload)
        client.post(URL, headers=manager_headers, json=payload)

        response = client.get(URL, headers=manager_headers)

        assert len(response.json()) == 2

    def test_running_filter(self, client, user_headers, stopped_entry, running_entry):
        response = client.get(URL, headers=user_headers, params={"running": True})

        assert [entry["id"] for entry in response.json()] == [running_entry["id"]]

    def test_active(self, client, user_headers, stopped_entry, running_entry):
        response = client.get(f"{URL}active", headers=user_headers)

        assert [entry["id"] for entry in response.json()] == [running_entry["id"]]

    def test_details(self, client, user_headers, stopped_entry, project, activity):
        response = client.get(f"{URL}{stopped_entry['id']}", headers=user_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["project"]["name"] == project.name
        assert data["activity"]["name"] == activity.name
        assert data["user"]["username"] == "testuser"

    def test_other_users_entry_is_forbidden(self, client, user_headers, manager_headers, payload):
        created = client.post(URL, headers=manager_headers, json=payload).json()

        response = client.get(f"{URL}{created['id']}", headers=user_headers)

        assert response.status_code == 403

    def test_unknown_entry(self, client, user_headers):
        response = client.get(f"{URL}999", headers=user_headers)

        assert response.status_code == 404

    def test_summary(self, client, user_headers, stopped_entry, running_entry):
        response = client.get(f"{URL}summary", headers=user_headers)

        assert response.status_code == 200
        assert response.json() == {
            "total_entries": 1,
            "total_duration": 5400,
            "total_hours": 1.5,
            "total_rate": 120.0,
            "exported_entries": 0,
        }


class TestModifyTimesheet:
    def test_stop(self, client, user_headers, running_entry):
        response = client.post(f"{URL}{running_entry['id']}/stop", headers=user_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["end"] is not None
        assert data["duration"] >= 15 * 60

    def test_stop_with_end(self, client, user_headers, payload):
        del payload["end"]
        running = client.post(URL, headers=user_headers, json=payload).json()

        response = client.post(
            f"{URL}{running['id']}/stop", headers=user_headers, json={"end": "2024-01-01T09:30:00+00:00"}
        )

        assert response.json()["duration"] == 1800
        assert response.json()["rate"] == 40.0

    def test_stop_stopped_entry(self, client, user_headers, stopped_entry):
        response = client.post(f"{URL}{stopped_entry['id']}/stop", headers=user_headers)

        assert response.status_code == 400

    def test_restart(self, client, user_headers, stopped_entry):
        response = client.post(f"{URL}{stopped_entry['id']}/restart", headers=user_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["id"] != stopped_entry["id"]
        assert data["end"] is None
        assert data["tags"] == ["frontend"]

    def test_update_end_recalculates(self, client, user_headers, stopped_entry):
        response = client.patch(
            f"{URL}{stopped_entry['id']}", headers=user_headers, json={"end": "2024-01-01T11:00:00+00:00"}
        )

        assert response.status_code == 200
        assert response.json()["duration"] == 7200
        assert response.json()["rate"] == 160.0

    def test_null_end_reopens(self, client, user_headers, stopped_entry):
        response = client.patch(f"{URL}{stopped_entry['id']}", headers=user_headers, json={"end": None})

        assert response.status_code == 200
        assert response.json()["end"] is None

    def test_update_end_before_begin(self, client, user_headers, stopped_entry):
        response = client.patch(
            f"{URL}{stopped_entry['id']}", headers=user_headers, json={"end": "2024-01-01T08:00:00+00:00"}
        )

        assert response.status_code == 400

    def test_user_cannot_export(self, client, user_headers, stopped_entry):
        response = client.patch(f"{URL}{stopped_entry['id']}", headers=user_headers, json={"exported": True})

        assert response.status_code == 403

    def test_exported_entry_is_locked_for_users(self, client, user_headers, manager_headers, stopped_entry):
        response = client.patch(f"{URL}{stopped_entry['id']}", headers=manager_headers, json={"exported": True})
        assert response.json()["exported"] is True

        response = client.patch(f"{URL}{stopped_entry['id']}", headers=user_headers, json={"description": "x"})
        assert response.status_code == 403

        response = client.delete(f"{URL}{stopped_entry['id']}", headers=user_headers)
        assert response.status_code == 403

    def test_meta_fields(self, client, user_headers, stopped_entry):
        url = f"{URL}{stopped_entry['id']}/meta"

        client.patch(url, headers=user_headers, json=[{"name": "ticket", "value": "ABC-1"}])
        response = client.patch(
            url, headers=user_headers, json=[{"name": "ticket", "value": "ABC-2", "visible": True}]
        )

        assert response.status_code == 200
        assert response.json()["meta_fields"] == [{"name": "ticket", "value": "ABC-2", "visible": True}]

    def test_delete(self, client, user_headers, stopped_entry):
        response = client.delete(f"{URL}{stopped_entry['id']}", headers=user_headers)
        assert response.status_code == 200

        response = client.get(f"{URL}{stopped_entry['id']}", headers=user_headers)
        assert response.status_code == 404


class TestWeekendRates:
    def test_rate_rule_applies_to_saturday(self, client, user_headers, payload, monkeypatch):
        monkeypatch.setattr(settings, "RATE_RULES", [RateRule(days=["saturday", "sunday"], factor=1.5)])
        payload.update(begin="2024-01-06T09:00:00+00:00", end="2024-01-06T10:00:00+00:00")

        response = client.post(URL, headers=user_headers, json=payload)

        assert response.json()["rate"] == 120.0


class TestEdgeCases:
    def test_offset_timezone_round_trip(self, client, user_headers, payload):
        payload.update(begin="2024-01-01T09:00:00+02:00", end="2024-01-01T10:00:00+02:00")
        created = client.post(URL, headers=user_headers, json=payload).json()

        response = client.get(f"{URL}{created['id']}", headers=user_headers)

        data = response.json()
        assert data["timezone"] == "+02:00"
        assert data["begin"].startswith("2024-01-01T09:00:00")
        assert data["begin"].endswith("+02:00")
        assert data["duration"] == 3600

    def test_zero_length_entry(self, client, user_headers, payload):
        payload.update(begin="2024-01-01T09:00:00+00:00", end="2024-01-01T09:00:00+00:00")

        response = client.post(URL, headers=user_headers, json=payload)

        assert response.status_code == 200
        assert response.json()["duration"] == 0
        assert response.json()["rate"] == 0.0

        summary = client.get(f"{URL}summary", headers=user_headers).json()
        assert summary["total_duration"] == 0
        assert summary["total_rate"] == 0.0

    def test_user_cannot_create_exported_entry(self, client, user_headers, payload):
        payload["exported"] = True

        response = client.post(URL, headers=user_headers, json=payload)

        assert response.status_code == 403

    def test_manager_can_create_exported_entry(self, client, manager_headers, payload):
        payload["exported"] = True

        response = client.post(URL, headers=manager_headers, json=payload)

        assert response.status_code == 200
        assert response.json()["exported"] is True
