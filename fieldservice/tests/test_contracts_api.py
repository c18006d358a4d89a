from __future__ import annotations

from datetime import datetime

from flask.testing import FlaskClient


def contract_payload(**overrides) -> dict:
    contract = {
        "id": "contract-1",
        "contractNumber": "CON-2024-00001",
        "clientId": "client-1",
        "clientName": "Acme Pools",
        "serviceType": "MAINTENANCE",
        "startDate": "2024-01-10T09:00:00",
        "serviceFrequency": "MONTHLY",
        "frequencyValue": 1,
        "status": "ACTIVE",
    }
    contract.update(overrides)
    return contract


def appointment_payload(**overrides) -> dict:
    appointment = {
        "id": "appt-1",
        "title": "Maintenance - Acme Pools",
        "type": "MAINTENANCE",
        "status": "IN_PROGRESS",
        "startDate": "2024-01-31T10:00:00",
        "serviceContractId": "contract-1",
    }
    appointment.update(overrides)
    return appointment


def test_create_contract(client: FlaskClient):
    resp = client.post(
        "/api/service-contracts",
        json={
            "clientId": "client-1",
            "clientName": "Acme Pools",
            "startDate": "2024-01-15T09:00:00",
            "serviceFrequency": "QUARTERLY",
            "frequencyValue": 1,
            "lastContractNumber": "CON-2023-00007",
        },
    )

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["contractNumber"] == f"CON-{datetime.utcnow().year}-00008"
    assert body["status"] == "ACTIVE"
    assert body["nextServiceDate"] == "2024-04-15T09:00:00"
    assert body["lastServiceDate"] is None


def test_create_contract_rejects_unknown_frequency(client: FlaskClient):
    resp = client.post(
        "/api/service-contracts",
        json={"clientId": "client-1", "startDate": "2024-01-15T09:00:00", "serviceFrequency": "DAILY"},
    )

    assert resp.status_code == 422


def test_create_contract_rejects_end_before_start(client: FlaskClient):
    resp = client.post(
        "/api/service-contracts",
        json={
            "clientId": "client-1",
            "startDate": "2024-01-15T09:00:00",
            "endDate": "2023-01-15T09:00:00",
        },
    )

    assert resp.status_code == 422


def test_complete_appointment_updates_contract(client: FlaskClient):
    resp = client.put(
        "/api/appointments/appt-1/status",
        json={
            "appointment": appointment_payload(),
            "status": "COMPLETED",
            "contract": contract_payload(),
        },
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["appointment"]["status"] == "COMPLETED"
    assert body["contractUpdate"] == {
        "contractId": "contract-1",
        "lastServiceDate": "2024-01-31T10:00:00",
        "nextServiceDate": "2024-02-29T10:00:00",
    }


def test_complete_one_time_contract_skips_update(client: FlaskClient):
    resp = client.put(
        "/api/appointments/appt-1/status",
        json={
            "appointment": appointment_payload(),
            "status": "COMPLETED",
            "contract": contract_payload(serviceFrequency="ONE_TIME"),
        },
    )

    assert resp.status_code == 200
    assert resp.get_json()["contractUpdate"] is None


def test_start_appointment_does_not_touch_contract(client: FlaskClient):
    resp = client.put(
        "/api/appointments/appt-1/status",
        json={
            "appointment": appointment_payload(status="SCHEDULED"),
            "status": "IN_PROGRESS",
            "contract": contract_payload(),
        },
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["appointment"]["status"] == "IN_PROGRESS"
    assert body["contractUpdate"] is None


def test_reopening_completed_appointment_returns_409(client: FlaskClient):
    resp = client.put(
        "/api/appointments/appt-1/status",
        json={"appointment": appointment_payload(status="COMPLETED"), "status": "SCHEDULED"},
    )

    assert resp.status_code == 409
    assert resp.get_json()["error"]


def test_status_url_must_match_appointment(client: FlaskClient):
    resp = client.put(
        "/api/appointments/appt-9/status",
        json={"appointment": appointment_payload(), "status": "COMPLETED"},
    )

    assert resp.status_code == 400


def test_contract_for_unlinked_appointment_returns_422(client: FlaskClient):
    resp = client.put(
        "/api/appointments/appt-1/status",
        json={
            "appointment": appointment_payload(serviceContractId=None),
            "status": "COMPLETED",
            "contract": contract_payload(),
        },
    )

    assert resp.status_code == 422


def test_schedule_service(client: FlaskClient):
    resp = client.post(
        "/api/service-contracts/schedule",
        json={
            "contract": contract_payload(),
            "openAppointments": [appointment_payload(status="COMPLETED")],
            "startDate": "2024-02-29T10:00:00",
            "endDate": "2024-02-29T12:00:00",
            "technicianId": "tech-4",
        },
    )

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["status"] == "SCHEDULED"
    assert body["serviceContractId"] == "contract-1"
    assert body["title"] == "Maintenance - Acme Pools"


def test_schedule_with_pending_visit_returns_400(client: FlaskClient):
    resp = client.post(
        "/api/service-contracts/schedule",
        json={
            "contract": contract_payload(),
            "openAppointments": [appointment_payload(status="SCHEDULED")],
            "startDate": "2024-02-29T10:00:00",
        },
    )

    assert resp.status_code == 400
    assert any("pending" in message for message in resp.get_json()["error"])


def test_schedule_inactive_contract_returns_400(client: FlaskClient):
    resp = client.post(
        "/api/service-contracts/schedule",
        json={"contract": contract_payload(status="SUSPENDED"), "startDate": "2024-02-29T10:00:00"},
    )

    assert resp.status_code == 400


def test_create_contract_rejects_mixed_timezone_dates(client: FlaskClient):
    resp = client.post(
        "/api/service-contracts",
        json={
            "clientId": "client-1",
            "startDate": "2024-01-15T09:00:00Z",
            "endDate": "2024-06-15T09:00:00",
        },
    )

    assert resp.status_code == 422


def test_schedule_with_mixed_timezone_dates_returns_400(client: FlaskClient):
    resp = client.post(
        "/api/service-contracts/schedule",
        json={
            "contract": contract_payload(),
            "startDate": "2024-02-29T10:00:00Z",
            "endDate": "2024-02-29T12:00:00",
        },
    )

    assert resp.status_code == 400
    assert any("timezone" in message for message in resp.get_json()["error"])
