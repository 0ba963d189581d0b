"""
Integration tests for the task and fleet task endpoints.
"""

import pytest
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError

from backend.app.models.audit_log import AuditLog
from backend.app.models.task import Task
from backend.app.models.fleet_task import FleetTask


async def create_task(client, payload):
    return await client.post("/v1/tasks", json=payload)


def transport_payload(additional_data, **fields):
    payload = {"task_type": "TRANSPORT", "task_name": "Site shuttle", "created_by": 2, "additional_data": additional_data}
    payload.update(fields)
    return payload


@pytest.fixture(autouse=True)
def mock_send_email(mocker):
    return mocker.patch("backend.app.api.v1.endpoints.tasks.send_email_notification")


@pytest.mark.asyncio
async def test_create_transport_task(client, db_session, worker_transport_data):
    response = await create_task(client, transport_payload(worker_transport_data([1, 2])))

    assert response.status_code == 201
    data = response.json()
    assert data["task_type"] == "TRANSPORT"
    assert data["transport_task_id"] == 1
    assert data["status"] == "PLANNED"
    assert data["additional_data"]["workers"] == [1, 2]

    detail = await client.get(f"/v1/fleet-tasks/{data['transport_task_id']}")
    assert detail.status_code == 200
    fleet_task = detail.json()
    assert fleet_task["task_id"] == data["id"]
    assert [p["worker_employee_id"] for p in fleet_task["passengers"]] == [1, 2]
    assert fleet_task["materials"] == []
    assert fleet_task["tools"] == []

    result = await db_session.execute(select(AuditLog).where(AuditLog.action == "TASK_CREATED"))
    audit = result.scalar_one()
    assert audit.entity_id == data["id"]
    assert audit.actor_id == 2


@pytest.mark.asyncio
async def test_create_transport_task_with_camel_case_data(client):
    additional_data = {
        "transportType": "MATERIAL_TRANSPORT",
        "vehicleId": 5,
        "materialQuantities": [{"materialId": 77, "quantity": 12}],
    }
    response = await create_task(client, transport_payload(additional_data))

    assert response.status_code == 201
    detail = await client.get(f"/v1/fleet-tasks/{response.json()['transport_task_id']}")
    assert detail.json()["vehicle_id"] == 5
    assert detail.json()["materials"][0]["material_id"] == 77


@pytest.mark.asyncio
async def test_create_transport_task_emails_driver(client, driver_user, worker_transport_data, mock_send_email):
    response = await create_task(client, transport_payload(worker_transport_data([1])))

    assert response.status_code == 201
    mock_send_email.assert_called_once()
    notification = mock_send_email.call_args.args[0]
    assert notification.to == "driver7@test.com"
    assert "Site shuttle" in notification.subject


@pytest.mark.asyncio
async def test_create_without_known_driver_skips_email(client, worker_transport_data, mock_send_email):
    response = await create_task(client, transport_payload(worker_transport_data([1])))

    assert response.status_code == 201
    mock_send_email.assert_not_called()


@pytest.mark.asyncio
async def test_email_preparation_failure_does_not_fail_creation(client, driver_user, worker_transport_data, mocker):
    mocker.patch(
        "backend.app.api.v1.endpoints.tasks.NotificationService.build_driver_assignment_email",
        side_effect=RuntimeError("template error"),
    )

    response = await create_task(client, transport_payload(worker_transport_data([1])))

    assert response.status_code == 201
    assert response.json()["transport_task_id"] == 1


@pytest.mark.asyncio
async def test_audit_failure_does_not_fail_creation(client, db_session, driver_user, worker_transport_data, mock_send_email, mocker):
    mocker.patch("backend.app.services.audit.log_event", side_effect=SQLAlchemyError("audit table locked"))

    response = await create_task(client, transport_payload(worker_transport_data([1])))

    assert response.status_code == 201
    assert response.json()["task_name"] == "Site shuttle"
    assert await db_session.get(Task, response.json()["id"]) is not None
    assert (await db_session.execute(select(func.count()).select_from(AuditLog))).scalar() == 0
    mock_send_email.assert_called_once()


@pytest.mark.asyncio
async def test_create_work_task(client, db_session, mock_send_email):
    response = await create_task(client, {"task_type": "WORK", "task_name": "Pour slab", "status": "OPEN"})

    assert response.status_code == 201
    assert response.json()["transport_task_id"] is None
    assert response.json()["status"] == "OPEN"
    mock_send_email.assert_not_called()
    assert (await db_session.execute(select(func.count()).select_from(FleetTask))).scalar() == 0


@pytest.mark.asyncio
async def test_create_rejects_unknown_task_type(client):
    response = await create_task(client, {"task_type": "DELIVERY"})

    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_create_with_malformed_transport_data(client, db_session):
    response = await create_task(client, transport_payload({"workers": [1, 2]}))

    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "ERR_HANDLER_001"
    assert body["details"]["errors"]
    assert (await db_session.execute(select(func.count()).select_from(Task))).scalar() == 0


@pytest.mark.asyncio
async def test_create_accepts_repeated_workers(client, worker_transport_data):
    response = await create_task(client, transport_payload(worker_transport_data([3, 3, 4])))

    assert response.status_code == 201
    detail = (await client.get(f"/v1/fleet-tasks/{response.json()['transport_task_id']}")).json()
    assert [p["worker_employee_id"] for p in detail["passengers"]] == [3, 3, 4]


@pytest.mark.asyncio
async def test_store_rejection_is_rolled_back(client, db_session, worker_transport_data, break_last_passenger_insert):
    break_last_passenger_insert()

    response = await create_task(client, transport_payload(worker_transport_data([3, 4])))

    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_VALIDATION_STORE"
    assert (await db_session.execute(select(func.count()).select_from(Task))).scalar() == 0
    assert (await db_session.execute(select(func.count()).select_from(FleetTask))).scalar() == 0


@pytest.mark.asyncio
async def test_get_task(client):
    created = (await create_task(client, {"task_type": "TRAINING", "task_name": "Safety induction"})).json()

    response = await client.get(f"/v1/tasks/{created['id']}")

    assert response.status_code == 200
    assert response.json()["task_name"] == "Safety induction"


@pytest.mark.asyncio
async def test_get_unknown_task(client):
    response = await client.get("/v1/tasks/11111")

    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_NOT_FOUND_001"


@pytest.mark.asyncio
async def test_update_task_resyncs_fleet_task(client, worker_transport_data):
    created = (await create_task(client, transport_payload(worker_transport_data([1, 2, 3])))).json()

    response = await client.put(
        f"/v1/tasks/{created['id']}",
        json={"task_name": "Late shuttle", "additional_data": worker_transport_data([4, 5], pickup_location="Gate 4")}
    )

    assert response.status_code == 200
    assert response.json()["task_name"] == "Late shuttle"
    detail = (await client.get(f"/v1/fleet-tasks/{created['transport_task_id']}")).json()
    assert detail["pickup_location"] == "Gate 4"
    assert [p["worker_employee_id"] for p in detail["passengers"]] == [4, 5]


@pytest.mark.asyncio
async def test_transport_update_requires_additional_data(client, worker_transport_data):
    created = (await create_task(client, transport_payload(worker_transport_data([1])))).json()

    response = await client.put(f"/v1/tasks/{created['id']}", json={"status": "ONGOING"})

    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_HANDLER_001"
    assert (await client.get(f"/v1/tasks/{created['id']}")).json()["status"] == "PLANNED"


@pytest.mark.asyncio
async def test_update_unknown_task(client, db_session, worker_transport_data):
    response = await client.put("/v1/tasks/99999", json={"additional_data": worker_transport_data([1])})

    assert response.status_code == 404
    assert response.json()["message"] == "Task not found"
    assert (await db_session.execute(select(func.count()).select_from(FleetTask))).scalar() == 0


@pytest.mark.asyncio
async def test_passenger_progress_is_discarded_by_update(client, worker_transport_data):
    """Confirmation timestamps live only on passenger rows, which updates recreate."""
    created = (await create_task(client, transport_payload(worker_transport_data([1, 2])))).json()
    fleet_task_id = created["transport_task_id"]
    passenger = (await client.get(f"/v1/fleet-tasks/{fleet_task_id}")).json()["passengers"][0]

    picked = await client.patch(
        f"/v1/fleet-tasks/{fleet_task_id}/passengers/{passenger['id']}",
        json={"status": "PICKED", "notes": "Boarded at gate"}
    )
    assert picked.status_code == 200
    assert picked.json()["status"] == "PICKED"
    assert picked.json()["pickup_confirmed_at"] is not None

    await client.put(f"/v1/tasks/{created['id']}", json={"additional_data": worker_transport_data([1, 2])})

    passengers = (await client.get(f"/v1/fleet-tasks/{fleet_task_id}")).json()["passengers"]
    assert [p["worker_employee_id"] for p in passengers] == [1, 2]
    assert all(p["status"] == "PLANNED" and p["pickup_confirmed_at"] is None for p in passengers)


@pytest.mark.asyncio
async def test_passenger_must_belong_to_fleet_task(client, worker_transport_data):
    first = (await create_task(client, transport_payload(worker_transport_data([1])))).json()
    second = (await create_task(client, transport_payload(worker_transport_data([2])))).json()
    passenger = (await client.get(f"/v1/fleet-tasks/{first['transport_task_id']}")).json()["passengers"][0]

    response = await client.patch(
        f"/v1/fleet-tasks/{second['transport_task_id']}/passengers/{passenger['id']}",
        json={"status": "DROPPED"}
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_get_unknown_fleet_task(client):
    response = await client.get("/v1/fleet-tasks/404")

    assert response.status_code == 404
    assert response.json()["details"]["resource"] == "Fleet task"


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "X-Correlation-ID" in response.headers
