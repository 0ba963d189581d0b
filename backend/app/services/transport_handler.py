"""
Transport handler.

Expands a TRANSPORT task's additional_data into a fleet task and its
child detail rows. Every function runs inside the caller's transaction
and never commits; any failure propagates to the task orchestrator,
which rolls back the whole task write.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import ValidationError
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import TransportDataError
from backend.app.models.fleet_task import FleetTask
from backend.app.models.fleet_task_detail import FleetTaskPassenger, FleetTaskMaterial, FleetTaskTool
from backend.app.models.task_enums import TransportType, FleetTaskStatus
from backend.app.schemas.fleet_task import TransportTaskData
from backend.app.services.identity import next_sequential_id

logger = logging.getLogger(__name__)

# Payload fields copied onto the fleet task row
FLEET_TASK_FIELDS = {
    "driver_id", "vehicle_id", "company_id", "project_id", "transport_type",
    "pickup_location", "drop_location", "pickup_time", "drop_time",
}


def parse_transport_data(data: Optional[Dict[str, Any]]) -> TransportTaskData:
    """
    Validate a TRANSPORT additional_data payload.

    Raises:
        TransportDataError: If the payload is missing or malformed
    """
    if data is None:
        raise TransportDataError("additional_data is required for TRANSPORT tasks")

    try:
        return TransportTaskData.model_validate(data)
    except ValidationError as exc:
        errors = [{"loc": list(err["loc"]), "msg": err["msg"]} for err in exc.errors()]
        raise TransportDataError("Invalid transport data", errors=errors) from exc


def _fleet_task_values(payload: TransportTaskData, only_supplied: bool = False) -> Dict[str, Any]:
    """Column values for the fleet task; planned times mirror the supplied times."""
    values = payload.model_dump(include=FLEET_TASK_FIELDS, exclude_unset=only_supplied)
    if "pickup_time" in values:
        values["planned_pickup_time"] = values["pickup_time"]
    if "drop_time" in values:
        values["planned_drop_time"] = values["drop_time"]
    return values


def _build_child_rows(fleet_task_id: int, payload: TransportTaskData) -> List[Any]:
    """Child rows for the payload's transport_type. Unknown types get none."""
    if payload.transport_type == TransportType.WORKER_TRANSPORT.value:
        return [
            FleetTaskPassenger(fleet_task_id=fleet_task_id, worker_employee_id=worker_id)
            for worker_id in payload.workers
        ]

    if payload.transport_type == TransportType.MATERIAL_TRANSPORT.value:
        return [
            FleetTaskMaterial(fleet_task_id=fleet_task_id, material_id=line.material_id, quantity=line.quantity)
            for line in payload.material_quantities
        ]

    if payload.transport_type == TransportType.TOOL_TRANSPORT.value:
        return [
            FleetTaskTool(fleet_task_id=fleet_task_id, tool_id=line.tool_id, quantity=line.quantity)
            for line in payload.tool_quantities
        ]

    return []


async def _insert_child_rows(db: AsyncSession, fleet_task_id: int, payload: TransportTaskData) -> int:
    rows = _build_child_rows(fleet_task_id, payload)
    if rows:
        db.add_all(rows)
        await db.flush()  # constraint violations surface here
    return len(rows)


async def _delete_child_rows(db: AsyncSession, fleet_task_id: int) -> None:
    # All three tables, whatever the current transport_type
    for model in (FleetTaskPassenger, FleetTaskMaterial, FleetTaskTool):
        await db.execute(
            delete(model).where(model.fleet_task_id == fleet_task_id)
        )


async def _create_fleet_task(db: AsyncSession, task_id: int, payload: TransportTaskData) -> int:
    fleet_task_id = await next_sequential_id(db, FleetTask)
    now = datetime.utcnow()

    fleet_task = FleetTask(
        id=fleet_task_id,
        task_id=task_id,
        task_date=now,
        status=FleetTaskStatus.PLANNED.value,
        created_by=payload.created_by,
        created_at=now,
        updated_at=now,
        **_fleet_task_values(payload)
    )
    db.add(fleet_task)
    await db.flush()

    children = await _insert_child_rows(db, fleet_task_id, payload)

    logger.info(
        "Fleet task %s created for task %s", fleet_task_id, task_id,
        extra={"fleet_task_id": fleet_task_id, "task_id": task_id,
               "transport_type": payload.transport_type, "child_rows": children}
    )
    return fleet_task_id


async def handle_transport(db: AsyncSession, task_id: int, data: Optional[Dict[str, Any]]) -> int:
    """
    Create the fleet task for a newly persisted TRANSPORT task.

    Args:
        db: Database session holding the task's open transaction
        task_id: Id of the already-flushed parent task
        data: The task's additional_data

    Returns:
        Id of the new fleet task, for back-linking onto the task

    Raises:
        TransportDataError: If data is missing or malformed
        IntegrityError: If any insert violates a constraint
    """
    payload = parse_transport_data(data)
    return await _create_fleet_task(db, task_id, payload)


async def handle_transport_update(db: AsyncSession, task_id: int, data: Optional[Dict[str, Any]]) -> int:
    """
    Re-sync the fleet task of an updated TRANSPORT task.

    Supplied fields overwrite the stored ones. All child rows are deleted
    and re-inserted from the payload, so per-row state such as passenger
    confirmations is discarded. A task without a fleet task gets one
    through the full create path.

    Returns:
        Id of the updated (or newly created) fleet task
    """
    payload = parse_transport_data(data)

    result = await db.execute(
        select(FleetTask).where(FleetTask.task_id == task_id)
    )
    fleet_task = result.scalar_one_or_none()

    if not fleet_task:
        logger.info("Task %s has no fleet task yet, creating one", task_id)
        return await _create_fleet_task(db, task_id, payload)

    for field, value in _fleet_task_values(payload, only_supplied=True).items():
        setattr(fleet_task, field, value)
    fleet_task.updated_at = datetime.utcnow()
    await db.flush()

    await _delete_child_rows(db, fleet_task.id)
    children = await _insert_child_rows(db, fleet_task.id, payload)

    logger.info(
        "Fleet task %s re-synced for task %s", fleet_task.id, task_id,
        extra={"fleet_task_id": fleet_task.id, "task_id": task_id,
               "transport_type": payload.transport_type, "child_rows": children}
    )
    return fleet_task.id
