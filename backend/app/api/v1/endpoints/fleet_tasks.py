"""
Fleet Task API Endpoints.

Read a fleet task with its child rows and record passenger progress.
"""

from datetime import datetime
from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from backend.app.db.session import get_db
from backend.app.core.exceptions import ResourceNotFoundError
from backend.app.models.fleet_task import FleetTask
from backend.app.models.fleet_task_detail import FleetTaskPassenger, FleetTaskMaterial, FleetTaskTool
from backend.app.models.task_enums import PassengerStatus
from backend.app.schemas.fleet_task import (
    FleetTaskDetailResponse, FleetTaskPassengerResponse, FleetTaskMaterialResponse,
    FleetTaskToolResponse, PassengerStatusUpdate
)
from backend.app.services.audit import record_event, AuditAction

router = APIRouter(prefix="/fleet-tasks", tags=["Fleet Tasks"])


@router.get("/{fleet_task_id}", response_model=FleetTaskDetailResponse)
async def get_fleet_task(
    fleet_task_id: int = Path(..., description="Fleet Task ID"),
    db: AsyncSession = Depends(get_db)
):
    """Get a fleet task with its passengers, materials and tools."""
    result = await db.execute(
        select(FleetTask).where(FleetTask.id == fleet_task_id)
    )
    fleet_task = result.scalar_one_or_none()

    if not fleet_task:
        raise ResourceNotFoundError("Fleet task", fleet_task_id)

    passengers = (await db.execute(
        select(FleetTaskPassenger).where(FleetTaskPassenger.fleet_task_id == fleet_task_id).order_by(FleetTaskPassenger.id)
    )).scalars().all()
    materials = (await db.execute(
        select(FleetTaskMaterial).where(FleetTaskMaterial.fleet_task_id == fleet_task_id).order_by(FleetTaskMaterial.id)
    )).scalars().all()
    tools = (await db.execute(
        select(FleetTaskTool).where(FleetTaskTool.fleet_task_id == fleet_task_id).order_by(FleetTaskTool.id)
    )).scalars().all()

    response = FleetTaskDetailResponse.model_validate(fleet_task)
    response.passengers = [FleetTaskPassengerResponse.model_validate(p) for p in passengers]
    response.materials = [FleetTaskMaterialResponse.model_validate(m) for m in materials]
    response.tools = [FleetTaskToolResponse.model_validate(t) for t in tools]
    return response


@router.patch("/{fleet_task_id}/passengers/{passenger_id}", response_model=FleetTaskPassengerResponse)
async def update_passenger_status(
    status_update: PassengerStatusUpdate,
    fleet_task_id: int = Path(..., description="Fleet Task ID"),
    passenger_id: int = Path(..., description="Passenger row ID"),
    db: AsyncSession = Depends(get_db)
):
    """
    Record a passenger's progress.

    PICKED stamps pickup_confirmed_at, DROPPED stamps drop_confirmed_at.
    This state lives only on the passenger row and is discarded when the
    owning task is updated.
    """
    result = await db.execute(
        select(FleetTaskPassenger).where(
            FleetTaskPassenger.id == passenger_id,
            FleetTaskPassenger.fleet_task_id == fleet_task_id
        )
    )
    passenger = result.scalar_one_or_none()

    if not passenger:
        raise ResourceNotFoundError("Passenger", passenger_id)

    previous_status = passenger.status
    now = datetime.utcnow()

    passenger.status = status_update.status.value
    if status_update.status == PassengerStatus.PICKED:
        passenger.pickup_confirmed_at = now
    elif status_update.status == PassengerStatus.DROPPED:
        passenger.drop_confirmed_at = now
    if status_update.notes is not None:
        passenger.notes = status_update.notes

    await db.commit()
    await db.refresh(passenger)
    response = FleetTaskPassengerResponse.model_validate(passenger)

    await record_event(
        db,
        AuditAction.PASSENGER_STATUS_UPDATED,
        entity_type="fleet_task_passenger",
        entity_id=passenger.id,
        metadata={
            "fleet_task_id": fleet_task_id,
            "from": previous_status,
            "to": passenger.status
        }
    )

    return response
