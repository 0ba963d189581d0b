"""
Task API Endpoints.

Create, read and update tasks. TRANSPORT tasks fan out to a fleet task
inside the same transaction (see TaskService).
"""

import logging
from fastapi import APIRouter, BackgroundTasks, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import get_db
from backend.app.schemas.task import TaskCreate, TaskUpdate, TaskResponse
from backend.app.services.task_service import TaskService
from backend.app.services.notification_service import NotificationService, send_email_notification
from backend.app.services.audit import record_event, AuditAction

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["Tasks"])


async def schedule_driver_email(db: AsyncSession, background_tasks: BackgroundTasks, fleet_task_id: int) -> bool:
    """Queue the driver assignment email. Failures are logged, never raised."""
    try:
        notification = await NotificationService.build_driver_assignment_email(db, fleet_task_id)
    except Exception:
        logger.exception("Could not prepare driver email for fleet task %s", fleet_task_id)
        return False

    if notification is None:
        return False

    background_tasks.add_task(send_email_notification, notification)
    return True


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db)
):
    """
    Create a task.

    For TRANSPORT tasks, additional_data must carry transport_type and the
    matching workers / material_quantities / tool_quantities list. The
    task, its fleet task and child rows are written atomically; the driver
    is emailed after commit.
    """
    task = await TaskService.create_task(db, task_data)
    # Built before auditing; a failed audit write expires the session
    response = TaskResponse.model_validate(task)

    await record_event(
        db,
        AuditAction.TASK_CREATED,
        actor_id=task.created_by,
        entity_type="task",
        entity_id=task.id,
        metadata={
            "task_type": task.task_type.value,
            "transport_task_id": task.transport_task_id
        }
    )

    if response.transport_task_id is not None:
        await schedule_driver_email(db, background_tasks, response.transport_task_id)

    return response


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: int = Path(..., description="Task ID"),
    db: AsyncSession = Depends(get_db)
):
    """Get a single task."""
    return await TaskService.get_task(db, task_id)


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    updates: TaskUpdate,
    task_id: int = Path(..., description="Task ID"),
    db: AsyncSession = Depends(get_db)
):
    """
    Update a task.

    Generic fields present in the body are overwritten. For TRANSPORT
    tasks the fleet task is re-synced from additional_data: its child rows
    are deleted and re-inserted. Every TRANSPORT update must therefore
    carry the full additional_data, even one that only changes status;
    without it the request fails with 400 and nothing is written.
    """
    task = await TaskService.update_task(db, task_id, updates)
    response = TaskResponse.model_validate(task)

    await record_event(
        db,
        AuditAction.TASK_UPDATED,
        entity_type="task",
        entity_id=task.id,
        metadata={
            "fields": sorted(updates.model_dump(exclude_unset=True).keys()),
            "transport_task_id": task.transport_task_id
        }
    )

    return response
