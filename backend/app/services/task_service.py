"""
Task orchestration service.

Owns the atomic create/update protocol for tasks: the core task row, the
type-specific satellite written by the dispatched handler, and the back
reference linking them are committed together or not at all.
"""

import logging
from datetime import datetime
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import TaskNotFoundError
from backend.app.models.task import Task
from backend.app.schemas.task import TaskCreate, TaskUpdate
from backend.app.services.identity import generate_task_id
from backend.app.services.task_dispatch import get_task_handler

logger = logging.getLogger(__name__)


class TaskService:

    @staticmethod
    async def get_task(db: AsyncSession, task_id: int) -> Task:
        """Fetch a task by id or raise TaskNotFoundError."""
        result = await db.execute(select(Task).where(Task.id == task_id))
        task = result.scalar_one_or_none()
        if not task:
            raise TaskNotFoundError(task_id)
        return task

    @staticmethod
    async def create_task(db: AsyncSession, task_data: TaskCreate) -> Task:
        """
        Create a task and, depending on its type, its satellite aggregate.

        Steps (one transaction):
        1. Draw a task id and insert the task with the raw additional_data
        2. Dispatch to the create handler for task_type
        3. Store the returned satellite id in transport_task_id
        4. Commit

        Any exception rolls back every write above and is re-raised
        unchanged.
        """
        try:
            task_id = await generate_task_id(db)
            now = datetime.utcnow()

            task = Task(
                id=task_id,
                task_type=task_data.task_type,
                task_name=task_data.task_name,
                description=task_data.description,
                start_date=task_data.start_date,
                end_date=task_data.end_date,
                status=task_data.status or "PLANNED",
                additional_data=task_data.additional_data,
                created_by=task_data.created_by,
                created_at=now,
                updated_at=now
            )
            db.add(task)
            await db.flush()

            handler = get_task_handler(task.task_type)
            satellite_id = await handler.create_satellite(db, task.id, task_data.additional_data)

            if satellite_id is not None:
                task.transport_task_id = satellite_id
                await db.flush()

            await db.commit()
        except Exception:
            await db.rollback()
            logger.exception("Task creation aborted, transaction rolled back (type=%s)", task_data.task_type.value)
            raise

        await db.refresh(task)
        logger.info(
            "Task %s created (type=%s)", task.id, task.task_type.value,
            extra={"task_id": task.id, "task_type": task.task_type.value,
                   "transport_task_id": task.transport_task_id}
        )
        return task

    @staticmethod
    async def update_task(db: AsyncSession, task_id: int, updates: TaskUpdate) -> Task:
        """
        Update a task's generic fields and re-sync its satellite.

        The handler is chosen by the task's stored task_type. Only fields
        present in `updates` are written.

        Raises:
            TaskNotFoundError: If no task has this id (nothing is written)
        """
        try:
            task = await TaskService.get_task(db, task_id)

            for field, value in updates.model_dump(exclude_unset=True).items():
                setattr(task, field, value)
            task.updated_at = datetime.utcnow()
            await db.flush()

            handler = get_task_handler(task.task_type)
            satellite_id = await handler.update_satellite(db, task.id, updates.additional_data)

            if satellite_id is not None and task.transport_task_id != satellite_id:
                task.transport_task_id = satellite_id
                await db.flush()

            await db.commit()
        except TaskNotFoundError:
            await db.rollback()
            raise
        except Exception:
            await db.rollback()
            logger.exception("Task %s update aborted, transaction rolled back", task_id)
            raise

        await db.refresh(task)
        logger.info("Task %s updated", task.id, extra={"task_id": task.id})
        return task
