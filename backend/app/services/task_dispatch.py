"""
Task type dispatch table.

Maps every TaskType to the handler that maintains its satellite aggregate.
Types without a satellite map to NoSatelliteHandler explicitly, so the
table always covers the whole enumeration.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.models.task_enums import TaskType
from backend.app.services.transport_handler import handle_transport, handle_transport_update


class TaskTypeHandler(ABC):
    """Expands a task's additional_data into satellite records."""

    @abstractmethod
    async def create_satellite(self, db: AsyncSession, task_id: int, data: Optional[Dict[str, Any]]) -> Optional[int]:
        """Create the satellite for a new task. Returns its id, or None."""

    @abstractmethod
    async def update_satellite(self, db: AsyncSession, task_id: int, data: Optional[Dict[str, Any]]) -> Optional[int]:
        """Re-sync the satellite of an updated task. Returns its id, or None."""


class NoSatelliteHandler(TaskTypeHandler):
    """Task types represented by the core task row alone."""

    async def create_satellite(self, db, task_id, data):
        return None

    async def update_satellite(self, db, task_id, data):
        return None


class TransportTaskHandler(TaskTypeHandler):
    """TRANSPORT tasks own a fleet task and its passengers/materials/tools."""

    async def create_satellite(self, db, task_id, data):
        return await handle_transport(db, task_id, data)

    async def update_satellite(self, db, task_id, data):
        return await handle_transport_update(db, task_id, data)


NO_SATELLITE = NoSatelliteHandler()

TASK_HANDLERS: Dict[TaskType, TaskTypeHandler] = {
    TaskType.TRANSPORT: TransportTaskHandler(),
    TaskType.WORK: NO_SATELLITE,
    TaskType.MATERIAL: NO_SATELLITE,
    TaskType.TOOL: NO_SATELLITE,
    TaskType.INSPECTION: NO_SATELLITE,
    TaskType.MAINTENANCE: NO_SATELLITE,
    TaskType.ADMIN: NO_SATELLITE,
    TaskType.TRAINING: NO_SATELLITE,
    TaskType.OTHER: NO_SATELLITE,
}

_unregistered = set(TaskType) - set(TASK_HANDLERS)
if _unregistered:
    raise RuntimeError(f"No task handler registered for: {sorted(t.value for t in _unregistered)}")


def get_task_handler(task_type: TaskType) -> TaskTypeHandler:
    """Resolve the handler for a task type."""
    return TASK_HANDLERS[TaskType(task_type)]
