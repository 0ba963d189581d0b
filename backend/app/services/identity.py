"""
Identity generation for tables with application-assigned ids.

Sequential ids are max + 1 and are not race-free: two concurrent writers
can read the same maximum. The primary key constraint turns the second
insert into an IntegrityError, which aborts that writer's transaction.
"""

import logging
import random
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.exceptions import IdentifierExhaustedError
from backend.app.models.task import Task

logger = logging.getLogger(__name__)


async def next_sequential_id(db: AsyncSession, model) -> int:
    """
    Allocate the next sequential id for a table.

    Args:
        db: Database session (the caller's transaction)
        model: Mapped class with an integer `id` column

    Returns:
        Current maximum id + 1, or 1 for an empty table
    """
    result = await db.execute(select(func.max(model.id)))
    current_max = result.scalar()
    return (current_max or 0) + 1


async def generate_task_id(db: AsyncSession) -> int:
    """
    Draw a random 5-digit task id that is not already taken.

    Each candidate is checked against the tasks table before use, with a
    bounded number of redraws.

    Raises:
        IdentifierExhaustedError: If every draw collided
    """
    attempts = settings.task_id_max_attempts
    for attempt in range(1, attempts + 1):
        candidate = random.randint(settings.task_id_min, settings.task_id_max)
        result = await db.execute(select(Task.id).where(Task.id == candidate))
        if result.scalar_one_or_none() is None:
            return candidate
        logger.warning("Task id %s already taken (attempt %s/%s)", candidate, attempt, attempts)

    raise IdentifierExhaustedError(attempts)
