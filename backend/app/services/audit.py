"""
Audit logging service for task dispatch events.

Audit rows are written in their own commit, after the task transaction
has committed.
"""

import logging
from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


# Audit event constants
class AuditAction:
    """Standardized audit action constants."""
    TASK_CREATED = "TASK_CREATED"
    TASK_UPDATED = "TASK_UPDATED"
    PASSENGER_STATUS_UPDATED = "PASSENGER_STATUS_UPDATED"


async def log_event(
    db: AsyncSession,
    action: str,
    actor_id: Optional[int] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Log a dispatch event to the audit log.

    Args:
        db: Database session
        action: Action being performed (use AuditAction constants)
        actor_id: ID of user performing the action
        entity_type: Kind of record acted upon ("task", "fleet_task_passenger")
        entity_id: ID of that record
        metadata: Additional context as JSON

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        meta_data=metadata
    )

    db.add(audit_log)
    await db.commit()
    await db.refresh(audit_log)

    return audit_log


async def record_event(db: AsyncSession, action: str, **event: Any) -> bool:
    """
    Write an audit row on behalf of an already committed change.

    A failed audit write is rolled back and logged; it never fails the
    request that made the change.
    """
    try:
        await log_event(db, action, **event)
    except Exception:
        await db.rollback()
        logger.exception("Audit write failed for %s", action, extra={"action": action})
        return False
    return True
