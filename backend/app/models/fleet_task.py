"""
Fleet Task database model.

Transport-specific satellite aggregate, one-to-one with a TRANSPORT task.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.task_enums import FleetTaskStatus


class FleetTask(Base):
    """
    Fleet Task model.

    Owns rows in exactly one of fleet_task_passengers, fleet_task_materials
    or fleet_task_tools, selected by transport_type. The id is sequential
    (max + 1) and assigned by the application.
    """
    __tablename__ = "fleet_tasks"

    id = Column(Integer, primary_key=True, index=True, autoincrement=False)

    # Owning task
    task_id = Column(Integer, ForeignKey('tasks.id'), unique=True, nullable=False, index=True)

    # Foreign references (not enforced by the store)
    driver_id = Column(Integer, nullable=True, index=True)
    vehicle_id = Column(Integer, nullable=True, index=True)
    company_id = Column(Integer, nullable=True, index=True)
    project_id = Column(Integer, nullable=True)

    # WORKER_TRANSPORT / MATERIAL_TRANSPORT / TOOL_TRANSPORT, other values allowed
    transport_type = Column(String(50), nullable=False)

    # Locations
    pickup_location = Column(String(500), nullable=True)
    drop_location = Column(String(500), nullable=True)

    # Scheduling
    task_date = Column(DateTime(timezone=True), nullable=True)
    pickup_time = Column(DateTime(timezone=True), nullable=True)
    drop_time = Column(DateTime(timezone=True), nullable=True)
    planned_pickup_time = Column(DateTime(timezone=True), nullable=True)
    planned_drop_time = Column(DateTime(timezone=True), nullable=True)

    status = Column(String(20), default=FleetTaskStatus.PLANNED.value, nullable=False)

    created_by = Column(Integer, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<FleetTask(id={self.id}, task_id={self.task_id}, type='{self.transport_type}')>"
