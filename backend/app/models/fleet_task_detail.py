"""
Fleet Task child detail models.

Passengers, materials and tools owned by a fleet task. Rows are created
and wiped wholesale by the transport handler.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.task_enums import PassengerStatus


class FleetTaskPassenger(Base):
    """
    Worker transported by a WORKER_TRANSPORT fleet task.

    Confirmation timestamps and status live only on this row and are lost
    when the parent task is re-synced.
    """
    __tablename__ = "fleet_task_passengers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    fleet_task_id = Column(Integer, ForeignKey('fleet_tasks.id'), nullable=False, index=True)
    worker_employee_id = Column(Integer, nullable=False)

    # Per-passenger progress
    status = Column(String(20), default=PassengerStatus.PLANNED.value, nullable=False)
    pickup_confirmed_at = Column(DateTime(timezone=True), nullable=True)
    drop_confirmed_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = {"sqlite_autoincrement": True}

    def __repr__(self):
        return f"<FleetTaskPassenger(id={self.id}, fleet_task_id={self.fleet_task_id}, worker={self.worker_employee_id})>"


class FleetTaskMaterial(Base):
    """Material quantity carried by a MATERIAL_TRANSPORT fleet task."""
    __tablename__ = "fleet_task_materials"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    fleet_task_id = Column(Integer, ForeignKey('fleet_tasks.id'), nullable=False, index=True)
    material_id = Column(Integer, nullable=False)
    quantity = Column(Float, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = {"sqlite_autoincrement": True}

    def __repr__(self):
        return f"<FleetTaskMaterial(id={self.id}, fleet_task_id={self.fleet_task_id}, material={self.material_id})>"


class FleetTaskTool(Base):
    """Tool quantity carried by a TOOL_TRANSPORT fleet task."""
    __tablename__ = "fleet_task_tools"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    fleet_task_id = Column(Integer, ForeignKey('fleet_tasks.id'), nullable=False, index=True)
    tool_id = Column(Integer, nullable=False)
    quantity = Column(Float, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = {"sqlite_autoincrement": True}

    def __repr__(self):
        return f"<FleetTaskTool(id={self.id}, fleet_task_id={self.fleet_task_id}, tool={self.tool_id})>"
