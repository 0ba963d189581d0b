"""
Task database model.

A task is the generic, polymorphic unit of work. Its task_type decides
whether a satellite aggregate (e.g. a fleet task) is created alongside it.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, JSON
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.task_enums import TaskType


class Task(Base):
    """
    Task model.

    The id is assigned by the application (random 5-digit draw), not by
    the database. additional_data is stored exactly as submitted.
    """
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True, autoincrement=False)

    # Discriminator
    task_type = Column(Enum(TaskType), nullable=False, index=True)

    # Generic descriptive / scheduling fields
    task_name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(50), default="PLANNED", nullable=True)  # free-form, no transition rules

    # Type-shaped payload, only TRANSPORT is consumed
    additional_data = Column(JSON, nullable=True)

    # Back reference to the satellite fleet task (no FK: fleet_tasks already points here)
    transport_task_id = Column(Integer, nullable=True, index=True)

    created_by = Column(Integer, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Task(id={self.id}, type='{self.task_type.value}', transport_task_id={self.transport_task_id})>"
