"""
Task schemas.

Request and response models for task creation and update.
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from datetime import datetime

from backend.app.models.task_enums import TaskType


class TaskCreate(BaseModel):
    """Schema for creating a task."""
    task_type: TaskType = Field(..., description="Task type discriminator")
    task_name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[str] = Field(None, max_length=50, description="Free-form status, not validated")
    additional_data: Optional[Dict[str, Any]] = Field(None, description="Type-shaped payload")
    created_by: Optional[int] = None


class TaskUpdate(BaseModel):
    """
    Schema for updating a task.

    Only fields present in the request are written. The task type cannot
    be changed; the stored type decides which handler re-syncs the task.
    """
    task_name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[str] = Field(None, max_length=50)
    additional_data: Optional[Dict[str, Any]] = None


class TaskResponse(BaseModel):
    """Schema for task response."""
    id: int
    task_type: TaskType
    task_name: Optional[str]
    description: Optional[str]
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    status: Optional[str]
    additional_data: Optional[Dict[str, Any]]
    transport_task_id: Optional[int]
    created_by: Optional[int]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
