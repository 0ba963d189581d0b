"""
Fleet task schemas.

TransportTaskData is the shape of a TRANSPORT task's additional_data. It
accepts snake_case keys as well as the camelCase keys older clients send.
"""

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime

from backend.app.models.task_enums import PassengerStatus


class MaterialQuantity(BaseModel):
    """One material line of a MATERIAL_TRANSPORT payload."""
    material_id: int
    quantity: float = Field(..., ge=0)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ToolQuantity(BaseModel):
    """One tool line of a TOOL_TRANSPORT payload."""
    tool_id: int
    quantity: float = Field(..., ge=0)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class TransportTaskData(BaseModel):
    """additional_data payload consumed by the transport handler."""
    transport_type: str = Field(..., min_length=1, description="WORKER_TRANSPORT, MATERIAL_TRANSPORT or TOOL_TRANSPORT")
    driver_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    company_id: Optional[int] = None
    project_id: Optional[int] = None
    pickup_location: Optional[str] = Field(None, max_length=500)
    drop_location: Optional[str] = Field(None, max_length=500)
    pickup_time: Optional[datetime] = None
    drop_time: Optional[datetime] = None
    created_by: Optional[int] = None

    # Exactly one of these is consumed, depending on transport_type
    workers: List[int] = []
    material_quantities: List[MaterialQuantity] = []
    tool_quantities: List[ToolQuantity] = []

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class FleetTaskPassengerResponse(BaseModel):
    """Schema for passenger row response."""
    id: int
    fleet_task_id: int
    worker_employee_id: int
    status: str
    pickup_confirmed_at: Optional[datetime]
    drop_confirmed_at: Optional[datetime]
    notes: Optional[str]

    class Config:
        from_attributes = True


class FleetTaskMaterialResponse(BaseModel):
    """Schema for material row response."""
    id: int
    fleet_task_id: int
    material_id: int
    quantity: float

    class Config:
        from_attributes = True


class FleetTaskToolResponse(BaseModel):
    """Schema for tool row response."""
    id: int
    fleet_task_id: int
    tool_id: int
    quantity: float

    class Config:
        from_attributes = True


class FleetTaskDetailResponse(BaseModel):
    """Fleet task with its child detail rows."""
    id: int
    task_id: int
    driver_id: Optional[int]
    vehicle_id: Optional[int]
    company_id: Optional[int]
    project_id: Optional[int]
    transport_type: str
    pickup_location: Optional[str]
    drop_location: Optional[str]
    task_date: Optional[datetime]
    pickup_time: Optional[datetime]
    drop_time: Optional[datetime]
    planned_pickup_time: Optional[datetime]
    planned_drop_time: Optional[datetime]
    status: str
    created_by: Optional[int]
    created_at: datetime
    updated_at: datetime
    passengers: List[FleetTaskPassengerResponse] = []
    materials: List[FleetTaskMaterialResponse] = []
    tools: List[FleetTaskToolResponse] = []

    class Config:
        from_attributes = True


class PassengerStatusUpdate(BaseModel):
    """Schema for recording a passenger's progress."""
    status: PassengerStatus
    notes: Optional[str] = Field(None, max_length=500)
