"""
Task-related enumerations.
"""

import enum


class TaskType(str, enum.Enum):
    """Task type discriminator. Only TRANSPORT has a satellite aggregate."""
    TRANSPORT = "TRANSPORT"
    WORK = "WORK"
    MATERIAL = "MATERIAL"
    TOOL = "TOOL"
    INSPECTION = "INSPECTION"
    MAINTENANCE = "MAINTENANCE"
    ADMIN = "ADMIN"
    TRAINING = "TRAINING"
    OTHER = "OTHER"


class TransportType(str, enum.Enum):
    """Selects which child collection of a fleet task is populated."""
    WORKER_TRANSPORT = "WORKER_TRANSPORT"  # fleet_task_passengers
    MATERIAL_TRANSPORT = "MATERIAL_TRANSPORT"  # fleet_task_materials
    TOOL_TRANSPORT = "TOOL_TRANSPORT"  # fleet_task_tools


class FleetTaskStatus(str, enum.Enum):
    """Fleet task status convention. Not enforced as a state machine."""
    PLANNED = "PLANNED"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class PassengerStatus(str, enum.Enum):
    """Per-passenger progress on a worker transport."""
    PLANNED = "PLANNED"
    PICKED = "PICKED"
    DROPPED = "DROPPED"
    ABSENT = "ABSENT"
