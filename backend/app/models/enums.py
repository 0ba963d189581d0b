"""
User roles enumeration.

Defines the role types for the fleet management system.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        ADMIN: Company administrator
        MANAGER: Plans and dispatches tasks
        DRIVER: Assigned to fleet tasks (receives trip emails)
        WORKER: Transported as a passenger
    """
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    DRIVER = "DRIVER"
    WORKER = "WORKER"
