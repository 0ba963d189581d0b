"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from backend.app.api.v1.endpoints import tasks, fleet_tasks

router = APIRouter()

router.include_router(tasks.router)
router.include_router(fleet_tasks.router)
