"""
Identity generation and task type dispatch tests.
"""

import pytest

from backend.app.core.config import settings
from backend.app.core.exceptions import IdentifierExhaustedError
from backend.app.models.enums import UserRole
from backend.app.models.task import Task
from backend.app.models.task_enums import TaskType
from backend.app.models.user import User
from backend.app.models.fleet_task import FleetTask
from backend.app.services.identity import next_sequential_id, generate_task_id
from backend.app.services.task_dispatch import (
    TASK_HANDLERS, get_task_handler, NoSatelliteHandler, TaskTypeHandler, TransportTaskHandler
)


@pytest.mark.asyncio
async def test_sequential_id_starts_at_one(db_session):
    assert await next_sequential_id(db_session, FleetTask) == 1


@pytest.mark.asyncio
async def test_sequential_id_is_max_plus_one(db_session):
    db_session.add_all([
        User(id=3, email="a@test.com", name="A", role=UserRole.WORKER),
        User(id=9, email="b@test.com", name="B", role=UserRole.WORKER),
    ])
    await db_session.commit()

    assert await next_sequential_id(db_session, User) == 10


@pytest.mark.asyncio
async def test_task_id_is_five_digits(db_session):
    task_id = await generate_task_id(db_session)
    assert settings.task_id_min <= task_id <= settings.task_id_max
    assert len(str(task_id)) == 5


@pytest.mark.asyncio
async def test_task_id_redraws_on_collision(db_session, mocker):
    db_session.add(Task(id=12345, task_type=TaskType.WORK))
    await db_session.commit()

    randint = mocker.patch("backend.app.services.identity.random.randint", side_effect=[12345, 54321])

    assert await generate_task_id(db_session) == 54321
    assert randint.call_count == 2


@pytest.mark.asyncio
async def test_task_id_gives_up_after_bounded_attempts(db_session, mocker):
    db_session.add(Task(id=12345, task_type=TaskType.WORK))
    await db_session.commit()

    randint = mocker.patch("backend.app.services.identity.random.randint", return_value=12345)

    with pytest.raises(IdentifierExhaustedError):
        await generate_task_id(db_session)
    assert randint.call_count == settings.task_id_max_attempts


def test_every_task_type_has_a_handler():
    assert set(TASK_HANDLERS) == set(TaskType)


def test_only_transport_has_a_satellite_handler():
    assert isinstance(get_task_handler(TaskType.TRANSPORT), TransportTaskHandler)
    for task_type in TaskType:
        if task_type != TaskType.TRANSPORT:
            assert isinstance(get_task_handler(task_type), NoSatelliteHandler)


def test_handler_must_implement_both_paths():
    class CreateOnlyHandler(TaskTypeHandler):
        async def create_satellite(self, db, task_id, data):
            return None

    with pytest.raises(TypeError):
        TaskTypeHandler()
    with pytest.raises(TypeError):
        CreateOnlyHandler()


def test_handler_lookup_accepts_raw_values():
    assert get_task_handler("TRANSPORT") is TASK_HANDLERS[TaskType.TRANSPORT]
    with pytest.raises(ValueError):
        get_task_handler("DELIVERY")


@pytest.mark.asyncio
async def test_no_satellite_handler_returns_nothing(db_session):
    handler = get_task_handler(TaskType.MAINTENANCE)
    data = {"transport_type": "WORKER_TRANSPORT", "workers": [1]}

    assert await handler.create_satellite(db_session, 10001, data) is None
    assert await handler.update_satellite(db_session, 10001, data) is None
