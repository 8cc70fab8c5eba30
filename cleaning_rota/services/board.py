"""Daily task board: levels, tasks with assignees, and per-worker views."""

from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..errors import UnknownLevel, UnknownTask, UnknownWorker
from ..models import Assignment, CleaningLevel, LevelCode, Task
from ..repository import Repository


def ensure_cleaning_levels(session: Session) -> list[CleaningLevel]:
    """Seed L1..L3 when missing."""

    existing = {
        level.code for level in session.execute(select(CleaningLevel)).scalars().all()
    }
    for code in LevelCode:
        if code not in existing:
            session.add(CleaningLevel(code=code))
    session.commit()
    return session.execute(select(CleaningLevel).order_by(CleaningLevel.code.asc())).scalars().all()


def _task_row(task: Task) -> dict:
    return {
        "id": task.id,
        "task_date": task.task_date,
        "room_id": task.room_id,
        "room_name": task.room.name,
        "cleaning_level": task.cleaning_level.code.value,
        "cleaning_level_id": task.cleaning_level_id,
        "is_harvest_shift": task.is_harvest_shift,
        "assignees": [
            {
                "assignment_id": assignment.id,
                "worker_id": assignment.worker_id,
                "worker_name": assignment.worker.display_name,
                "status": assignment.status.value,
            }
            for assignment in task.assignments
        ],
    }


def tasks_for_date(repo: Repository, day: date) -> list[dict]:
    return [_task_row(task) for task in repo.list_tasks(day)]


def update_task_level(repo: Repository, task_id: int, level_code: str) -> Task:
    with repo.unit_of_work():
        level = repo.get_level_by_code(level_code)
        if level is None:
            raise UnknownLevel(level_code)
        task = repo.update_task_level(task_id, level.id)
        if task is None:
            raise UnknownTask(task_id)
    return task


def _assignment_row(assignment: Assignment) -> dict:
    return {
        "assignment_id": assignment.id,
        "task_id": assignment.task_id,
        "task_date": assignment.task.task_date,
        "room_name": assignment.task.room.name,
        "cleaning_level": assignment.task.cleaning_level.code.value,
        "is_harvest_shift": assignment.task.is_harvest_shift,
        "status": assignment.status.value,
        "started_at": assignment.started_at,
        "completed_at": assignment.completed_at,
    }


def worker_assignments(repo: Repository, worker_id: int, day: date) -> list[dict]:
    if repo.get_worker(worker_id) is None:
        raise UnknownWorker(worker_id)
    return [_assignment_row(assignment) for assignment in repo.list_worker_assignments(worker_id, day)]
