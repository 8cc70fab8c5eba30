"""Storage access for rota services.

Services talk to the store through the ``Repository`` protocol so the
scheduling logic never issues SQL itself. ``SqlRepository`` is the
SQLAlchemy-backed implementation used by the HTTP service and the tests.

Single-row operations only flush; multi-row atomicity is orchestrated by the
caller through ``unit_of_work()`` and ``savepoint()``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import AbstractContextManager, contextmanager
from datetime import date, datetime
from typing import Protocol

from sqlalchemy import delete, select, update
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, joinedload

from .errors import RepositoryUnavailable
from .models import (
    Assignment,
    AssignmentStatus,
    AvailabilityRule,
    CleaningLevel,
    LevelCode,
    Room,
    Task,
    Worker,
    WorkerRole,
)


_LOGGER = logging.getLogger(__name__)


class Repository(Protocol):
    def unit_of_work(self, *, immediate: bool = False) -> AbstractContextManager[Repository]: ...

    def savepoint(self) -> AbstractContextManager[None]: ...

    def list_active_rooms(self) -> list[Room]: ...

    def list_active_workers(self) -> list[Worker]: ...

    def get_worker(self, worker_id: int) -> Worker | None: ...

    def get_room(self, room_id: int) -> Room | None: ...

    def get_task(self, task_id: int) -> Task | None: ...

    def get_assignment(self, assignment_id: int) -> Assignment | None: ...

    def list_levels(self) -> list[CleaningLevel]: ...

    def get_level_by_code(self, code: str) -> CleaningLevel | None: ...

    def get_availability_rules(self, worker_ids: Iterable[int]) -> list[AvailabilityRule]: ...

    def upsert_availability_rule(self, worker_id: int, weekday: int, is_off: bool) -> AvailabilityRule: ...

    def delete_availability_rule(self, worker_id: int, weekday: int) -> bool: ...

    def find_task(self, room_id: int, task_date: date) -> Task | None: ...

    def list_tasks(self, task_date: date) -> list[Task]: ...

    def latest_task_level(self, room_id: int, before: date) -> int | None: ...

    def create_task(self, room: Room, task_date: date, level_id: int, is_harvest: bool) -> Task: ...

    def update_task_level(self, task_id: int, level_id: int) -> Task | None: ...

    def create_assignment(self, task_id: int, worker_id: int) -> Assignment: ...

    def update_assignment_status(
        self,
        assignment_id: int,
        *,
        expected: AssignmentStatus,
        status: AssignmentStatus,
        started_at: datetime | None,
        completed_at: datetime | None,
    ) -> bool: ...

    def list_assignments(self, start: date, end: date) -> list[Assignment]: ...

    def list_worker_assignments(self, worker_id: int, task_date: date) -> list[Assignment]: ...


@contextmanager
def storage_errors() -> Iterator[None]:
    try:
        yield
    except OperationalError as exc:
        _LOGGER.warning("Store unavailable: %s", exc.orig)
        raise RepositoryUnavailable(str(exc.orig)) from exc


class SqlRepository:
    """Repository backed by a SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    @contextmanager
    def unit_of_work(self, *, immediate: bool = False) -> Iterator[SqlRepository]:
        """Commit everything done inside the block, or nothing.

        With ``immediate`` the write lock is taken before the first read, so
        concurrent writers queue behind each other for up to the store timeout
        and then see each other's committed rows.
        """

        try:
            if immediate and not self.session.in_transaction():
                with storage_errors():
                    self.session.connection(execution_options={"sqlite_begin": "IMMEDIATE"})
            yield self
            with storage_errors():
                self.session.commit()
        except BaseException:
            self.session.rollback()
            raise

    @contextmanager
    def savepoint(self) -> Iterator[None]:
        with storage_errors():
            nested = self.session.begin_nested()
        try:
            yield
        except BaseException:
            nested.rollback()
            raise
        with storage_errors():
            nested.commit()

    def list_active_rooms(self) -> list[Room]:
        with storage_errors():
            return list(
                self.session.execute(
                    select(Room).where(Room.active.is_(True)).order_by(Room.id.asc())
                ).scalars()
            )

    def list_active_workers(self) -> list[Worker]:
        """Active schedulable workers; admins are never returned."""

        with storage_errors():
            return list(
                self.session.execute(
                    select(Worker)
                    .where(Worker.active.is_(True), Worker.role == WorkerRole.WORKER)
                    .order_by(Worker.display_name.asc(), Worker.id.asc())
                ).scalars()
            )

    def get_worker(self, worker_id: int) -> Worker | None:
        with storage_errors():
            return self.session.get(Worker, worker_id)

    def get_room(self, room_id: int) -> Room | None:
        with storage_errors():
            return self.session.get(Room, room_id)

    def get_task(self, task_id: int) -> Task | None:
        with storage_errors():
            return self.session.get(Task, task_id)

    def get_assignment(self, assignment_id: int) -> Assignment | None:
        with storage_errors():
            return self.session.get(Assignment, assignment_id, populate_existing=True)

    def list_levels(self) -> list[CleaningLevel]:
        with storage_errors():
            return list(
                self.session.execute(select(CleaningLevel).order_by(CleaningLevel.code.asc())).scalars()
            )

    def get_level_by_code(self, code: str) -> CleaningLevel | None:
        try:
            level_code = LevelCode(code)
        except ValueError:
            return None
        with storage_errors():
            return self.session.execute(
                select(CleaningLevel).where(CleaningLevel.code == level_code)
            ).scalar_one_or_none()

    def get_availability_rules(self, worker_ids: Iterable[int]) -> list[AvailabilityRule]:
        ids = list(worker_ids)
        if not ids:
            return []
        with storage_errors():
            return list(
                self.session.execute(
                    select(AvailabilityRule).where(AvailabilityRule.worker_id.in_(ids))
                ).scalars()
            )

    def upsert_availability_rule(self, worker_id: int, weekday: int, is_off: bool) -> AvailabilityRule:
        with storage_errors():
            rule = self.session.execute(
                select(AvailabilityRule).where(
                    AvailabilityRule.worker_id == worker_id,
                    AvailabilityRule.weekday == weekday,
                )
            ).scalar_one_or_none()
            if rule is None:
                rule = AvailabilityRule(worker_id=worker_id, weekday=weekday, is_off=is_off)
                self.session.add(rule)
            else:
                rule.is_off = is_off
            self.session.flush()
        return rule

    def delete_availability_rule(self, worker_id: int, weekday: int) -> bool:
        with storage_errors():
            result = self.session.execute(
                delete(AvailabilityRule).where(
                    AvailabilityRule.worker_id == worker_id,
                    AvailabilityRule.weekday == weekday,
                )
            )
        return result.rowcount > 0

    def find_task(self, room_id: int, task_date: date) -> Task | None:
        with storage_errors():
            return self.session.execute(
                select(Task).where(Task.room_id == room_id, Task.task_date == task_date)
            ).scalar_one_or_none()

    def list_tasks(self, task_date: date) -> list[Task]:
        with storage_errors():
            return list(
                self.session.execute(
                    select(Task)
                    .where(Task.task_date == task_date)
                    .options(
                        joinedload(Task.room),
                        joinedload(Task.cleaning_level),
                        joinedload(Task.assignments).joinedload(Assignment.worker),
                    )
                    .order_by(Task.id.asc())
                ).unique().scalars()
            )

    def latest_task_level(self, room_id: int, before: date) -> int | None:
        with storage_errors():
            return self.session.execute(
                select(Task.cleaning_level_id)
                .where(Task.room_id == room_id, Task.task_date < before)
                .order_by(Task.task_date.desc())
                .limit(1)
            ).scalar_one_or_none()

    def create_task(self, room: Room, task_date: date, level_id: int, is_harvest: bool) -> Task:
        task = Task(
            task_date=task_date,
            room_id=room.id,
            cleaning_level_id=level_id,
            is_harvest_shift=is_harvest,
        )
        self.session.add(task)
        with storage_errors():
            self.session.flush()
        return task

    def update_task_level(self, task_id: int, level_id: int) -> Task | None:
        task = self.get_task(task_id)
        if task is None:
            return None
        task.cleaning_level_id = level_id
        with storage_errors():
            self.session.flush()
        return task

    def create_assignment(self, task_id: int, worker_id: int) -> Assignment:
        assignment = Assignment(task_id=task_id, worker_id=worker_id, status=AssignmentStatus.NOT_STARTED)
        self.session.add(assignment)
        with storage_errors():
            self.session.flush()
        return assignment

    def update_assignment_status(
        self,
        assignment_id: int,
        *,
        expected: AssignmentStatus,
        status: AssignmentStatus,
        started_at: datetime | None,
        completed_at: datetime | None,
    ) -> bool:
        """Compare-and-set: only writes when the stored status still equals ``expected``."""

        with storage_errors():
            result = self.session.execute(
                update(Assignment)
                .where(Assignment.id == assignment_id, Assignment.status == expected)
                .values(status=status, started_at=started_at, completed_at=completed_at)
                .execution_options(synchronize_session="fetch")
            )
        return result.rowcount == 1

    def list_assignments(self, start: date, end: date) -> list[Assignment]:
        with storage_errors():
            return list(
                self.session.execute(
                    select(Assignment)
                    .join(Task, Assignment.task_id == Task.id)
                    .where(Task.task_date >= start, Task.task_date <= end)
                    .options(
                        joinedload(Assignment.task).joinedload(Task.room),
                        joinedload(Assignment.worker),
                    )
                    .order_by(Assignment.id.asc())
                ).scalars()
            )

    def list_worker_assignments(self, worker_id: int, task_date: date) -> list[Assignment]:
        with storage_errors():
            return list(
                self.session.execute(
                    select(Assignment)
                    .join(Task, Assignment.task_id == Task.id)
                    .where(Assignment.worker_id == worker_id, Task.task_date == task_date)
                    .options(
                        joinedload(Assignment.task).joinedload(Task.room),
                        joinedload(Assignment.task).joinedload(Task.cleaning_level),
                    )
                    .order_by(Assignment.id.asc())
                ).scalars()
            )
