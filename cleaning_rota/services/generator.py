"""Daily task generation and worker rotation.

For one date, every active room without a task gets exactly one task and its
crew of workers. Workers are picked greedily by lowest assignment count in the
ISO week containing the date, ties broken by display name then id. Each pick
bumps the in-memory counter so later rooms in the same run see the new
balance. Harvest rooms take a crew of distinct workers.

The whole run is one unit of work holding the store write lock, so a
concurrent run waits and then finds the rooms already covered. A room that
another writer covered anyway fails its unique (room, date) insert inside a
savepoint and is skipped; any other storage failure rolls everything back.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..errors import GenerationFailed, NoEligibleWorkers, RotaError, UnknownLevel
from ..models import Room, Worker
from ..repository import Repository
from ..services.availability import is_off_on, off_days
from ..services.time_utils import iso_week_bounds
from ..settings import settings


_LOGGER = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    task_date: date
    tasks_created: int = 0
    assignments_created: int = 0
    skipped_room_ids: list[int] = field(default_factory=list)


def _rank_key(worker: Worker, loads: Counter[int]) -> tuple[int, str, int]:
    return (loads[worker.id], worker.display_name.casefold(), worker.id)


def select_crew(eligible: list[Worker], loads: Counter[int], size: int) -> list[Worker]:
    """Pick ``size`` distinct workers with the lowest load."""

    return sorted(eligible, key=lambda worker: _rank_key(worker, loads))[:size]


def crew_size_for(room: Room, harvest_default: int) -> int:
    if not room.is_harvest:
        return 1
    return max(1, room.crew_size or harvest_default)


def weekly_loads(repo: Repository, day: date) -> Counter[int]:
    """Assignment count per worker in the Monday..Sunday week containing ``day``."""

    start, end = iso_week_bounds(day)
    return Counter(assignment.worker_id for assignment in repo.list_assignments(start, end))


def _eligible_workers(repo: Repository, workers: list[Worker], day: date) -> list[Worker]:
    days_off = off_days(repo.get_availability_rules([worker.id for worker in workers]))
    return [worker for worker in workers if not is_off_on(days_off, worker.id, day)]


def generate(
    repo: Repository,
    day: date,
    *,
    harvest_crew_size: int | None = None,
    default_level_code: str | None = None,
) -> GenerationResult:
    """Create the tasks and assignments for ``day``; re-running is a no-op."""

    harvest_default = harvest_crew_size or settings.harvest_crew_size
    level_code = default_level_code or settings.default_level_code
    result = GenerationResult(task_date=day)

    try:
        with repo.unit_of_work(immediate=True):
            pending = [room for room in repo.list_active_rooms() if repo.find_task(room.id, day) is None]
            if not pending:
                _LOGGER.info("All active rooms already covered for %s", day.isoformat())
                return result

            workers = repo.list_active_workers()
            if not workers:
                _LOGGER.warning("No active workers; nothing generated for %s", day.isoformat())
                return result

            eligible = _eligible_workers(repo, workers, day)
            if not eligible:
                raise NoEligibleWorkers(f"no worker is available on {day.isoformat()}")

            default_level = repo.get_level_by_code(level_code)
            if default_level is None:
                raise UnknownLevel(level_code)

            loads = weekly_loads(repo, day)

            for room in pending:
                size = crew_size_for(room, harvest_default)
                if size > len(eligible):
                    _LOGGER.warning(
                        "Room %s wants a crew of %s but only %s workers are available",
                        room.name,
                        size,
                        len(eligible),
                    )
                crew = select_crew(eligible, loads, size)
                level_id = repo.latest_task_level(room.id, day) or default_level.id

                try:
                    with repo.savepoint():
                        task = repo.create_task(room, day, level_id, room.is_harvest)
                        for worker in crew:
                            repo.create_assignment(task.id, worker.id)
                except IntegrityError:
                    _LOGGER.warning(
                        "Room %s was covered concurrently for %s; skipping",
                        room.name,
                        day.isoformat(),
                    )
                    result.skipped_room_ids.append(room.id)
                    continue

                for worker in crew:
                    loads[worker.id] += 1
                result.tasks_created += 1
                result.assignments_created += len(crew)
    except RotaError:
        raise
    except SQLAlchemyError as exc:
        _LOGGER.exception("Generation for %s rolled back", day.isoformat())
        raise GenerationFailed(f"generation for {day.isoformat()} failed; nothing was saved") from exc

    _LOGGER.info(
        "Generated %s tasks and %s assignments for %s",
        result.tasks_created,
        result.assignments_created,
        day.isoformat(),
    )
    return result
