"""Worker availability: recurring weekly days off."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date

from ..errors import InvalidRange, UnknownWorker
from ..models import AvailabilityRule, Worker, WorkerRole
from ..repository import Repository
from ..services.time_utils import weekday_index


_LOGGER = logging.getLogger(__name__)

WEEKDAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def off_days(rules: Iterable[AvailabilityRule]) -> dict[tuple[int, int], bool]:
    """Map (worker_id, weekday) to is_off; missing keys mean available."""

    return {(rule.worker_id, rule.weekday): bool(rule.is_off) for rule in rules}


def is_off_on(days_off: dict[tuple[int, int], bool], worker_id: int, day: date) -> bool:
    return days_off.get((worker_id, weekday_index(day)), False)


def _require_worker(repo: Repository, worker_id: int) -> Worker:
    worker = repo.get_worker(worker_id)
    if worker is None:
        raise UnknownWorker(worker_id)
    return worker


def _ensure_weekday(weekday: int) -> None:
    if not 0 <= weekday <= 6:
        raise InvalidRange("weekday must be between 0 (Sunday) and 6 (Saturday)")


def is_available(repo: Repository, worker_id: int, day: date) -> bool:
    """True unless the worker has an off-day rule for the weekday of ``day``.

    Inactive workers and admins are never available.
    """

    worker = _require_worker(repo, worker_id)
    if not worker.active or worker.role == WorkerRole.ADMIN:
        return False
    return not is_off_on(off_days(repo.get_availability_rules([worker_id])), worker_id, day)


def weekly_availability(repo: Repository, worker_id: int) -> list[dict]:
    _require_worker(repo, worker_id)
    days_off = off_days(repo.get_availability_rules([worker_id]))
    return [
        {
            "weekday": weekday,
            "label": label,
            "is_off": days_off.get((worker_id, weekday), False),
        }
        for weekday, label in enumerate(WEEKDAY_LABELS)
    ]


def set_day_off(repo: Repository, worker_id: int, weekday: int, is_off: bool) -> AvailabilityRule:
    _ensure_weekday(weekday)
    with repo.unit_of_work():
        _require_worker(repo, worker_id)
        rule = repo.upsert_availability_rule(worker_id, weekday, is_off)
    _LOGGER.info("Worker %s %s on %s", worker_id, "off" if is_off else "available", WEEKDAY_LABELS[weekday])
    return rule


def clear_day_off(repo: Repository, worker_id: int, weekday: int) -> bool:
    _ensure_weekday(weekday)
    with repo.unit_of_work():
        _require_worker(repo, worker_id)
        return repo.delete_availability_rule(worker_id, weekday)
