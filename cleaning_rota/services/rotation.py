"""Read-only rotation summaries for fairness auditing."""

from __future__ import annotations

from collections import defaultdict
from datetime import date

from ..errors import InvalidRange
from ..repository import Repository
from ..services.time_utils import iso_week_bounds


def summarize(repo: Repository, start: date, end: date) -> list[dict]:
    """Per-worker totals and rooms per date for tasks dated within [start, end].

    Every active worker is listed, including those with no assignments.
    Workers no longer active still show up when they hold assignments in the
    range. Rows are ordered by display name.
    """

    if end < start:
        raise InvalidRange(f"end {end.isoformat()} is before start {start.isoformat()}")

    rows: dict[int, dict] = {}
    per_date: dict[int, dict[date, list[str]]] = defaultdict(lambda: defaultdict(list))

    for worker in repo.list_active_workers():
        rows[worker.id] = {
            "worker_id": worker.id,
            "display_name": worker.display_name,
            "total_assignments": 0,
        }

    for assignment in repo.list_assignments(start, end):
        row = rows.get(assignment.worker_id)
        if row is None:
            row = rows[assignment.worker_id] = {
                "worker_id": assignment.worker_id,
                "display_name": assignment.worker.display_name,
                "total_assignments": 0,
            }
        row["total_assignments"] += 1
        per_date[assignment.worker_id][assignment.task.task_date].append(assignment.task.room.name)

    summary = []
    for worker_id, row in rows.items():
        row["per_date"] = [
            {"task_date": day, "count": len(room_names), "rooms": sorted(set(room_names))}
            for day, room_names in sorted(per_date[worker_id].items())
        ]
        summary.append(row)

    summary.sort(key=lambda row: (row["display_name"].casefold(), row["worker_id"]))
    return summary


def daily_summary(repo: Repository, day: date) -> list[dict]:
    return summarize(repo, day, day)


def weekly_summary(repo: Repository, anchor: date) -> dict:
    start, end = iso_week_bounds(anchor)
    return {"week_start": start, "week_end": end, "workers": summarize(repo, start, end)}
