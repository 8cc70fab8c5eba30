"""Assignment status state machine."""

from __future__ import annotations

import logging
from datetime import datetime

from ..errors import IllegalTransition, RepositoryUnavailable, UnknownAssignment
from ..models import Assignment, AssignmentStatus
from ..repository import Repository
from ..services.time_utils import now_utc


_LOGGER = logging.getLogger(__name__)

# Legal forward moves. Same-state requests are accepted as no-ops.
TRANSITIONS: dict[AssignmentStatus, frozenset[AssignmentStatus]] = {
    AssignmentStatus.NOT_STARTED: frozenset({AssignmentStatus.IN_PROGRESS, AssignmentStatus.COMPLETED}),
    AssignmentStatus.IN_PROGRESS: frozenset({AssignmentStatus.COMPLETED}),
    AssignmentStatus.COMPLETED: frozenset(),
}

_MAX_ATTEMPTS = len(TRANSITIONS)


def can_transition(current: AssignmentStatus, target: AssignmentStatus) -> bool:
    return target == current or target in TRANSITIONS[current]


def transition(
    repo: Repository,
    assignment_id: int,
    target: AssignmentStatus | str,
    *,
    at: datetime | None = None,
) -> Assignment:
    """Move an assignment forward, stamping started_at/completed_at once.

    The write is a compare-and-set on the status read; when another session
    moved the assignment in between, the rules are re-checked against the
    fresh status.
    """

    target = AssignmentStatus(target)

    for _ in range(_MAX_ATTEMPTS):
        with repo.unit_of_work():
            assignment = repo.get_assignment(assignment_id)
            if assignment is None:
                raise UnknownAssignment(assignment_id)

            current = assignment.status
            if target == current:
                return assignment
            if not can_transition(current, target):
                raise IllegalTransition(current.value, target.value)

            moment = at or now_utc()
            started_at = assignment.started_at
            completed_at = assignment.completed_at
            if target == AssignmentStatus.IN_PROGRESS and started_at is None:
                started_at = moment
            if target == AssignmentStatus.COMPLETED and completed_at is None:
                completed_at = moment

            swapped = repo.update_assignment_status(
                assignment_id,
                expected=current,
                status=target,
                started_at=started_at,
                completed_at=completed_at,
            )

        if swapped:
            _LOGGER.info("Assignment %s moved %s -> %s", assignment_id, current.value, target.value)
            return repo.get_assignment(assignment_id)

        _LOGGER.debug("Assignment %s changed concurrently; re-checking", assignment_id)

    raise RepositoryUnavailable(f"assignment {assignment_id} kept changing; retry later")
