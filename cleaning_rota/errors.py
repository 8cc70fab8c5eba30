"""Error kinds raised by the rota services."""

from __future__ import annotations


class RotaError(Exception):
    """Base class for rota service failures."""


class UnknownWorker(RotaError):
    def __init__(self, worker_id: int) -> None:
        super().__init__(f"worker {worker_id} not found")
        self.worker_id = worker_id


class UnknownRoom(RotaError):
    def __init__(self, room_id: int) -> None:
        super().__init__(f"room {room_id} not found")
        self.room_id = room_id


class UnknownTask(RotaError):
    def __init__(self, task_id: int) -> None:
        super().__init__(f"task {task_id} not found")
        self.task_id = task_id


class UnknownAssignment(RotaError):
    def __init__(self, assignment_id: int) -> None:
        super().__init__(f"assignment {assignment_id} not found")
        self.assignment_id = assignment_id


class UnknownLevel(RotaError):
    def __init__(self, code: str) -> None:
        super().__init__(f"cleaning level {code!r} not found")
        self.code = code


class InvalidRange(RotaError):
    """End date precedes start date, or a weekday is outside 0..6."""


class NoEligibleWorkers(RotaError):
    """Every active worker is off on the requested date."""


class IllegalTransition(RotaError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"cannot move assignment from {current} to {target}")
        self.current = current
        self.target = target


class GenerationFailed(RotaError):
    """A storage write failed mid-run; the whole run was rolled back."""


class RepositoryUnavailable(RotaError):
    """The store timed out or is locked; safe to retry."""
