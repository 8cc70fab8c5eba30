"""Pydantic schemas for API contracts."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

from .models import AssignmentStatus, LevelCode, WorkerRole


class WorkerSyncItem(BaseModel):
    display_name: str = Field(min_length=1, max_length=120)
    user_id: str | None = None
    role: WorkerRole = WorkerRole.WORKER
    active: bool = True


class WorkersSyncRequest(BaseModel):
    workers: list[WorkerSyncItem]


class WorkerResponse(BaseModel):
    id: int
    display_name: str
    user_id: str | None
    role: str
    active: bool


class WorkersSyncResponse(BaseModel):
    workers: list[WorkerResponse]
    deactivated_worker_ids: list[int] = Field(default_factory=list)


class RoomCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    is_harvest: bool = False
    crew_size: int | None = Field(default=None, ge=1)


class RoomResponse(BaseModel):
    id: int
    name: str
    is_harvest: bool
    crew_size: int | None
    active: bool


class CleaningLevelResponse(BaseModel):
    id: int
    code: str


class DayAvailability(BaseModel):
    weekday: int
    label: str
    is_off: bool


class AvailabilityResponse(BaseModel):
    worker_id: int
    days: list[DayAvailability]


class DayOffRequest(BaseModel):
    is_off: bool = True


class AvailableResponse(BaseModel):
    worker_id: int
    on: date
    available: bool


class GenerateRequest(BaseModel):
    task_date: date


class GenerationResponse(BaseModel):
    task_date: date
    tasks_created: int
    assignments_created: int
    skipped_room_ids: list[int] = Field(default_factory=list)


class AssigneeRow(BaseModel):
    assignment_id: int
    worker_id: int
    worker_name: str
    status: str


class TaskRow(BaseModel):
    id: int
    task_date: date
    room_id: int
    room_name: str
    cleaning_level: str
    cleaning_level_id: int
    is_harvest_shift: bool
    assignees: list[AssigneeRow]


class TasksResponse(BaseModel):
    tasks: list[TaskRow]


class TaskLevelRequest(BaseModel):
    level: LevelCode


class WorkerAssignmentRow(BaseModel):
    assignment_id: int
    task_id: int
    task_date: date
    room_name: str
    cleaning_level: str
    is_harvest_shift: bool
    status: str
    started_at: datetime | None
    completed_at: datetime | None


class WorkerAssignmentsResponse(BaseModel):
    assignments: list[WorkerAssignmentRow]


class TransitionRequest(BaseModel):
    status: AssignmentStatus


class AssignmentResponse(BaseModel):
    id: int
    task_id: int
    worker_id: int
    status: str
    started_at: datetime | None
    completed_at: datetime | None


class DateRooms(BaseModel):
    task_date: date
    count: int
    rooms: list[str]


class RotationRow(BaseModel):
    worker_id: int
    display_name: str
    total_assignments: int
    per_date: list[DateRooms]


class RotationSummaryResponse(BaseModel):
    start: date
    end: date
    workers: list[RotationRow]


class OperationResponse(BaseModel):
    ok: bool = True
    id: int | None = None
