"""FastAPI entrypoint for the cleaning rota service."""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import date

from fastapi import Depends, FastAPI, Header, HTTPException, Query, status
from sqlalchemy.orm import Session

from . import db
from .db import Base, get_session
from .errors import (
    GenerationFailed,
    IllegalTransition,
    InvalidRange,
    NoEligibleWorkers,
    RepositoryUnavailable,
    RotaError,
    UnknownAssignment,
    UnknownLevel,
    UnknownRoom,
    UnknownTask,
    UnknownWorker,
)
from .models import Assignment, Room, Worker
from .repository import SqlRepository
from .schemas import (
    AssignmentResponse,
    AvailabilityResponse,
    AvailableResponse,
    CleaningLevelResponse,
    DayOffRequest,
    GenerateRequest,
    GenerationResponse,
    OperationResponse,
    RoomCreateRequest,
    RoomResponse,
    RotationSummaryResponse,
    TaskLevelRequest,
    TasksResponse,
    TransitionRequest,
    WorkerAssignmentsResponse,
    WorkerResponse,
    WorkersSyncRequest,
    WorkersSyncResponse,
)
from .services import availability, board, generator, lifecycle, rooms, rotation
from .services.workers import list_workers, sync_workers
from .settings import settings


_STATUS_BY_ERROR: dict[type[RotaError], int] = {
    UnknownWorker: status.HTTP_404_NOT_FOUND,
    UnknownRoom: status.HTTP_404_NOT_FOUND,
    UnknownTask: status.HTTP_404_NOT_FOUND,
    UnknownAssignment: status.HTTP_404_NOT_FOUND,
    UnknownLevel: status.HTTP_400_BAD_REQUEST,
    InvalidRange: status.HTTP_400_BAD_REQUEST,
    IllegalTransition: status.HTTP_409_CONFLICT,
    NoEligibleWorkers: status.HTTP_409_CONFLICT,
    GenerationFailed: status.HTTP_503_SERVICE_UNAVAILABLE,
    RepositoryUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _http_error(exc: RotaError) -> HTTPException:
    code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return HTTPException(status_code=code, detail=str(exc))


@asynccontextmanager
async def lifespan(_app: FastAPI):
    db.configure_engine()
    db.ensure_db_dir()
    assert db.engine is not None
    Base.metadata.create_all(bind=db.engine)
    assert db.SessionLocal is not None
    with db.SessionLocal() as session:
        board.ensure_cleaning_levels(session)
    yield


app = FastAPI(title="cleaning-rota-service", version="0.1.0", lifespan=lifespan)


def require_token(x_rota_token: str | None = Header(default=None)) -> None:
    if x_rota_token != settings.api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


def get_repository(session: Session = Depends(get_session)) -> SqlRepository:
    return SqlRepository(session)


def _worker_response(row: Worker) -> WorkerResponse:
    return WorkerResponse(
        id=row.id,
        display_name=row.display_name,
        user_id=row.user_id,
        role=row.role.value,
        active=row.active,
    )


def _room_response(row: Room) -> RoomResponse:
    return RoomResponse(
        id=row.id,
        name=row.name,
        is_harvest=row.is_harvest,
        crew_size=row.crew_size,
        active=row.active,
    )


def _assignment_response(row: Assignment) -> AssignmentResponse:
    return AssignmentResponse(
        id=row.id,
        task_id=row.task_id,
        worker_id=row.worker_id,
        status=row.status.value,
        started_at=row.started_at,
        completed_at=row.completed_at,
    )


@app.get("/health")
def health() -> dict:
    return {"ok": True}


@app.get("/v1/workers", response_model=list[WorkerResponse], dependencies=[Depends(require_token)])
def get_workers(session: Session = Depends(get_session)) -> list[WorkerResponse]:
    try:
        rows = list_workers(session)
    except RotaError as exc:
        raise _http_error(exc) from exc
    return [_worker_response(row) for row in rows]


@app.put("/v1/workers/sync", response_model=WorkersSyncResponse, dependencies=[Depends(require_token)])
def put_workers_sync(
    payload: WorkersSyncRequest,
    session: Session = Depends(get_session),
) -> WorkersSyncResponse:
    rows, deactivated_worker_ids = sync_workers(session, payload.workers)
    return WorkersSyncResponse(
        workers=[_worker_response(row) for row in rows],
        deactivated_worker_ids=deactivated_worker_ids,
    )


@app.get("/v1/rooms", response_model=list[RoomResponse], dependencies=[Depends(require_token)])
def get_rooms(
    include_inactive: bool = Query(default=False),
    session: Session = Depends(get_session),
) -> list[RoomResponse]:
    return [_room_response(row) for row in rooms.list_rooms(session, include_inactive=include_inactive)]


@app.post("/v1/rooms", response_model=RoomResponse, dependencies=[Depends(require_token)])
def post_room(
    payload: RoomCreateRequest,
    session: Session = Depends(get_session),
) -> RoomResponse:
    room = rooms.create_room(
        session,
        payload.name,
        is_harvest=payload.is_harvest,
        crew_size=payload.crew_size,
    )
    return _room_response(room)


@app.post(
    "/v1/rooms/{room_id}/deactivate",
    response_model=OperationResponse,
    dependencies=[Depends(require_token)],
)
def post_room_deactivate(room_id: int, session: Session = Depends(get_session)) -> OperationResponse:
    try:
        room = rooms.deactivate_room(session, room_id)
    except RotaError as exc:
        raise _http_error(exc) from exc
    return OperationResponse(ok=True, id=room.id)


@app.get("/v1/levels", response_model=list[CleaningLevelResponse], dependencies=[Depends(require_token)])
def get_levels(repo: SqlRepository = Depends(get_repository)) -> list[CleaningLevelResponse]:
    try:
        levels = repo.list_levels()
    except RotaError as exc:
        raise _http_error(exc) from exc
    return [CleaningLevelResponse(id=level.id, code=level.code.value) for level in levels]


@app.get(
    "/v1/workers/{worker_id}/availability",
    response_model=AvailabilityResponse,
    dependencies=[Depends(require_token)],
)
def get_worker_availability(
    worker_id: int,
    repo: SqlRepository = Depends(get_repository),
) -> AvailabilityResponse:
    try:
        days = availability.weekly_availability(repo, worker_id)
    except RotaError as exc:
        raise _http_error(exc) from exc
    return AvailabilityResponse(worker_id=worker_id, days=days)


@app.put(
    "/v1/workers/{worker_id}/availability/{weekday}",
    response_model=OperationResponse,
    dependencies=[Depends(require_token)],
)
def put_worker_day_off(
    worker_id: int,
    weekday: int,
    payload: DayOffRequest,
    repo: SqlRepository = Depends(get_repository),
) -> OperationResponse:
    try:
        rule = availability.set_day_off(repo, worker_id, weekday, payload.is_off)
    except RotaError as exc:
        raise _http_error(exc) from exc
    return OperationResponse(ok=True, id=rule.id)


@app.delete(
    "/v1/workers/{worker_id}/availability/{weekday}",
    response_model=OperationResponse,
    dependencies=[Depends(require_token)],
)
def delete_worker_day_off(
    worker_id: int,
    weekday: int,
    repo: SqlRepository = Depends(get_repository),
) -> OperationResponse:
    try:
        availability.clear_day_off(repo, worker_id, weekday)
    except RotaError as exc:
        raise _http_error(exc) from exc
    return OperationResponse(ok=True)


@app.get(
    "/v1/workers/{worker_id}/available",
    response_model=AvailableResponse,
    dependencies=[Depends(require_token)],
)
def get_worker_available(
    worker_id: int,
    on: date = Query(...),
    repo: SqlRepository = Depends(get_repository),
) -> AvailableResponse:
    try:
        available = availability.is_available(repo, worker_id, on)
    except RotaError as exc:
        raise _http_error(exc) from exc
    return AvailableResponse(worker_id=worker_id, on=on, available=available)


@app.post("/v1/generate", response_model=GenerationResponse, dependencies=[Depends(require_token)])
def post_generate(
    payload: GenerateRequest,
    repo: SqlRepository = Depends(get_repository),
) -> GenerationResponse:
    try:
        result = generator.generate(repo, payload.task_date)
    except RotaError as exc:
        raise _http_error(exc) from exc
    return GenerationResponse(
        task_date=result.task_date,
        tasks_created=result.tasks_created,
        assignments_created=result.assignments_created,
        skipped_room_ids=result.skipped_room_ids,
    )


@app.get("/v1/tasks", response_model=TasksResponse, dependencies=[Depends(require_token)])
def get_tasks(
    on: date = Query(...),
    repo: SqlRepository = Depends(get_repository),
) -> TasksResponse:
    try:
        tasks = board.tasks_for_date(repo, on)
    except RotaError as exc:
        raise _http_error(exc) from exc
    return TasksResponse(tasks=tasks)


@app.put(
    "/v1/tasks/{task_id}/level",
    response_model=OperationResponse,
    dependencies=[Depends(require_token)],
)
def put_task_level(
    task_id: int,
    payload: TaskLevelRequest,
    repo: SqlRepository = Depends(get_repository),
) -> OperationResponse:
    try:
        task = board.update_task_level(repo, task_id, payload.level.value)
    except RotaError as exc:
        raise _http_error(exc) from exc
    return OperationResponse(ok=True, id=task.id)


@app.get(
    "/v1/workers/{worker_id}/assignments",
    response_model=WorkerAssignmentsResponse,
    dependencies=[Depends(require_token)],
)
def get_worker_assignments(
    worker_id: int,
    on: date = Query(...),
    repo: SqlRepository = Depends(get_repository),
) -> WorkerAssignmentsResponse:
    try:
        rows = board.worker_assignments(repo, worker_id, on)
    except RotaError as exc:
        raise _http_error(exc) from exc
    return WorkerAssignmentsResponse(assignments=rows)


@app.post(
    "/v1/assignments/{assignment_id}/transition",
    response_model=AssignmentResponse,
    dependencies=[Depends(require_token)],
)
def post_assignment_transition(
    assignment_id: int,
    payload: TransitionRequest,
    repo: SqlRepository = Depends(get_repository),
) -> AssignmentResponse:
    try:
        assignment = lifecycle.transition(repo, assignment_id, payload.status)
    except RotaError as exc:
        raise _http_error(exc) from exc
    return _assignment_response(assignment)


@app.get(
    "/v1/rotation/summary",
    response_model=RotationSummaryResponse,
    dependencies=[Depends(require_token)],
)
def get_rotation_summary(
    start: date = Query(...),
    end: date = Query(...),
    repo: SqlRepository = Depends(get_repository),
) -> RotationSummaryResponse:
    try:
        workers = rotation.summarize(repo, start, end)
    except RotaError as exc:
        raise _http_error(exc) from exc
    return RotationSummaryResponse(start=start, end=end, workers=workers)


@app.get(
    "/v1/rotation/week",
    response_model=RotationSummaryResponse,
    dependencies=[Depends(require_token)],
)
def get_rotation_week(
    anchor: date = Query(...),
    repo: SqlRepository = Depends(get_repository),
) -> RotationSummaryResponse:
    try:
        week = rotation.weekly_summary(repo, anchor)
    except RotaError as exc:
        raise _http_error(exc) from exc
    return RotationSummaryResponse(start=week["week_start"], end=week["week_end"], workers=week["workers"])
