"""Seeding helpers shared by service-level tests."""

from __future__ import annotations

from cleaning_rota.models import AvailabilityRule, Room, Worker, WorkerRole


def add_rooms(session, *entries) -> list[Room]:
    """Each entry is a name, or a (name, crew_size) tuple for a harvest room."""

    rooms = []
    for entry in entries:
        if isinstance(entry, tuple):
            name, crew_size = entry
            room = Room(name=name, is_harvest=True, crew_size=crew_size)
        else:
            room = Room(name=entry)
        session.add(room)
        rooms.append(room)
    session.commit()
    return rooms


def add_workers(session, *names: str, role: WorkerRole = WorkerRole.WORKER) -> list[Worker]:
    workers = [Worker(display_name=name, role=role) for name in names]
    session.add_all(workers)
    session.commit()
    return workers


def add_day_off(session, worker: Worker, weekday: int) -> None:
    session.add(AvailabilityRule(worker_id=worker.id, weekday=weekday, is_off=True))
    session.commit()
