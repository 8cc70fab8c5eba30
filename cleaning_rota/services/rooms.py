"""Room management. Rooms are soft-deleted by clearing ``active``."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..errors import UnknownRoom
from ..models import Room


def create_room(session: Session, name: str, *, is_harvest: bool = False, crew_size: int | None = None) -> Room:
    room = Room(name=name.strip(), is_harvest=is_harvest, crew_size=crew_size, active=True)
    session.add(room)
    session.commit()
    return room


def list_rooms(session: Session, *, include_inactive: bool = False) -> list[Room]:
    query = select(Room).order_by(Room.id.asc())
    if not include_inactive:
        query = query.where(Room.active.is_(True))
    return session.execute(query).scalars().all()


def deactivate_room(session: Session, room_id: int) -> Room:
    room = session.get(Room, room_id)
    if room is None:
        raise UnknownRoom(room_id)
    room.active = False
    session.commit()
    return room
