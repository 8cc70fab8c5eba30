"""Worker synchronization from the auth provider and lookups."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import Worker
from ..repository import storage_errors
from ..schemas import WorkerSyncItem


_LOGGER = logging.getLogger(__name__)


def sync_workers(session: Session, items: list[WorkerSyncItem]) -> tuple[list[Worker], list[int]]:
    """Upsert workers keyed by auth user id; unlisted workers are deactivated."""

    existing = {
        w.user_id: w
        for w in session.execute(select(Worker).where(Worker.user_id.is_not(None))).scalars().all()
    }

    seen_user_ids: set[str] = set()
    deactivated_worker_ids: set[int] = set()

    for item in items:
        worker = existing.get(item.user_id) if item.user_id else None
        if worker is None:
            worker = Worker(
                display_name=item.display_name.strip(),
                user_id=item.user_id,
                role=item.role,
                active=item.active,
            )
            session.add(worker)
            if item.user_id:
                existing[item.user_id] = worker
        else:
            was_active = bool(worker.active)
            worker.display_name = item.display_name.strip()
            worker.role = item.role
            worker.active = item.active
            if was_active and not worker.active and worker.id is not None:
                deactivated_worker_ids.add(worker.id)

        if item.user_id:
            seen_user_ids.add(item.user_id)

    for worker in existing.values():
        if worker.user_id and worker.user_id not in seen_user_ids and worker.active:
            worker.active = False
            deactivated_worker_ids.add(worker.id)

    session.commit()
    if deactivated_worker_ids:
        _LOGGER.info("Deactivated workers %s", sorted(deactivated_worker_ids))

    rows = session.execute(select(Worker).order_by(Worker.display_name.asc())).scalars().all()
    return rows, sorted(deactivated_worker_ids)


def list_workers(session: Session) -> list[Worker]:
    with storage_errors():
        return session.execute(select(Worker).order_by(Worker.display_name.asc())).scalars().all()
