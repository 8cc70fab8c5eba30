"""End-to-end rota API tests."""

from __future__ import annotations

from datetime import date

from cleaning_rota import main
from cleaning_rota.errors import RepositoryUnavailable
from cleaning_rota.repository import SqlRepository

MONDAY = date(2024, 6, 3)


def _sync_workers(client, headers) -> dict[str, int]:
    payload = {
        "workers": [
            {"display_name": "Ann", "user_id": "u1"},
            {"display_name": "Bob", "user_id": "u2"},
            {"display_name": "Cleo", "user_id": "u3"},
            {"display_name": "Dana", "user_id": "u4"},
            {"display_name": "Boss", "user_id": "u5", "role": "admin"},
        ]
    }
    response = client.put("/v1/workers/sync", headers=headers, json=payload)
    assert response.status_code == 200
    return {row["display_name"]: row["id"] for row in response.json()["workers"]}


def _create_rooms(client, headers) -> dict[str, int]:
    ids = {}
    for payload in (
        {"name": "R1"},
        {"name": "R2", "is_harvest": True, "crew_size": 2},
        {"name": "R3"},
    ):
        response = client.post("/v1/rooms", headers=headers, json=payload)
        assert response.status_code == 200
        ids[payload["name"]] = response.json()["id"]
    return ids


def test_generate_board_progress_and_summary(client, auth_headers) -> None:
    workers = _sync_workers(client, auth_headers)
    _create_rooms(client, auth_headers)

    day_off = client.put(
        f"/v1/workers/{workers['Dana']}/availability/1",
        headers=auth_headers,
        json={"is_off": True},
    )
    assert day_off.status_code == 200

    available = client.get(
        f"/v1/workers/{workers['Dana']}/available",
        headers=auth_headers,
        params={"on": MONDAY.isoformat()},
    )
    assert available.json()["available"] is False

    generated = client.post("/v1/generate", headers=auth_headers, json={"task_date": MONDAY.isoformat()})
    assert generated.status_code == 200
    assert generated.json()["tasks_created"] == 3
    assert generated.json()["assignments_created"] == 4

    again = client.post("/v1/generate", headers=auth_headers, json={"task_date": MONDAY.isoformat()})
    assert again.json()["tasks_created"] == 0

    board = client.get("/v1/tasks", headers=auth_headers, params={"on": MONDAY.isoformat()})
    assert board.status_code == 200
    tasks = board.json()["tasks"]
    crews = {task["room_name"]: sorted(a["worker_name"] for a in task["assignees"]) for task in tasks}
    assert crews == {"R1": ["Ann"], "R2": ["Bob", "Cleo"], "R3": ["Ann"]}
    assert all(task["cleaning_level"] == "L1" for task in tasks)

    r3 = next(task for task in tasks if task["room_name"] == "R3")
    level = client.put(f"/v1/tasks/{r3['id']}/level", headers=auth_headers, json={"level": "L2"})
    assert level.status_code == 200

    mine = client.get(
        f"/v1/workers/{workers['Ann']}/assignments",
        headers=auth_headers,
        params={"on": MONDAY.isoformat()},
    )
    assert mine.status_code == 200
    ann_rows = mine.json()["assignments"]
    assert sorted(row["room_name"] for row in ann_rows) == ["R1", "R3"]
    assert {row["room_name"]: row["cleaning_level"] for row in ann_rows}["R3"] == "L2"

    assignment_id = ann_rows[0]["assignment_id"]
    started = client.post(
        f"/v1/assignments/{assignment_id}/transition",
        headers=auth_headers,
        json={"status": "in_progress"},
    )
    assert started.status_code == 200
    assert started.json()["started_at"] is not None

    done = client.post(
        f"/v1/assignments/{assignment_id}/transition",
        headers=auth_headers,
        json={"status": "completed"},
    )
    assert done.json()["status"] == "completed"

    regress = client.post(
        f"/v1/assignments/{assignment_id}/transition",
        headers=auth_headers,
        json={"status": "not_started"},
    )
    assert regress.status_code == 409

    summary = client.get(
        "/v1/rotation/week",
        headers=auth_headers,
        params={"anchor": MONDAY.isoformat()},
    )
    assert summary.status_code == 200
    rows = summary.json()["workers"]
    assert [row["display_name"] for row in rows] == ["Ann", "Bob", "Cleo", "Dana"]
    assert [row["total_assignments"] for row in rows] == [2, 1, 1, 0]
    assert rows[0]["per_date"][0]["rooms"] == ["R1", "R3"]


def test_no_eligible_workers_is_a_conflict(client, auth_headers) -> None:
    response = client.put(
        "/v1/workers/sync",
        headers=auth_headers,
        json={"workers": [{"display_name": "Ann", "user_id": "u1"}]},
    )
    ann_id = response.json()["workers"][0]["id"]
    client.post("/v1/rooms", headers=auth_headers, json={"name": "Kitchen"})
    client.put(f"/v1/workers/{ann_id}/availability/1", headers=auth_headers, json={"is_off": True})

    generated = client.post("/v1/generate", headers=auth_headers, json={"task_date": MONDAY.isoformat()})

    assert generated.status_code == 409
    board = client.get("/v1/tasks", headers=auth_headers, params={"on": MONDAY.isoformat()})
    assert board.json()["tasks"] == []


def test_availability_view_and_clear(client, auth_headers) -> None:
    workers = _sync_workers(client, auth_headers)
    worker_id = workers["Bob"]

    client.put(f"/v1/workers/{worker_id}/availability/5", headers=auth_headers, json={"is_off": True})
    view = client.get(f"/v1/workers/{worker_id}/availability", headers=auth_headers)
    assert view.status_code == 200
    assert [day["weekday"] for day in view.json()["days"] if day["is_off"]] == [5]

    cleared = client.delete(f"/v1/workers/{worker_id}/availability/5", headers=auth_headers)
    assert cleared.status_code == 200
    view = client.get(f"/v1/workers/{worker_id}/availability", headers=auth_headers)
    assert not any(day["is_off"] for day in view.json()["days"])

    bad_weekday = client.put(f"/v1/workers/{worker_id}/availability/9", headers=auth_headers, json={})
    assert bad_weekday.status_code == 400


def test_sync_deactivates_missing_workers(client, auth_headers) -> None:
    _sync_workers(client, auth_headers)

    response = client.put(
        "/v1/workers/sync",
        headers=auth_headers,
        json={"workers": [{"display_name": "Ann", "user_id": "u1"}]},
    )

    assert response.status_code == 200
    body = response.json()
    assert len(body["deactivated_worker_ids"]) == 4
    active = [row["display_name"] for row in body["workers"] if row["active"]]
    assert active == ["Ann"]


def test_deactivated_room_is_not_generated(client, auth_headers) -> None:
    _sync_workers(client, auth_headers)
    rooms = _create_rooms(client, auth_headers)

    deactivated = client.post(f"/v1/rooms/{rooms['R2']}/deactivate", headers=auth_headers)
    assert deactivated.status_code == 200
    listed = client.get("/v1/rooms", headers=auth_headers).json()
    assert [room["name"] for room in listed] == ["R1", "R3"]

    generated = client.post("/v1/generate", headers=auth_headers, json={"task_date": MONDAY.isoformat()})
    assert generated.json()["tasks_created"] == 2


def test_error_statuses(client, auth_headers) -> None:
    assert client.get("/v1/workers/999/availability", headers=auth_headers).status_code == 404
    assert client.post("/v1/rooms/999/deactivate", headers=auth_headers).status_code == 404
    assert (
        client.post(
            "/v1/assignments/999/transition",
            headers=auth_headers,
            json={"status": "completed"},
        ).status_code
        == 404
    )
    assert client.put("/v1/tasks/999/level", headers=auth_headers, json={"level": "L2"}).status_code == 404
    bad_range = client.get(
        "/v1/rotation/summary",
        headers=auth_headers,
        params={"start": "2024-06-05", "end": "2024-06-03"},
    )
    assert bad_range.status_code == 400


def test_levels_are_seeded(client, auth_headers) -> None:
    response = client.get("/v1/levels", headers=auth_headers)
    assert response.status_code == 200
    assert [level["code"] for level in response.json()] == ["L1", "L2", "L3"]


def test_sync_with_repeated_user_id_keeps_one_worker(client, auth_headers) -> None:
    response = client.put(
        "/v1/workers/sync",
        headers=auth_headers,
        json={
            "workers": [
                {"display_name": "Ann", "user_id": "u1"},
                {"display_name": "Annie", "user_id": "u1"},
            ]
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert [row["display_name"] for row in body["workers"]] == ["Annie"]
    assert body["deactivated_worker_ids"] == []


def test_unavailable_store_is_a_503_on_reads(client, auth_headers, monkeypatch) -> None:
    def unavailable(*_args, **_kwargs):
        raise RepositoryUnavailable("database is locked")

    monkeypatch.setattr(main, "list_workers", unavailable)
    monkeypatch.setattr(SqlRepository, "list_levels", unavailable)
    monkeypatch.setattr(main.board, "tasks_for_date", unavailable)
    monkeypatch.setattr(main.rotation, "weekly_summary", unavailable)

    assert client.get("/v1/workers", headers=auth_headers).status_code == 503
    assert client.get("/v1/levels", headers=auth_headers).status_code == 503
    assert client.get("/v1/tasks", headers=auth_headers, params={"on": MONDAY.isoformat()}).status_code == 503
    week = client.get("/v1/rotation/week", headers=auth_headers, params={"anchor": MONDAY.isoformat()})
    assert week.status_code == 503
