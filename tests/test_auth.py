"""Authentication behavior tests."""

from __future__ import annotations


def test_missing_token_is_rejected(client) -> None:
    response = client.get("/v1/workers")
    assert response.status_code == 401


def test_invalid_token_is_rejected(client) -> None:
    response = client.get("/v1/workers", headers={"x-rota-token": "wrong"})
    assert response.status_code == 401


def test_health_is_open(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}
