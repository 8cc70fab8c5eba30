"""Test fixtures for the cleaning rota service."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    db_path = tmp_path / "test.db"
    monkeypatch.setenv("CLEANING_ROTA_DB_PATH", str(db_path))
    monkeypatch.setenv("CLEANING_ROTA_API_TOKEN", "test-token")

    from cleaning_rota import db
    from cleaning_rota.db import Base
    from cleaning_rota.main import app

    db.configure_engine(f"sqlite:///{db_path}")
    assert db.engine is not None
    Base.metadata.drop_all(bind=db.engine)
    Base.metadata.create_all(bind=db.engine)

    with TestClient(app) as api_client:
        yield api_client


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"x-rota-token": "test-token"}


@pytest.fixture
def session(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    db_path = tmp_path / "service.db"
    monkeypatch.setenv("CLEANING_ROTA_DB_PATH", str(db_path))

    from cleaning_rota import db
    from cleaning_rota.db import Base
    from cleaning_rota.services.board import ensure_cleaning_levels

    db.configure_engine(f"sqlite:///{db_path}")
    assert db.engine is not None and db.SessionLocal is not None
    Base.metadata.create_all(bind=db.engine)

    with db.SessionLocal() as db_session:
        ensure_cleaning_levels(db_session)
        yield db_session


@pytest.fixture
def repo(session):
    from cleaning_rota.repository import SqlRepository

    return SqlRepository(session)
