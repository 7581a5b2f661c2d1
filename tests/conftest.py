"""
Shared fixtures: in-memory SQLite store, FastAPI TestClient wired to it,
and a helper for seeding tickets with controlled creation times.
"""

import os
from datetime import datetime, timedelta, timezone

os.environ["DATABASE_URL"] = "sqlite:///:memory:"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.main import app
from app.models.base import Base
from app.models.ticket import Ticket
from app.services.db import create_db_engine, db_session, get_db, init_db

GENERATE_URL = "https://n8n.test/webhook/generate-tickets"
PLAN_URL = "https://n8n.test/webhook/plan-sprint"

WORKFLOW_ENV = ("N8N_GENERATE_TICKETS_URL", "NEXT_PUBLIC_N8N_GENERATE_TICKETS_URL", "N8N_PLAN_SPRINT_URL")


@pytest.fixture(autouse=True)
def clear_workflow_env(monkeypatch):
    for name in WORKFLOW_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def workflow_env(monkeypatch):
    monkeypatch.setenv("N8N_GENERATE_TICKETS_URL", GENERATE_URL)
    monkeypatch.setenv("N8N_PLAN_SPRINT_URL", PLAN_URL)


@pytest.fixture
def session_factory():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        with db_session(session_factory) as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_ticket(session_factory):
    """Insert a ticket directly into the store; later calls get later created_at."""
    base = datetime(2025, 1, 1, tzinfo=timezone.utc)
    counter = {"n": 0}

    def _make(**overrides) -> dict:
        counter["n"] += 1
        values = {
            "title": f"Ticket {counter['n']}",
            "type": "story",
            "priority": "medium",
            "story_points": 3,
            "status": "backlog",
            "created_at": base + timedelta(minutes=counter["n"]),
        }
        values.update(overrides)
        with session_factory() as session:
            ticket = Ticket(**values)
            session.add(ticket)
            session.commit()
            return {"id": ticket.id, **{k: v for k, v in values.items() if k != "created_at"}}

    return _make
