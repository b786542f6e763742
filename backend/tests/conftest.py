"""
backend/tests/conftest.py

Purpose:
    Shared fixtures: an in-memory SQLite database with the full schema, a
    session bound to it, a FastAPI TestClient using that session, and small
    factories for matchups and picks.
"""

from __future__ import annotations

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.db.init_db import init_db
from app.db.session import get_db, make_engine
from app.main import app
from app.models.matchups import Matchup
from app.models.picks import Pick, PickAllocation
from app.services.week_mapping import parse_season_label, to_local_week

CRON_TOKEN = "test-cron-token"


@pytest.fixture()
def engine():
    eng = make_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def db(engine):
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db, monkeypatch):
    # StaticPool hands every session the same connection: share the session too
    def _get_db():
        yield db

    monkeypatch.setattr(settings, "CRON_SECRET_TOKEN", CRON_TOKEN)
    monkeypatch.setattr(settings, "CURRENT_WEEK_FALLBACK", None)
    app.dependency_overrides[get_db] = _get_db
    # no startup event: the schema already lives in the test engine
    test_client = TestClient(app)
    try:
        yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def cron_headers():
    return {"Authorization": f"Bearer {CRON_TOKEN}"}


@pytest.fixture()
def make_matchup(db):
    def _make(
        label: str,
        away: str,
        home: str,
        kickoff: datetime | None = None,
        status: str = "scheduled",
        away_score: int | None = None,
        home_score: int | None = None,
        winner: str | None = None,
        season_year: int = 2025,
    ) -> Matchup:
        phase, phase_week = parse_season_label(label)
        m = Matchup(
            season_year=season_year,
            phase=phase,
            week=to_local_week(phase, phase_week),
            season_label=label,
            away_team=away,
            home_team=home,
            kickoff_at=kickoff,
            status=status,
            away_score=away_score,
            home_score=home_score,
            winner=winner,
        )
        db.add(m)
        db.commit()
        db.refresh(m)
        return m

    return _make


@pytest.fixture()
def make_pick(db):
    def _make(
        owner_id: str = "owner-1",
        status: str = "pending",
        unit_count: int = 1,
        allocations: list[tuple[str, int, str]] | None = None,
    ) -> Pick:
        p = Pick(owner_id=owner_id, status=status, unit_count=unit_count)
        for label, matchup_id, team in allocations or []:
            p.allocations.append(PickAllocation(season_label=label, matchup_id=matchup_id, team=team))
        db.add(p)
        db.commit()
        db.refresh(p)
        return p

    return _make
