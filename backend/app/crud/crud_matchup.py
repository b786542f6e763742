# app/crud/crud_matchup.py
from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.matchups import Matchup
from app.services.week_mapping import season_sort_key

MatchupKey = Tuple[str, str, str]  # (away_team, home_team, season_label)


def get_matchup(db: Session, matchup_id: int) -> Optional[Matchup]:
    return db.query(Matchup).filter(Matchup.id == matchup_id).one_or_none()


def get_matchup_by_key(db: Session, away_team: str, home_team: str, season_label: str) -> Optional[Matchup]:
    return (
        db.query(Matchup)
        .filter(
            Matchup.away_team == away_team,
            Matchup.home_team == home_team,
            Matchup.season_label == season_label,
        )
        .one_or_none()
    )


def list_matchups(db: Session, season_label: Optional[str] = None) -> List[Matchup]:
    q = db.query(Matchup)
    if season_label is not None:
        q = q.filter(Matchup.season_label == season_label)
    rows = q.order_by(Matchup.kickoff_at.asc().nulls_last(), Matchup.id.asc()).all()
    # season order first (REG10 after REG9), kickoff order within a week
    return sorted(rows, key=lambda m: season_sort_key(m.season_label))


def insert_matchup_if_absent(db: Session, row: Matchup) -> Tuple[Matchup, bool]:
    """
    Insert `row` unless its (away, home, label) already exists.

    Returns (stored_row, created). A concurrent insert that wins the race shows
    up as an IntegrityError inside the SAVEPOINT; we then return the winner.
    """
    try:
        with db.begin_nested():
            db.add(row)
            db.flush()  # make INSERT visible to subsequent queries
        return row, True
    except IntegrityError:
        existing = get_matchup_by_key(db, row.away_team, row.home_team, row.season_label)
        if existing is None:
            raise
        return existing, False
