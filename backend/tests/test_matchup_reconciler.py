"""
backend/tests/test_matchup_reconciler.py

Purpose:
    Merging feed snapshots into stored matchups: inserts keyed by
    (away, home, season label), week checks before touching kickoffs,
    kickoff tolerance, and live state updates.
"""

from __future__ import annotations

import logging

from app.core.timeutils import as_utc
from app.crud.crud_matchup import get_matchup_by_key, list_matchups
from app.models.matchups import Matchup
from app.schemas.matchups import ExternalGame
from app.services.matchup_reconciler import reconcile_matchups, split_by_label
from app.services.season_resolver import season_info_for_label
from tests.helpers import utc


def _game(away, home, week, kickoff, season_type="REG", **kw) -> ExternalGame:
    return ExternalGame(
        away_team=away, home_team=home, season_type=season_type, week=week, kickoff_at=kickoff, **kw
    )


def test_inserts_new_matchups_with_local_week(db):
    season = season_info_for_label("POST1", 2025)
    games = [
        _game("GB", "PHI", 1, "2026-01-11T21:30:00Z", season_type="POST"),
        _game("LAR", "CAR", 1, "2026-01-10T21:30:00Z", season_type=3),
    ]

    res = reconcile_matchups(db, games, season)

    assert (res.created, res.updated, res.unchanged) == (2, 0, 0)
    row = get_matchup_by_key(db, "GB", "PHI", "POST1")
    assert row.phase == "POST"
    assert row.week == 19
    assert row.phase_week == 1
    assert row.season_year == 2025
    assert row.status == "scheduled"
    assert row.last_feed_update is not None


def test_second_identical_run_changes_nothing(db):
    season = season_info_for_label("REG4", 2025)
    games = [_game("BUF", "MIA", 4, "2025-09-28T17:00:00Z")]

    reconcile_matchups(db, games, season)
    res = reconcile_matchups(db, games, season)

    assert (res.created, res.updated, res.unchanged) == (0, 0, 1)
    assert db.query(Matchup).count() == 1


def test_kickoff_within_tolerance_is_left_alone(db, make_matchup):
    season = season_info_for_label("REG4", 2025)
    make_matchup("REG4", "BUF", "MIA", utc(2025, 9, 28, 17))

    res = reconcile_matchups(db, [_game("BUF", "MIA", 4, "2025-09-28T17:00:45Z")], season)

    assert res.unchanged == 1
    row = get_matchup_by_key(db, "BUF", "MIA", "REG4")
    assert as_utc(row.kickoff_at) == utc(2025, 9, 28, 17)


def test_rescheduled_kickoff_is_updated_even_across_dates(db, make_matchup, caplog):
    season = season_info_for_label("REG4", 2025)
    make_matchup("REG4", "BUF", "MIA", utc(2025, 9, 28, 17))

    with caplog.at_level(logging.WARNING, logger="loserpool.reconcile"):
        res = reconcile_matchups(db, [_game("BUF", "MIA", 4, "2025-09-29T00:15:00Z")], season)

    assert res.updated == 1
    assert res.warnings == []
    assert "Date mismatch" in caplog.text
    row = get_matchup_by_key(db, "BUF", "MIA", "REG4")
    assert as_utc(row.kickoff_at) == utc(2025, 9, 29, 0, 15)


def test_week_mismatch_never_moves_stored_kickoff(db, make_matchup):
    season = season_info_for_label("REG4", 2025)
    stored = make_matchup("REG4", "BUF", "MIA", utc(2025, 9, 28, 17))

    # feed lists the same pair a week later (a second meeting)
    res = reconcile_matchups(db, [_game("BUF", "MIA", 5, "2025-10-05T17:00:00Z")], season)

    assert len(res.warnings) == 1
    assert "Week mismatch" in res.warnings[0]
    assert res.created == 1

    db.refresh(stored)
    assert as_utc(stored.kickoff_at) == utc(2025, 9, 28, 17)
    assert stored.season_label == "REG4"

    rematch = get_matchup_by_key(db, "BUF", "MIA", "REG5")
    assert rematch.week == 5
    assert rematch.id != stored.id


def test_same_pair_in_two_weeks_are_distinct_matchups(db):
    reconcile_matchups(db, [_game("DAL", "PHI", 1, "2025-09-05T00:20:00Z")], season_info_for_label("REG1", 2025))
    reconcile_matchups(db, [_game("DAL", "PHI", 16, "2025-12-21T21:25:00Z")], season_info_for_label("REG16", 2025))

    labels = [m.season_label for m in list_matchups(db)]
    assert labels == ["REG1", "REG16"]


def test_live_state_and_winner(db, make_matchup):
    season = season_info_for_label("REG4", 2025)
    make_matchup("REG4", "KC", "BAL", utc(2025, 9, 28, 20, 25))

    res = reconcile_matchups(
        db, [_game("KC", "BAL", 4, "2025-09-28T20:25:00Z", status="in", away_score=7, home_score=3)], season
    )
    assert res.updated == 1
    row = get_matchup_by_key(db, "KC", "BAL", "REG4")
    assert (row.status, row.away_score, row.home_score, row.winner) == ("live", 7, 3, None)

    reconcile_matchups(
        db, [_game("KC", "BAL", 4, "2025-09-28T20:25:00Z", status="final", away_score=20, home_score=27)], season
    )
    db.refresh(row)
    assert (row.status, row.winner) == ("final", "home")


def test_missing_scores_do_not_erase_reported_ones(db, make_matchup):
    season = season_info_for_label("REG4", 2025)
    make_matchup("REG4", "KC", "BAL", utc(2025, 9, 28, 20, 25), status="final",
                 away_score=20, home_score=20, winner="tie")

    res = reconcile_matchups(db, [_game("KC", "BAL", 4, "2025-09-28T20:25:00Z", status="final")], season)

    assert res.unchanged == 1
    row = get_matchup_by_key(db, "KC", "BAL", "REG4")
    assert (row.away_score, row.home_score, row.winner) == (20, 20, "tie")


def test_duplicate_games_in_one_snapshot_warn(db):
    season = season_info_for_label("REG4", 2025)
    g = _game("NYJ", "NE", 4, "2025-09-28T17:00:00Z")

    res = reconcile_matchups(db, [g, g], season)

    assert res.created == 1
    assert len(res.warnings) == 1
    assert "Duplicate" in res.warnings[0]


def test_accepts_plain_dicts(db):
    season = season_info_for_label("REG2", 2025)
    res = reconcile_matchups(
        db,
        [{"away_team": "sea", "home_team": "pit", "season_type": "REG", "week": 2,
          "kickoff_at": "2025-09-14T17:00:00Z", "status": "pre"}],
        season,
    )
    assert res.created == 1
    assert get_matchup_by_key(db, "SEA", "PIT", "REG2") is not None


def test_split_by_label_keeps_feed_order():
    games = [
        _game("A", "B", 1, None, season_type="POST"),
        _game("C", "D", 18, None),
        _game("E", "F", 1, None, season_type="POST"),
    ]
    groups = split_by_label(games)
    assert [label for label, _ in groups] == ["POST1", "REG18"]
    assert len(groups[0][1]) == 2
