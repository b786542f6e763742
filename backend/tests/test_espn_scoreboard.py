"""
backend/tests/test_espn_scoreboard.py

Purpose:
    Parsing ESPN scoreboard payloads into feed games, and the fetch error
    surface (no network: httpx.MockTransport).
"""

from __future__ import annotations

import httpx
import pytest

from app.core.errors import FeedError
from app.scrapers.espn_scoreboard import fetch_week, parse_event, parse_scoreboard
from tests.helpers import utc


def _event(event_id, away, home, state="pre", away_score="0", home_score="0",
           season_type=2, week=4, date="2025-09-28T17:00Z"):
    return {
        "id": event_id,
        "date": date,
        "season": {"year": 2025, "type": season_type},
        "week": {"number": week},
        "competitions": [
            {
                "date": date,
                "status": {"type": {"state": state}},
                "competitors": [
                    {"homeAway": "home", "score": home_score, "team": {"abbreviation": home}},
                    {"homeAway": "away", "score": away_score, "team": {"abbreviation": away}},
                ],
            }
        ],
    }


def test_parse_scheduled_event_drops_placeholder_scores():
    g = parse_event(_event("401", "BUF", "MIA"))
    assert (g.away_team, g.home_team, g.season_type, g.week) == ("BUF", "MIA", "REG", 4)
    assert g.kickoff_at == utc(2025, 9, 28, 17)
    assert g.status == "scheduled"
    assert g.away_score is None and g.home_score is None
    assert g.external_id == "401"


def test_parse_final_postseason_event():
    g = parse_event(_event("402", "GB", "PHI", state="post", away_score="10", home_score="22",
                           season_type=3, week=1, date="2026-01-11T21:30Z"))
    assert (g.season_type, g.week, g.status) == ("POST", 1, "final")
    assert (g.away_score, g.home_score) == (10, 22)


def test_parse_scoreboard_skips_tbd_and_broken_events():
    payload = {
        "events": [
            _event("1", "KC", "BAL", state="in", away_score="7", home_score="3"),
            _event("2", "TBD", "BAL"),
            {"id": "3", "competitions": []},
            _event("4", "SF", "LAR", week=0),  # fails validation
        ]
    }
    games = parse_scoreboard(payload)
    assert [(g.away_team, g.status) for g in games] == [("KC", "live")]


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_fetch_week_queries_phase_and_feed_week():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(dict(request.url.params))
        return httpx.Response(200, json={"events": [_event("9", "LAR", "CAR", season_type=3, week=1)]})

    games = fetch_week(2025, "POST", 1, client=_client(handler))

    assert seen == {"year": "2025", "week": "1", "seasontype": "3"}
    assert games[0].season_type == "POST"


def test_fetch_week_wraps_http_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="down")

    with pytest.raises(FeedError):
        fetch_week(2025, "REG", 4, client=_client(handler))
