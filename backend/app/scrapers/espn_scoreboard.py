# app/scrapers/espn_scoreboard.py
from __future__ import annotations

import logging
from typing import List, Optional

import httpx
from pydantic import ValidationError

from app.core.config import settings
from app.core.errors import FeedError
from app.core.game_config import ESPN_SEASON_TYPES
from app.schemas.matchups import ExternalGame
from app.scrapers.http import get_with_retry, make_client

logger = logging.getLogger("loserpool.feed")

SCOREBOARD_PATH = "/football/nfl/scoreboard"


def _score(raw) -> Optional[int]:
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def parse_event(event: dict, season_type=None, week: Optional[int] = None) -> Optional[ExternalGame]:
    """
    One ESPN scoreboard event -> ExternalGame. Returns None when the event has
    no usable competition (TBD playoff slots, missing competitors).
    """
    comps = event.get("competitions") or []
    if not comps:
        return None
    comp = comps[0]

    by_side = {c.get("homeAway"): c for c in comp.get("competitors") or []}
    away, home = by_side.get("away"), by_side.get("home")
    if not away or not home:
        return None

    away_abbr = ((away.get("team") or {}).get("abbreviation") or "").strip()
    home_abbr = ((home.get("team") or {}).get("abbreviation") or "").strip()
    if not away_abbr or not home_abbr or "TBD" in (away_abbr, home_abbr):
        return None

    state = (((comp.get("status") or {}).get("type") or {}).get("state")) or "pre"
    status = {"pre": "scheduled", "in": "live", "post": "final"}.get(state, "scheduled")

    ev_type = (event.get("season") or {}).get("type")
    ev_week = (event.get("week") or {}).get("number")

    away_score = _score(away.get("score"))
    home_score = _score(home.get("score"))
    if status == "scheduled":
        # ESPN reports "0" for games that have not started
        away_score = home_score = None

    return ExternalGame(
        away_team=away_abbr,
        home_team=home_abbr,
        season_type=ev_type if ev_type is not None else (season_type or "REG"),
        week=ev_week if ev_week is not None else week,
        kickoff_at=comp.get("date") or event.get("date"),
        status=status,
        away_score=away_score,
        home_score=home_score,
        external_id=str(event.get("id")) if event.get("id") is not None else None,
    )


def parse_scoreboard(payload: dict, season_type=None, week: Optional[int] = None) -> List[ExternalGame]:
    games: List[ExternalGame] = []
    for event in payload.get("events") or []:
        try:
            g = parse_event(event, season_type=season_type, week=week)
        except ValidationError as exc:
            logger.warning("Skipping ESPN event %s: %s", event.get("id"), exc)
            continue
        if g is not None:
            games.append(g)
    return games


def fetch_week(
    season_year: int,
    phase: str,
    week: int,
    client: Optional[httpx.Client] = None,
) -> List[ExternalGame]:
    """Fetch one week of the ESPN scoreboard in the feed's own numbering."""
    params = {
        "year": season_year,
        "week": week,
        "seasontype": ESPN_SEASON_TYPES[phase],
    }
    url = settings.ESPN_BASE_URL.rstrip("/") + SCOREBOARD_PATH

    own_client = client is None
    client = client or make_client()
    try:
        resp = get_with_retry(client, url, params=params)
        payload = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        raise FeedError(f"ESPN scoreboard {phase}{week} {season_year}: {exc}") from exc
    finally:
        if own_client:
            client.close()

    games = parse_scoreboard(payload, season_type=phase, week=week)
    logger.info("ESPN %s%d %s: %d games", phase, week, season_year, len(games))
    return games
