from __future__ import annotations

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import Optional

from app.core.errors import AllocationError, FeedError, NotFoundError
from app.core.security import get_db, require_cron
from app.schemas.matchups import ExternalGame, ReconcileOut
from app.schemas.picks import DefaultPickIn, DefaultPickOut, SettleOut
from app.schemas.season import SeasonInfoOut
from app.scrapers.espn_scoreboard import fetch_week
from app.services.matchup_reconciler import reconcile_matchups, split_by_label
from app.services.pick_allocation import assign_default_picks
from app.services.pick_lifecycle import settle_all_finalized
from app.services.season_resolver import get_current_season_info, season_info_for_label, store_resolved_week

router = APIRouter(prefix="/api/v1/cron", tags=["cron"], dependencies=[Depends(require_cron)])


@router.post("/reconcile", response_model=list[ReconcileOut])
def reconcile(
    games: Optional[list[ExternalGame]] = Body(default=None),
    db: Session = Depends(get_db),
):
    season = get_current_season_info(db)

    # no body -> pull the current week from ESPN ourselves
    if not games:
        try:
            games = fetch_week(season.season_year, season.phase, season.week)
        except FeedError as exc:
            raise HTTPException(status_code=502, detail=str(exc))

    # one pass per week: the week check is scoped to the week being merged
    out = []
    for label, group in split_by_label(games):
        week = season if label == season.label else season_info_for_label(label, season.season_year)
        out.append(reconcile_matchups(db, group, week).as_dict())
    return out


@router.post("/settle", response_model=SettleOut)
def settle(db: Session = Depends(get_db)):
    return settle_all_finalized(db).as_dict()


@router.post("/store-current-week", response_model=SeasonInfoOut)
def store_current_week(db: Session = Depends(get_db)):
    return store_resolved_week(db).as_dict()


@router.post("/assign-default-picks", response_model=DefaultPickOut)
def default_picks(payload: DefaultPickIn, db: Session = Depends(get_db)):
    season = get_current_season_info(db)
    try:
        return assign_default_picks(db, season, payload.matchup_id, payload.team).as_dict()
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except AllocationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
