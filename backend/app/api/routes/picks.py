from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import Optional

from app.core.errors import AllocationError, NotFoundError
from app.core.security import get_db
from app.schemas.picks import AllocateIn, AllocationOut, MatchupPicksOut, OwnerSummaryOut, PickCreate, PickOut
from app.services.owner_summary import summarize_matchup_picks, summarize_owner
from app.services.pick_allocation import (
    allocate_pick,
    allocate_pick_by_token,
    create_pick,
    deallocate_pick,
    get_pick,
    list_picks,
)
from app.services.season_resolver import get_current_season_info

router = APIRouter(prefix="/api/v1", tags=["picks"])


@router.post("/picks", response_model=PickOut)
def create_pool_pick(payload: PickCreate, db: Session = Depends(get_db)):
    try:
        return create_pick(db, payload.owner_id, payload.unit_count, payload.display_name)
    except AllocationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/picks", response_model=list[PickOut])
def list_pool_picks(owner_id: Optional[str] = None, db: Session = Depends(get_db)):
    return list_picks(db, owner_id=owner_id)


@router.get("/picks/{pick_id}", response_model=PickOut)
def read_pick(pick_id: int, db: Session = Depends(get_db)):
    try:
        return get_pick(db, pick_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.post("/picks/{pick_id}/allocate", response_model=AllocationOut)
def allocate(pick_id: int, payload: AllocateIn, db: Session = Depends(get_db)):
    # only the week currently being played is allocatable
    season = get_current_season_info(db)
    try:
        if payload.token is not None:
            return allocate_pick_by_token(db, pick_id, payload.token, season=season)
        return allocate_pick(db, pick_id, payload.matchup_id, payload.team, season=season)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except AllocationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.delete("/picks/{pick_id}/allocations/{season_label}", response_model=PickOut)
def deallocate(pick_id: int, season_label: str, db: Session = Depends(get_db)):
    try:
        return deallocate_pick(db, pick_id, season_label.upper())
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except AllocationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/owners/{owner_id}/summary", response_model=OwnerSummaryOut)
def owner_summary(owner_id: str, db: Session = Depends(get_db)):
    return summarize_owner(db, owner_id).as_dict()


@router.get("/matchups/{matchup_id}/picks", response_model=MatchupPicksOut)
def matchup_picks(matchup_id: int, owner_id: Optional[str] = None, db: Session = Depends(get_db)):
    try:
        return summarize_matchup_picks(db, matchup_id, owner_id=owner_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
