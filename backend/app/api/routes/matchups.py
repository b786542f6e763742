from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional

from app.core.security import get_db
from app.crud.crud_matchup import list_matchups
from app.schemas.matchups import MatchupOut
from app.schemas.season import SeasonInfoOut
from app.services.season_resolver import get_current_season_info

router = APIRouter(prefix="/api/v1", tags=["matchups"])


@router.get("/season/current", response_model=SeasonInfoOut)
def current_season(db: Session = Depends(get_db)):
    return get_current_season_info(db).as_dict()


@router.get("/matchups", response_model=list[MatchupOut])
def list_public_matchups(
    season_label: Optional[str] = None,
    current: bool = False,
    db: Session = Depends(get_db),
):
    # current=true -> the week the resolver says is being played
    if current:
        season_label = get_current_season_info(db).label
    return list_matchups(db, season_label=season_label.upper() if season_label else None)
