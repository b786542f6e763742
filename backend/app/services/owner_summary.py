from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.crud.crud_matchup import get_matchup
from app.models.picks import Pick, PickAllocation


@dataclass
class OwnerSummary:
    owner_id: str
    state: str  # registered / active / eliminated
    pending_units: int = 0
    active_units: int = 0
    safe_units: int = 0
    eliminated_units: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


def summarize_owner(db: Session, owner_id: str) -> OwnerSummary:
    rows = (
        db.query(Pick.status, func.sum(Pick.unit_count))
        .filter(Pick.owner_id == owner_id)
        .group_by(Pick.status)
        .all()
    )
    units = {status: int(total or 0) for status, total in rows}

    out = OwnerSummary(
        owner_id=owner_id,
        state="registered",
        pending_units=units.get("pending", 0),
        active_units=units.get("active", 0),
        safe_units=units.get("safe", 0),
        eliminated_units=units.get("eliminated", 0),
    )
    if not units:
        return out

    alive = out.pending_units + out.active_units + out.safe_units
    out.state = "active" if alive > 0 else "eliminated"
    return out


def summarize_owners(db: Session, owner_ids: Iterable[str]) -> List[OwnerSummary]:
    return [summarize_owner(db, o) for o in owner_ids]


@dataclass
class TeamPicks:
    team: str
    side: str  # away / home
    picks: int = 0
    units: int = 0


def summarize_matchup_picks(db: Session, matchup_id: int, owner_id: Optional[str] = None) -> dict:
    """How many picks (and units) sit on each team of a matchup for its week."""
    m = get_matchup(db, matchup_id)
    if m is None:
        raise NotFoundError(f"Matchup {matchup_id} not found")

    q = (
        db.query(PickAllocation.team, func.count(Pick.id), func.sum(Pick.unit_count))
        .join(Pick, Pick.id == PickAllocation.pick_id)
        .filter(
            PickAllocation.matchup_id == m.id,
            PickAllocation.season_label == m.season_label,
        )
    )
    if owner_id is not None:
        q = q.filter(Pick.owner_id == owner_id)
    rows = {team: (int(n or 0), int(units or 0)) for team, n, units in q.group_by(PickAllocation.team).all()}

    teams = []
    for side, team in (("away", m.away_team), ("home", m.home_team)):
        n, units = rows.get(team, (0, 0))
        teams.append(asdict(TeamPicks(team=team, side=side, picks=n, units=units)))

    return {
        "matchup_id": m.id,
        "season_label": m.season_label,
        "owner_id": owner_id,
        "teams": teams,
    }
