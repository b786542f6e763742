# app/services/pick_allocation.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.errors import AllocationError, NotFoundError
from app.core.timeutils import as_utc, utcnow
from app.crud.crud_matchup import get_matchup, list_matchups
from app.models.picks import Pick, PickAllocation
from app.services.allocation_codec import normalize_team, parse_allocation_token
from app.services.season_resolver import SeasonInfo

logger = logging.getLogger("loserpool.picks")


def create_pick(db: Session, owner_id: str, unit_count: int = 1, display_name: Optional[str] = None) -> Pick:
    if unit_count < 1:
        raise AllocationError("unit_count must be >= 1")

    p = Pick(owner_id=owner_id, unit_count=unit_count, display_name=display_name, status="pending")
    db.add(p)
    db.commit()
    db.refresh(p)
    logger.info("Created pick %s for %s (%d units)", p.id, owner_id, unit_count)
    return p


def get_pick(db: Session, pick_id: int) -> Pick:
    p = db.query(Pick).filter(Pick.id == pick_id).one_or_none()
    if p is None:
        raise NotFoundError(f"Pick {pick_id} not found")
    return p


def list_picks(db: Session, owner_id: Optional[str] = None) -> List[Pick]:
    q = db.query(Pick)
    if owner_id is not None:
        q = q.filter(Pick.owner_id == owner_id)
    return q.order_by(Pick.id.asc()).all()


def allocate_pick(
    db: Session,
    pick_id: int,
    matchup_id: int,
    team: str,
    season: Optional[SeasonInfo] = None,
    now: Optional[datetime] = None,
) -> PickAllocation:
    """
    Put a pick on `team` for the matchup's week. Re-allocating within the same
    week replaces the previous (unsettled) choice.
    """
    now = now or utcnow()
    team = normalize_team(team)
    pick = get_pick(db, pick_id)

    matchup = get_matchup(db, matchup_id)
    if matchup is None:
        raise NotFoundError(f"Matchup {matchup_id} not found")

    if pick.status == "eliminated":
        raise AllocationError(f"Pick {pick.id} is eliminated")

    if team not in (matchup.away_team, matchup.home_team):
        raise AllocationError(f"{team!r} does not play in {matchup.away_team} @ {matchup.home_team}")

    if season is not None and matchup.season_label != season.label:
        raise AllocationError(f"Matchup {matchup.id} is {matchup.season_label}; current week is {season.label}")

    if matchup.status != "scheduled":
        raise AllocationError(f"Matchup {matchup.id} has already started ({matchup.status})")

    # one week-slot at a time
    for other in pick.allocations:
        if other.season_label != matchup.season_label and other.settled_at is None:
            raise AllocationError(f"Pick {pick.id} is still allocated for {other.season_label}")

    alloc = pick.allocation_for(matchup.season_label)
    if alloc is not None and alloc.settled_at is not None:
        raise AllocationError(f"Pick {pick.id} was already settled for {matchup.season_label}")

    if alloc is None:
        alloc = PickAllocation(season_label=matchup.season_label, matchup_id=matchup.id, team=team, allocated_at=now)
        pick.allocations.append(alloc)
    else:
        alloc.matchup_id = matchup.id
        alloc.team = team
        alloc.allocated_at = now

    pick.status = "active"
    pick.updated_at = now
    db.commit()
    db.refresh(alloc)

    logger.info("Pick %s allocated to %s in %s (%s)", pick.id, team, matchup.season_label, alloc.token)
    return alloc


def allocate_pick_by_token(
    db: Session,
    pick_id: int,
    token: str,
    season: Optional[SeasonInfo] = None,
) -> PickAllocation:
    try:
        matchup_id, team = parse_allocation_token(token)
    except ValueError as exc:
        raise AllocationError(str(exc)) from exc
    return allocate_pick(db, pick_id, matchup_id, team, season=season)


def deallocate_pick(db: Session, pick_id: int, season_label: str, now: Optional[datetime] = None) -> Pick:
    pick = get_pick(db, pick_id)

    alloc = pick.allocation_for(season_label)
    if alloc is None:
        raise NotFoundError(f"Pick {pick.id} has no allocation for {season_label}")
    if alloc.settled_at is not None:
        raise AllocationError(f"Allocation for {season_label} is already settled")

    matchup = get_matchup(db, alloc.matchup_id)
    if matchup is not None and matchup.status != "scheduled":
        raise AllocationError(f"Matchup {matchup.id} has already started ({matchup.status})")

    pick.allocations.remove(alloc)

    survived = any(a.result == "safe" for a in pick.allocations)
    pick.status = "safe" if survived else "pending"
    pick.updated_at = now or utcnow()
    db.commit()
    db.refresh(pick)

    logger.info("Pick %s deallocated from %s -> %s", pick.id, season_label, pick.status)
    return pick


# ============================
# Default picks
# ============================
# Once the week's first game kicks off, every live pick (pending / active /
# safe) still without a choice for that week gets the default team. Picks
# holding an unsettled allocation in another week are left alone.

DEFAULTABLE_STATUSES = ("pending", "active", "safe")


@dataclass
class DefaultPickResult:
    season_label: str
    matchup_id: int
    team: str
    picks_assigned: int = 0
    pick_ids: List[int] = field(default_factory=list)
    first_kickoff: Optional[datetime] = None
    reason: str = ""

    def as_dict(self) -> dict:
        return {
            "season_label": self.season_label,
            "matchup_id": self.matchup_id,
            "team": self.team,
            "picks_assigned": self.picks_assigned,
            "pick_ids": list(self.pick_ids),
            "first_kickoff": self.first_kickoff,
            "reason": self.reason,
        }


def assign_default_picks(
    db: Session,
    season: SeasonInfo,
    default_matchup_id: int,
    team: str,
    now: Optional[datetime] = None,
) -> DefaultPickResult:
    now = now or utcnow()
    team = normalize_team(team)

    matchup = get_matchup(db, default_matchup_id)
    if matchup is None:
        raise NotFoundError(f"Matchup {default_matchup_id} not found")
    if matchup.season_label != season.label:
        raise AllocationError(f"Matchup {matchup.id} is {matchup.season_label}; current week is {season.label}")
    if team not in (matchup.away_team, matchup.home_team):
        raise AllocationError(f"{team!r} does not play in {matchup.away_team} @ {matchup.home_team}")
    if matchup.status != "scheduled":
        raise AllocationError(f"Default matchup {matchup.id} has already started ({matchup.status})")

    result = DefaultPickResult(season_label=season.label, matchup_id=matchup.id, team=team)

    kickoffs = [as_utc(m.kickoff_at) for m in list_matchups(db, season.label) if m.kickoff_at is not None]
    result.first_kickoff = min(kickoffs) if kickoffs else None
    if result.first_kickoff is None or now < result.first_kickoff:
        result.reason = f"{season.label} has not kicked off yet"
        logger.info("Default picks for %s skipped: %s", season.label, result.reason)
        return result

    picks = (
        db.query(Pick)
        .filter(Pick.status.in_(DEFAULTABLE_STATUSES))
        .order_by(Pick.id.asc())
        .all()
    )
    for pick in picks:
        if pick.allocation_for(season.label) is not None:
            continue
        if any(a.settled_at is None for a in pick.allocations):
            logger.warning("Pick %s still allocated in an earlier week; no default for %s", pick.id, season.label)
            continue

        pick.allocations.append(
            PickAllocation(season_label=season.label, matchup_id=matchup.id, team=team, allocated_at=now)
        )
        pick.status = "active"
        pick.updated_at = now
        result.pick_ids.append(pick.id)

    result.picks_assigned = len(result.pick_ids)
    result.reason = f"Default {team} assigned to picks without a {season.label} choice"
    db.commit()

    logger.info("Default picks for %s: %d picks on %s (matchup %s)",
                season.label, result.picks_assigned, team, matchup.id)
    return result
