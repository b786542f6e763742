# app/services/pick_lifecycle.py
from __future__ import annotations

import logging
import threading
import weakref
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Set

from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.core.game_config import WINNER_SIDES
from app.core.timeutils import utcnow
from app.crud.crud_matchup import get_matchup
from app.models.matchups import Matchup
from app.models.picks import Pick, PickAllocation

logger = logging.getLogger("loserpool.picks")

# Loser pool: you pick a team to LOSE.
#   picked team won -> eliminated
#   tie             -> eliminated (whoever you picked)
#   picked team lost -> safe
#
# Only picks in active/safe with an unsettled allocation for the matchup's
# week are touched. Eliminated picks and settled allocations are never
# revisited, so a later score correction does not re-process anything.

SETTLEABLE_STATUSES = ("active", "safe")


# entries vanish once no settlement holds or waits on the lock
_locks: weakref.WeakValueDictionary = weakref.WeakValueDictionary()
_locks_guard = threading.Lock()


@contextmanager
def matchup_lock(matchup_id: int):
    """Serialize settlement per matchup inside this process."""
    with _locks_guard:
        lock = _locks.setdefault(matchup_id, threading.Lock())
    with lock:
        yield


@dataclass
class SettleResult:
    matchup_id: int
    picks_updated: int = 0
    owner_ids: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class SweepResult:
    matchups_processed: int = 0
    picks_updated: int = 0
    owner_ids: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "matchups_processed": self.matchups_processed,
            "picks_updated": self.picks_updated,
            "owner_ids": list(self.owner_ids),
            "warnings": list(self.warnings),
        }


def outcome_for(picked_team: str, winner_side: str, winning_team: Optional[str]) -> str:
    if winner_side == "tie":
        return "eliminated"
    if picked_team == winning_team:
        return "eliminated"
    return "safe"


def settle_matchup(
    db: Session,
    matchup_id: int,
    winner_side: str,
    now: Optional[datetime] = None,
) -> SettleResult:
    if winner_side not in WINNER_SIDES:
        raise ValueError(f"winner_side must be one of {WINNER_SIDES}, got {winner_side!r}")

    matchup = get_matchup(db, matchup_id)
    if matchup is None:
        raise NotFoundError(f"Matchup {matchup_id} not found")

    now = now or utcnow()
    winning_team = matchup.team_for_side(winner_side)  # None on a tie
    result = SettleResult(matchup_id=matchup.id)
    owners: Set[str] = set()

    with matchup_lock(matchup.id):
        rows = (
            db.query(PickAllocation, Pick)
            .join(Pick, Pick.id == PickAllocation.pick_id)
            .filter(
                PickAllocation.matchup_id == matchup.id,
                PickAllocation.season_label == matchup.season_label,
                PickAllocation.settled_at.is_(None),
                Pick.status.in_(SETTLEABLE_STATUSES),
            )
            .order_by(Pick.id.asc())
            .all()
        )

        for alloc, pick in rows:
            team = alloc.team
            if team not in (matchup.away_team, matchup.home_team):
                msg = (
                    f"Pick {pick.id}: allocation {alloc.token!r} for {matchup.season_label} "
                    f"does not name a team of {matchup.away_team} @ {matchup.home_team}; skipped"
                )
                logger.warning(msg)
                result.warnings.append(msg)
                continue

            new_status = outcome_for(team, winner_side, winning_team)
            alloc.result = new_status
            alloc.settled_at = now

            if pick.status != new_status:
                logger.info(
                    "Pick %s (%s) %s -> %s: picked %s, winner %s",
                    pick.id, pick.owner_id, pick.status, new_status, team, winning_team or "tie",
                )
                pick.status = new_status
                pick.updated_at = now
                result.picks_updated += 1
                owners.add(pick.owner_id)

        db.commit()

    result.owner_ids = sorted(owners)
    logger.info(
        "Settled matchup %s (%s @ %s, %s): winner=%s picks_updated=%d",
        matchup.id, matchup.away_team, matchup.home_team, matchup.season_label,
        winner_side, result.picks_updated,
    )
    return result


def settle_all_finalized(db: Session, now: Optional[datetime] = None) -> SweepResult:
    """Settle every final matchup that has (or can derive) a winner."""
    sweep = SweepResult()
    owners: Set[str] = set()

    finals = (
        db.query(Matchup)
        .filter(Matchup.status == "final")
        .order_by(Matchup.id.asc())
        .all()
    )

    for m in finals:
        side = m.resolved_winner()
        if side is None:
            msg = f"Matchup {m.id} ({m.away_team} @ {m.home_team}, {m.season_label}) is final but has no winner"
            logger.warning(msg)
            sweep.warnings.append(msg)
            continue

        res = settle_matchup(db, m.id, side, now=now)
        sweep.matchups_processed += 1
        sweep.picks_updated += res.picks_updated
        sweep.warnings.extend(res.warnings)
        owners.update(res.owner_ids)

    sweep.owner_ids = sorted(owners)
    logger.info(
        "Sweep done: matchups_processed=%d picks_updated=%d owners=%d",
        sweep.matchups_processed, sweep.picks_updated, len(sweep.owner_ids),
    )
    return sweep
