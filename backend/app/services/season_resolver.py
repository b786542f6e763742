# app/services/season_resolver.py
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.game_config import (
    DEFAULT_PRESEASON_CUTOFF,
    PHASE_POST,
    PHASE_PRE,
    PHASE_REG,
    PRESEASON_CUTOFF_MARGIN_DAYS,
)
from app.core.timeutils import as_utc, utcnow
from app.models.matchups import Matchup
from app.models.season import SeasonState
from app.services.week_mapping import parse_season_label, season_label, season_year_for

logger = logging.getLogger("loserpool.season")


# ============================
# "Current week" definition
# ============================
# The current week is the first week that still has outstanding (non-final)
# games, lowest week first within a phase. Never the week closest to `now` by
# date: postponed games keep their week open. Once the playoffs have open games
# they win over a regular season week left hanging (cancelled, never finalized).
#
# The only date-driven decision is PRE vs. the rest, and that boundary (the
# preseason cutoff) is itself derived from the kickoffs we have stored.


@dataclass
class SeasonInfo:
    phase: str
    week: int
    label: str
    season_year: int
    preseason_cutoff: datetime
    reason: str = ""

    @property
    def is_preseason(self) -> bool:
        return self.phase == PHASE_PRE

    @property
    def is_regular_season(self) -> bool:
        return self.phase == PHASE_REG

    @property
    def is_postseason(self) -> bool:
        return self.phase == PHASE_POST

    def as_dict(self) -> dict:
        out = asdict(self)
        out["is_preseason"] = self.is_preseason
        out["is_regular_season"] = self.is_regular_season
        out["is_postseason"] = self.is_postseason
        return out


def _default_cutoff(season_year: int) -> datetime:
    month, day = DEFAULT_PRESEASON_CUTOFF
    return datetime(season_year, month, day, tzinfo=timezone.utc)


def _info(phase: str, week: int, season_year: int, cutoff: datetime, reason: str) -> SeasonInfo:
    week = max(1, int(week))
    return SeasonInfo(
        phase=phase,
        week=week,
        label=season_label(phase, week),
        season_year=season_year,
        preseason_cutoff=cutoff,
        reason=reason,
    )


def _group_by_week(matchups: Iterable) -> Dict[str, Dict[int, List]]:
    """phase -> phase_week -> rows. Rows with an unreadable label are ignored."""
    out: Dict[str, Dict[int, List]] = defaultdict(lambda: defaultdict(list))
    for m in matchups:
        try:
            phase, phase_week = parse_season_label(m.season_label)
        except ValueError:
            logger.warning("Ignoring matchup %s with bad season label %r", getattr(m, "id", None), m.season_label)
            continue
        out[phase][phase_week].append(m)
    return out


def compute_preseason_cutoff(
    pre_kickoffs: List[datetime],
    reg_kickoffs: List[datetime],
    season_year: int,
) -> datetime:
    margin = timedelta(days=PRESEASON_CUTOFF_MARGIN_DAYS)
    if pre_kickoffs and reg_kickoffs:
        return min(reg_kickoffs) - margin
    if pre_kickoffs:
        return max(pre_kickoffs) + margin
    return _default_cutoff(season_year)


def _kickoffs(weeks: Dict[int, List]) -> List[datetime]:
    return [as_utc(m.kickoff_at) for rows in weeks.values() for m in rows if m.kickoff_at is not None]


def _has_outstanding(rows: List) -> bool:
    return any(m.status != "final" for m in rows)


def resolve_season(
    matchups: Iterable,
    now: Optional[datetime] = None,
    fallback_week: Optional[int] = None,
) -> SeasonInfo:
    """
    Infer phase + week from the matchups observed so far.

    `matchups` only needs `season_label`, `kickoff_at` and `status` attributes.
    `fallback_week` is the stored "current week" (a REG week), used only when
    the data cannot answer. Never raises for any input population.
    """
    now = as_utc(now) if now is not None else utcnow()
    fb_week = fallback_week if fallback_week and fallback_week >= 1 else 1

    by_phase = _group_by_week(matchups)

    if not any(by_phase.values()):
        year = now.year
        return _info(PHASE_REG, fb_week, year, _default_cutoff(year), "No matchups stored; using fallback week")

    pre = by_phase.get(PHASE_PRE, {})
    reg = by_phase.get(PHASE_REG, {})
    post = by_phase.get(PHASE_POST, {})

    all_kickoffs = _kickoffs(pre) + _kickoffs(reg) + _kickoffs(post)
    season_year = season_year_for(min(all_kickoffs)) if all_kickoffs else now.year

    cutoff = compute_preseason_cutoff(_kickoffs(pre), _kickoffs(reg), season_year)

    logger.debug(
        "Season analysis now=%s cutoff=%s season_year=%s weeks=%s",
        now.isoformat(), cutoff.isoformat(), season_year,
        {p: sorted(w.keys()) for p, w in by_phase.items()},
    )

    if now < cutoff:
        return _resolve_preseason(pre, now, season_year, cutoff, fb_week)
    return _resolve_in_season(reg, post, season_year, cutoff, fb_week)


def _resolve_preseason(pre, now, season_year, cutoff, fb_week) -> SeasonInfo:
    if not pre:
        return _info(
            PHASE_REG, fb_week, season_year, cutoff,
            "Preseason period but no preseason games stored; using regular season fallback week",
        )

    upcoming = [
        w for w, rows in pre.items()
        if any(m.status == "scheduled" and m.kickoff_at is not None and as_utc(m.kickoff_at) >= now for m in rows)
    ]
    if upcoming:
        w = min(upcoming)
        return _info(PHASE_PRE, w, season_year, cutoff, f"Preseason week {w} has scheduled games ahead")

    future = [
        w for w, rows in pre.items()
        if any(m.kickoff_at is not None and as_utc(m.kickoff_at) >= now for m in rows)
    ]
    if future:
        w = min(future)
        return _info(PHASE_PRE, w, season_year, cutoff, f"Next preseason week with future kickoffs: {w}")

    w = max(pre.keys())
    return _info(PHASE_PRE, w, season_year, cutoff, f"All preseason kickoffs are past; last preseason week {w}")


def _first_open_week(weeks) -> Optional[int]:
    for w in sorted(weeks.keys()):
        if _has_outstanding(weeks[w]):
            return w
    return None


def _resolve_in_season(reg, post, season_year, cutoff, fb_week) -> SeasonInfo:
    w = _first_open_week(post)
    if w is not None:
        return _info(PHASE_POST, w, season_year, cutoff, f"Postseason week {w} has non-final games")

    w = _first_open_week(reg)
    if w is not None:
        return _info(PHASE_REG, w, season_year, cutoff, f"Regular season week {w} has non-final games")

    if reg:
        w = max(reg.keys())
        return _info(PHASE_REG, w, season_year, cutoff, f"All weeks are final; using last regular season week {w}")

    return _info(
        PHASE_REG, fb_week, season_year, cutoff,
        "After preseason cutoff and no open or final regular season week; using fallback week",
    )


def season_info_for_label(label: str, season_year: int) -> SeasonInfo:
    """SeasonInfo pinned to an explicit week, e.g. to reconcile a past week."""
    phase, phase_week = parse_season_label(label)
    return _info(phase, phase_week, season_year, _default_cutoff(season_year), f"Explicit week {label}")


# ============================
# DB-facing helpers
# ============================

def get_stored_current_week(db: Session) -> Optional[int]:
    st = (
        db.query(SeasonState)
        .filter(SeasonState.current_week.isnot(None))
        .order_by(SeasonState.season_year.desc())
        .first()
    )
    if st is not None:
        return st.current_week
    return settings.CURRENT_WEEK_FALLBACK


def load_season_matchups(db: Session) -> List[Matchup]:
    """Matchups of the most recent season year stored."""
    latest_year = db.query(func.max(Matchup.season_year)).scalar()
    if latest_year is None:
        return []
    return db.query(Matchup).filter(Matchup.season_year == latest_year).all()


def get_current_season_info(
    db: Session,
    now: Optional[datetime] = None,
    fallback_week: Optional[int] = None,
) -> SeasonInfo:
    if fallback_week is None:
        fallback_week = get_stored_current_week(db)
    return resolve_season(load_season_matchups(db), now=now, fallback_week=fallback_week)


def store_resolved_week(db: Session, now: Optional[datetime] = None) -> SeasonInfo:
    """Resolve and persist the result in SeasonState for its season year."""
    info = get_current_season_info(db, now=now)

    st = db.query(SeasonState).filter_by(season_year=info.season_year).first()
    if st is None:
        st = SeasonState(season_year=info.season_year)
        db.add(st)

    # current_week is read back as a REG week, so only REG results overwrite it
    if info.is_regular_season:
        st.current_week = info.week
    st.last_resolved_label = info.label
    st.updated_at = utcnow()
    db.commit()

    logger.info("Stored resolved week %s for season %s (%s)", info.label, info.season_year, info.reason)
    return info
