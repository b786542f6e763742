# app/services/week_mapping.py
"""
Week arithmetic shared by the resolver, the reconciler and pick allocation.

Three numberings coexist:
  - feed week:   what the external schedule reports, restarting at 1 per phase
  - local week:  what is stored on Matchup.week; PRE n -> n, REG n -> n,
                 POST n -> POSTSEASON_WEEK_OFFSET + n (so POST1 = 19)
  - phase week:  the number inside the season label ("POST1" -> 1)
"""
from __future__ import annotations

import re
from datetime import datetime
from typing import Tuple

from app.core.game_config import (
    ESPN_SEASON_TYPES,
    PHASE_POST,
    PHASES,
    POSTSEASON_WEEK_OFFSET,
    SEASON_START_MONTH,
)

LABEL_RE = re.compile(r"^(PRE|REG|POST)(\d{1,2})$")

_ESPN_TYPE_TO_PHASE = {v: k for k, v in ESPN_SEASON_TYPES.items()}


def normalize_phase(value) -> str:
    """Accept "REG", "reg", 2 or "2" (ESPN seasontype) and return PRE/REG/POST."""
    if isinstance(value, int) and not isinstance(value, bool):
        phase = _ESPN_TYPE_TO_PHASE.get(value)
    else:
        s = str(value or "").strip().upper()
        phase = _ESPN_TYPE_TO_PHASE.get(int(s)) if s.isdigit() else s
    if phase not in PHASES:
        raise ValueError(f"Unknown season phase: {value!r}")
    return phase


def season_label(phase: str, phase_week: int) -> str:
    return f"{phase}{int(phase_week)}"


def parse_season_label(label: str) -> Tuple[str, int]:
    m = LABEL_RE.match((label or "").strip().upper())
    if not m:
        raise ValueError(f"Invalid season label: {label!r}")
    return m.group(1), int(m.group(2))


def to_local_week(phase: str, phase_week: int) -> int:
    """Feed/phase week -> stored week. Total: every phase/week maps to exactly one value."""
    if phase == PHASE_POST:
        return POSTSEASON_WEEK_OFFSET + int(phase_week)
    return int(phase_week)


def translate_feed_week(season_type, feed_week: int) -> Tuple[str, int, str]:
    """(feed season type, feed week) -> (phase, local week, season label)."""
    phase = normalize_phase(season_type)
    week = int(feed_week)
    if week < 1:
        raise ValueError(f"Invalid feed week: {feed_week!r}")
    return phase, to_local_week(phase, week), season_label(phase, week)


def season_year_for(kickoff: datetime) -> int:
    # Aug-Dec -> that year; Jan-Jul -> previous year's season
    if kickoff.month >= SEASON_START_MONTH:
        return kickoff.year
    return kickoff.year - 1


def season_sort_key(label: str) -> Tuple[int, int]:
    phase, phase_week = parse_season_label(label)
    return PHASES.index(phase), phase_week
