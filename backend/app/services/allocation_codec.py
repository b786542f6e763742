# app/services/allocation_codec.py
# Legacy "<matchupId>_<team>" token used by older clients.
# Matchup ids are integers, so the first "_" is always the separator and
# anything after it (underscores included) is the team.
from __future__ import annotations

from typing import Tuple

SEPARATOR = "_"


def encode_allocation(matchup_id: int, team: str) -> str:
    if not team:
        raise ValueError("team is required")
    return f"{int(matchup_id)}{SEPARATOR}{team}"


def parse_allocation_token(token: str) -> Tuple[int, str]:
    raw = token or ""
    head, sep, team = raw.partition(SEPARATOR)
    if not sep or not head.isdigit() or not team:
        raise ValueError(f"Unparseable allocation token: {token!r}")
    return int(head), team


def normalize_team(team: str) -> str:
    """Stored team names are trimmed upper case ("Eagles " -> "EAGLES")."""
    return (team or "").strip().upper()
