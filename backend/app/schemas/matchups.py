from datetime import datetime, timezone
from typing import Optional, Union

from dateutil import parser as dtparser
from pydantic import BaseModel, Field, field_validator

from app.services.allocation_codec import normalize_team
from app.services.week_mapping import normalize_phase

# feed status vocabularies (ESPN state names, SportsData names) -> ours
_STATUS_MAP = {
    "scheduled": "scheduled",
    "pre": "scheduled",
    "postponed": "scheduled",
    "delayed": "scheduled",
    "live": "live",
    "in": "live",
    "inprogress": "live",
    "final": "final",
    "post": "final",
    "f/ot": "final",
}


class ExternalGame(BaseModel):
    """One game as reported by the external schedule feed (feed numbering)."""

    away_team: str = Field(min_length=1)
    home_team: str = Field(min_length=1)
    season_type: str = "REG"  # PRE / REG / POST, or ESPN seasontype 1 / 2 / 3
    week: int = Field(ge=1)
    kickoff_at: Optional[datetime] = None
    status: str = "scheduled"
    away_score: Optional[int] = None
    home_score: Optional[int] = None
    external_id: Optional[str] = None

    @field_validator("away_team", "home_team")
    @classmethod
    def _team(cls, v: str) -> str:
        return normalize_team(v)

    @field_validator("season_type", mode="before")
    @classmethod
    def _season_type(cls, v: Union[str, int]) -> str:
        return normalize_phase(v)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v) -> str:
        key = str(v or "").strip().lower().replace(" ", "")
        # unknown feed states count as not started
        return _STATUS_MAP.get(key, "scheduled")

    @field_validator("kickoff_at", mode="before")
    @classmethod
    def _kickoff(cls, v):
        if v is None or v == "":
            return None
        if isinstance(v, str):
            v = dtparser.isoparse(v)
        if isinstance(v, datetime):
            if v.tzinfo is None:
                return v.replace(tzinfo=timezone.utc)
            return v.astimezone(timezone.utc)
        return v


class MatchupOut(BaseModel):
    id: int
    season_year: int
    phase: str
    week: int
    season_label: str
    away_team: str
    home_team: str
    kickoff_at: Optional[datetime] = None
    status: str
    away_score: Optional[int] = None
    home_score: Optional[int] = None
    winner: Optional[str] = None

    model_config = {"from_attributes": True}


class ReconcileOut(BaseModel):
    season_label: str
    created: int
    updated: int
    unchanged: int
    warnings: list[str] = []
