from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class PickCreate(BaseModel):
    owner_id: str = Field(min_length=1)
    unit_count: int = Field(default=1, ge=1)
    display_name: str | None = Field(default=None, max_length=80)


class AllocateIn(BaseModel):
    matchup_id: Optional[int] = None
    team: Optional[str] = None
    # legacy "<matchupId>_<team>" form
    token: Optional[str] = None

    @model_validator(mode="after")
    def _one_form(self):
        if self.token is None and (self.matchup_id is None or not self.team):
            raise ValueError("Provide matchup_id + team, or token")
        return self


class AllocationOut(BaseModel):
    season_label: str
    matchup_id: int
    team: str
    token: str
    allocated_at: datetime
    result: str | None = None
    settled_at: datetime | None = None

    model_config = {"from_attributes": True}


class PickOut(BaseModel):
    id: int
    owner_id: str
    unit_count: int
    status: str
    display_name: str | None = None
    created_at: datetime
    updated_at: datetime
    allocations: list[AllocationOut] = []

    model_config = {"from_attributes": True}


class SettleOut(BaseModel):
    matchups_processed: int
    picks_updated: int
    owner_ids: list[str] = []
    warnings: list[str] = []


class OwnerSummaryOut(BaseModel):
    owner_id: str
    state: str
    pending_units: int
    active_units: int
    safe_units: int
    eliminated_units: int


class DefaultPickIn(BaseModel):
    matchup_id: int
    team: str = Field(min_length=1)


class DefaultPickOut(BaseModel):
    season_label: str
    matchup_id: int
    team: str
    picks_assigned: int
    pick_ids: list[int] = []
    first_kickoff: Optional[datetime] = None
    reason: str


class TeamPicksOut(BaseModel):
    team: str
    side: str
    picks: int
    units: int


class MatchupPicksOut(BaseModel):
    matchup_id: int
    season_label: str
    owner_id: Optional[str] = None
    teams: list[TeamPicksOut]
