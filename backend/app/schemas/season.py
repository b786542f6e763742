from datetime import datetime

from pydantic import BaseModel


class SeasonInfoOut(BaseModel):
    phase: str
    week: int
    label: str
    season_year: int
    preseason_cutoff: datetime
    reason: str
    is_preseason: bool
    is_regular_season: bool
    is_postseason: bool
