# Import the models here so SQLAlchemy "sees" them when creating tables
from app.models.matchups import Matchup  # noqa: F401
from app.models.picks import Pick, PickAllocation  # noqa: F401
from app.models.season import SeasonState  # noqa: F401
