# app/core/game_config.py
# Season shape of the NFL pool. Everything week-related reads from here.

PHASE_PRE = "PRE"
PHASE_REG = "REG"
PHASE_POST = "POST"

# natural season order
PHASES = (PHASE_PRE, PHASE_REG, PHASE_POST)

REGULAR_SEASON_WEEKS = 18

# POST1 is stored as local week 19 (18 + 1) ... POST4 as 22
POSTSEASON_WEEK_OFFSET = REGULAR_SEASON_WEEKS

# ESPN "seasontype" query values
ESPN_SEASON_TYPES = {
    PHASE_PRE: 1,
    PHASE_REG: 2,
    PHASE_POST: 3,
}

# Used when there are no PRE games to derive the cutoff from (month, day)
DEFAULT_PRESEASON_CUTOFF = (8, 26)
PRESEASON_CUTOFF_MARGIN_DAYS = 7

# NFL seasons start in August; earlier months belong to the previous season
SEASON_START_MONTH = 8

# Kickoff changes below this are formatting jitter, not reschedules
KICKOFF_TOLERANCE_SECONDS = 60

WINNER_SIDES = ("away", "home", "tie")
