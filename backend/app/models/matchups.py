from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    UniqueConstraint,
    Index,
)

from app.core.timeutils import utcnow
from app.services.week_mapping import parse_season_label
from app.db.base import Base


class Matchup(Base):
    __tablename__ = "matchups"

    id = Column(Integer, primary_key=True)

    season_year = Column(Integer, nullable=False, index=True)
    phase = Column(String, nullable=False)                 # PRE / REG / POST
    week = Column(Integer, nullable=False)                 # local wide week (POST1 = 19)
    season_label = Column(String, nullable=False, index=True)  # e.g. "REG3", "POST1"

    away_team = Column(String, nullable=False)
    home_team = Column(String, nullable=False)

    kickoff_at = Column(DateTime(timezone=True), nullable=True)
    status = Column(String, nullable=False, default="scheduled")  # scheduled / live / final

    away_score = Column(Integer, nullable=True)
    home_score = Column(Integer, nullable=True)
    winner = Column(String, nullable=True)  # away / home / tie

    external_id = Column(String, nullable=True)
    last_feed_update = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint(
            "away_team",
            "home_team",
            "season_label",
            name="uq_matchup_teams_label",
        ),
        Index("ix_matchup_status", "status"),
    )

    @property
    def phase_week(self) -> int:
        return parse_season_label(self.season_label)[1]

    def team_for_side(self, side: str):
        if side == "away":
            return self.away_team
        if side == "home":
            return self.home_team
        return None

    def resolved_winner(self):
        """Stored winner, or derived from the scores when the column is empty."""
        if self.winner:
            return self.winner
        return winner_from_scores(self.away_score, self.home_score)


def winner_from_scores(away_score, home_score):
    if away_score is None or home_score is None:
        return None
    if away_score > home_score:
        return "away"
    if home_score > away_score:
        return "home"
    return "tie"
