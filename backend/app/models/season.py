from sqlalchemy import Column, Integer, String, DateTime

from app.core.timeutils import utcnow
from app.db.base import Base


class SeasonState(Base):
    __tablename__ = "season_state"

    season_year = Column(Integer, primary_key=True)  # one row per season

    # stored "current week" used only as a resolver fallback
    current_week = Column(Integer, nullable=True)
    last_resolved_label = Column(String, nullable=True)

    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
