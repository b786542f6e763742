from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.core.timeutils import utcnow
from app.services.allocation_codec import encode_allocation
from app.db.base import Base


class Pick(Base):
    __tablename__ = "picks"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String, nullable=False, index=True)

    unit_count = Column(Integer, nullable=False, default=1)
    status = Column(String, nullable=False, default="pending")  # pending / active / safe / eliminated
    display_name = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    allocations = relationship(
        "PickAllocation",
        back_populates="pick",
        cascade="all, delete-orphan",
        order_by="PickAllocation.allocated_at",
    )

    __table_args__ = (
        CheckConstraint("unit_count >= 1", name="ck_pick_unit_count"),
        Index("ix_pick_owner_status", "owner_id", "status"),
    )

    def allocation_for(self, season_label: str):
        for a in self.allocations:
            if a.season_label == season_label:
                return a
        return None


class PickAllocation(Base):
    """One pick -> one team of one matchup, for one season label."""

    __tablename__ = "pick_allocations"

    id = Column(Integer, primary_key=True)
    pick_id = Column(Integer, ForeignKey("picks.id", ondelete="CASCADE"), nullable=False, index=True)
    season_label = Column(String, nullable=False)
    matchup_id = Column(Integer, ForeignKey("matchups.id"), nullable=False, index=True)
    team = Column(String, nullable=False)

    allocated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # filled by the settlement sweep
    result = Column(String, nullable=True)  # safe / eliminated
    settled_at = Column(DateTime(timezone=True), nullable=True)

    pick = relationship("Pick", back_populates="allocations")

    __table_args__ = (
        UniqueConstraint("pick_id", "season_label", name="uq_allocation_pick_label"),
        Index("ix_allocation_label_matchup", "season_label", "matchup_id"),
    )

    @property
    def token(self) -> str:
        return encode_allocation(self.matchup_id, self.team)
