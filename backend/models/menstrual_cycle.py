"""Menstrual cycle tracking model definitions."""

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from backend.database import Base


class MenstrualCycle(Base):
    """Per-user tracking settings and the latest predictions."""
    __tablename__ = "menstrual_cycles"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True, index=True)
    is_tracking = Column(Boolean, nullable=False, default=True)
    average_cycle_length = Column(Integer, nullable=False, default=28)
    average_period_length = Column(Integer, nullable=False, default=5)
    last_period_start_date = Column(Date)
    last_period_end_date = Column(Date)
    next_period_date = Column(Date)
    ovulation_date = Column(Date)
    fertile_window_start = Column(Date)
    fertile_window_end = Column(Date)
    cycle_regularity = Column(String, nullable=False, default="unknown")  # regular/irregular/unknown
    last_updated = Column(DateTime, server_default=func.now(), onupdate=func.now())

    entries = relationship(
        "CycleEntry",
        order_by="CycleEntry.id",
        cascade="all, delete-orphan",
    )


class CycleEntry(Base):
    """One logged period, in logging order."""
    __tablename__ = "menstrual_cycle_entries"

    id = Column(Integer, primary_key=True)
    tracker_id = Column(Integer, ForeignKey("menstrual_cycles.id"), nullable=False, index=True)
    period_start_date = Column(Date, nullable=False)
    period_end_date = Column(Date)
    cycle_length = Column(Integer)
    period_length = Column(Integer)
    symptoms = Column(JSON)
    flow_intensity = Column(JSON)
    notes = Column(String)
