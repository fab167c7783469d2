"""Busy time slot model definitions."""

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Integer, Text, func
from backend.database import Base


class BusyTimeSlot(Base):
    """A time range within a single date closed to bookings."""
    __tablename__ = "busy_time_slots"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    reason = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint('start_time < end_time', name='chk_busy_time_slot_range'),
    )
