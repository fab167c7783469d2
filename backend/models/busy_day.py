"""Busy day model definitions."""

from sqlalchemy import Column, Date, DateTime, Integer, func
from backend.database import Base


class BusyDay(Base):
    """A whole calendar date closed to bookings."""
    __tablename__ = "busy_days"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False, unique=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
