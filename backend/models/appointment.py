"""Appointment model definitions."""

import enum

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from backend.database import Base


class AppointmentStatus(str, enum.Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'


class Appointment(Base):
    """Represents a requested meeting with an organizational unit."""
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    full_name = Column(String, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    unit_id = Column(Integer, ForeignKey("units.id"), nullable=False)
    appointment_date = Column(Date, nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(String, nullable=False, default=AppointmentStatus.PENDING.value)
    agenda = Column(Text, nullable=True)
    email = Column(String, nullable=True)
    created_by = Column(String, nullable=True)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    unit = relationship("Unit", lazy="joined")
    user = relationship("User", lazy="joined")

    def __repr__(self):
        return f"<Appointment {self.id} {self.appointment_date} {self.status}>"
