"""Unit model definitions."""

from sqlalchemy import Boolean, Column, Integer, String
from backend.database import Base


class Unit(Base):
    """An organizational unit that receives appointments."""
    __tablename__ = "units"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
