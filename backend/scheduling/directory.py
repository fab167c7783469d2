"""Unit and user lookups the engine needs but does not own."""

from typing import Protocol

from sqlalchemy.orm import Session

from backend.models.unit import Unit
from backend.models.user import User


class Directory(Protocol):
    def is_unit_active(self, unit_id: int) -> bool:
        ...

    def user_exists(self, user_id: int) -> bool:
        ...

    def get_user_email(self, user_id: int) -> str | None:
        ...


class DatabaseDirectory:
    def __init__(self, db: Session):
        self.db = db

    def is_unit_active(self, unit_id: int) -> bool:
        unit = self.db.query(Unit).filter(Unit.id == unit_id).first()
        return unit is not None and bool(unit.is_active)

    def user_exists(self, user_id: int) -> bool:
        return self.db.query(User.id).filter(User.id == user_id).first() is not None

    def get_user_email(self, user_id: int) -> str | None:
        row = self.db.query(User.email).filter(User.id == user_id).first()
        return row[0] if row else None
