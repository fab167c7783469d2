from datetime import date, datetime
from typing import Iterable

from sqlalchemy.orm import Session

from backend.core.errors import InvalidInput
from backend.models.appointment import Appointment, AppointmentStatus
from backend.scheduling.calendar_rules import as_date


def check_time_range(appointment_date: date, start_time: datetime, end_time: datetime) -> None:
    if start_time >= end_time:
        raise InvalidInput('Start time must be before end time.')

    if start_time.date() != appointment_date or end_time.date() != appointment_date:
        raise InvalidInput('Start time and end time must be on the same date as the appointment date.')


class AppointmentStore:
    """Query and write primitives for appointment rows.

    Writes are flushed but never committed here; the scheduling engine owns
    the surrounding transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, appointment_id: int) -> Appointment | None:
        return self.db.query(Appointment).filter(Appointment.id == appointment_id).first()

    def find_all(
        self,
        status: str | None = None,
        day: date | None = None,
        unit_id: int | None = None,
        user_id: int | None = None,
        is_deleted: bool = False,
    ) -> list[Appointment]:
        query = self.db.query(Appointment).filter(Appointment.is_deleted.is_(is_deleted))

        if status:
            query = query.filter(Appointment.status == status)
        if day is not None:
            query = query.filter(Appointment.appointment_date == as_date(day))
        if unit_id is not None:
            query = query.filter(Appointment.unit_id == unit_id)
        if user_id is not None:
            query = query.filter(Appointment.user_id == user_id)

        return query.order_by(Appointment.created_at.desc(), Appointment.id.desc()).all()

    def list_for_day(self, day: date, statuses: Iterable[str]) -> list[Appointment]:
        return self.db.query(Appointment).filter(
            Appointment.appointment_date == as_date(day),
            Appointment.is_deleted.is_(False),
            Appointment.status.in_(tuple(statuses)),
        ).order_by(Appointment.start_time.asc(), Appointment.id.asc()).all()

    def find_conflicting(
        self,
        day: date,
        start_time: datetime,
        end_time: datetime,
        exclude_id: int | None = None,
    ) -> list[Appointment]:
        # Only approved appointments reserve a slot.
        query = self.db.query(Appointment).filter(
            Appointment.appointment_date == as_date(day),
            Appointment.is_deleted.is_(False),
            Appointment.status == AppointmentStatus.APPROVED.value,
            Appointment.start_time < end_time,
            Appointment.end_time > start_time,
        )

        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)

        return query.order_by(Appointment.start_time.asc(), Appointment.id.asc()).all()

    def create(self, **fields) -> Appointment:
        check_time_range(fields['appointment_date'], fields['start_time'], fields['end_time'])

        appointment = Appointment(**fields)
        self.db.add(appointment)
        self.db.flush()
        return appointment

    def update(self, appointment: Appointment, **fields) -> Appointment:
        check_time_range(
            fields.get('appointment_date', appointment.appointment_date),
            fields.get('start_time', appointment.start_time),
            fields.get('end_time', appointment.end_time),
        )

        for key, value in fields.items():
            setattr(appointment, key, value)

        self.db.flush()
        return appointment

    def soft_delete(self, appointment: Appointment) -> Appointment:
        appointment.is_deleted = True
        self.db.flush()
        return appointment

    def hard_delete(self, appointment: Appointment) -> None:
        self.db.delete(appointment)
        self.db.flush()
