import logging
from datetime import date, datetime, time, timedelta

from sqlalchemy.orm import Session

from backend.core.errors import AlreadyBlocked, InvalidInput
from backend.models.busy_day import BusyDay
from backend.models.busy_time_slot import BusyTimeSlot
from backend.scheduling.appointment_store import AppointmentStore
from backend.scheduling.calendar_rules import as_date, intervals_overlap, is_eligible_weekday, project_time_onto

logger = logging.getLogger(__name__)


class BlockedTimeStore:
    """Whole-day and sub-day exclusions. Flushes only; callers commit."""

    def __init__(self, db: Session, appointments: AppointmentStore | None = None):
        self.db = db
        self.appointments = appointments or AppointmentStore(db)

    # Busy days

    def get_busy_day(self, day: date) -> BusyDay | None:
        return self.db.query(BusyDay).filter(BusyDay.date == as_date(day)).first()

    def is_day_blocked(self, day: date) -> bool:
        return self.get_busy_day(day) is not None

    def block_day(self, day: date) -> BusyDay:
        busy_day = self.get_busy_day(day)
        if busy_day is not None:
            return busy_day

        busy_day = BusyDay(date=as_date(day))
        self.db.add(busy_day)
        self.db.flush()
        return busy_day

    def unblock_day(self, day: date) -> BusyDay | None:
        busy_day = self.get_busy_day(day)
        if busy_day is None:
            return None

        self.db.delete(busy_day)
        self.db.flush()
        return busy_day

    def list_busy_days(self, start: date | None = None, end: date | None = None) -> list[BusyDay]:
        query = self.db.query(BusyDay)
        if start is not None:
            query = query.filter(BusyDay.date >= as_date(start))
        if end is not None:
            query = query.filter(BusyDay.date <= as_date(end))
        return query.order_by(BusyDay.date.asc()).all()

    # Busy time slots

    def list_slots_for_date(self, day: date) -> list[BusyTimeSlot]:
        return self.db.query(BusyTimeSlot).filter(
            BusyTimeSlot.date == as_date(day),
        ).order_by(BusyTimeSlot.start_time.asc()).all()

    def list_slots(self, start: date | None = None, end: date | None = None) -> list[BusyTimeSlot]:
        query = self.db.query(BusyTimeSlot)
        if start is not None:
            query = query.filter(BusyTimeSlot.date >= as_date(start))
        if end is not None:
            query = query.filter(BusyTimeSlot.date <= as_date(end))
        return query.order_by(BusyTimeSlot.date.asc(), BusyTimeSlot.start_time.asc()).all()

    def is_slot_blocked(self, day: date, start_time: datetime, end_time: datetime) -> bool:
        return any(
            intervals_overlap(start_time, end_time, slot.start_time, slot.end_time)
            for slot in self.list_slots_for_date(day)
        )

    def block_slot(
        self,
        day: date,
        start_time: datetime | time,
        end_time: datetime | time,
        reason: str | None = None,
    ) -> BusyTimeSlot:
        day = as_date(day)
        start_time = project_time_onto(day, start_time)
        end_time = project_time_onto(day, end_time)

        if end_time <= start_time:
            raise InvalidInput('End time must be after start time.')

        if self.is_slot_blocked(day, start_time, end_time):
            raise AlreadyBlocked('This time slot is already marked as busy.')

        slot = BusyTimeSlot(date=day, start_time=start_time, end_time=end_time, reason=reason)
        self.db.add(slot)
        self.db.flush()
        return slot

    def get_slot(self, slot_id: int) -> BusyTimeSlot | None:
        return self.db.query(BusyTimeSlot).filter(BusyTimeSlot.id == slot_id).first()

    def unblock_slot(self, slot_id: int) -> BusyTimeSlot | None:
        slot = self.get_slot(slot_id)
        if slot is None:
            return None

        self.db.delete(slot)
        self.db.flush()
        return slot

    # Rescheduling search

    def find_next_available_date(
        self,
        from_day: date,
        desired_start: datetime,
        desired_end: datetime,
        horizon_days: int,
        skip_weekends: bool = False,
    ) -> date | None:
        """Returns the first day in ``[from_day, from_day + horizon_days]`` that
        is not blocked and has no approved appointment overlapping the desired
        time-of-day range, or ``None``.

        Each candidate costs one conflict query, so the horizon bounds the work.
        """
        from_day = as_date(from_day)
        last_day = from_day + timedelta(days=horizon_days)
        busy_dates = {busy_day.date for busy_day in self.list_busy_days(from_day, last_day)}

        for offset in range(horizon_days + 1):
            candidate = from_day + timedelta(days=offset)

            if candidate in busy_dates:
                continue
            if skip_weekends and not is_eligible_weekday(candidate):
                continue

            candidate_start = project_time_onto(candidate, desired_start)
            candidate_end = project_time_onto(candidate, desired_end)
            if not self.appointments.find_conflicting(candidate, candidate_start, candidate_end):
                return candidate

        logger.debug('No free date within %s days of %s', horizon_days, from_day)
        return None
