"""Business-calendar predicates for appointment requests.

Nothing in this module reads the current time; the engine passes in the
instant it obtained from its clock.
"""

from datetime import date, datetime, time

from backend.core import config
from backend.core.errors import DeadlineViolation

SUBMISSION_CUTOFF = time(config.SUBMISSION_CUTOFF_HOUR, 0)
BREAK_START = time(config.BREAK_START_HOUR, 0)
BREAK_END = time(config.BREAK_END_HOUR, 0) if config.BREAK_END_HOUR < 24 else time.max


def intervals_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    # Half-open ranges; touching endpoints do not overlap.
    return a_start < b_end and a_end > b_start


def as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def project_time_onto(day: date, instant: datetime | time) -> datetime:
    """Keeps the time-of-day of ``instant`` and moves it onto ``day``."""
    time_of_day = instant.time() if isinstance(instant, datetime) else instant
    return datetime.combine(as_date(day), time_of_day.replace(tzinfo=None))


def is_eligible_weekday(day: date | datetime) -> bool:
    return as_date(day).weekday() < 5


def is_before_cutoff(instant: datetime) -> bool:
    return instant.time() < SUBMISSION_CUTOFF


def break_window_for(start: datetime) -> tuple[datetime, datetime]:
    return datetime.combine(start.date(), BREAK_START), datetime.combine(start.date(), BREAK_END)


def overlaps_break_window(start: datetime, end: datetime) -> bool:
    break_start, break_end = break_window_for(start)
    return intervals_overlap(start, end, break_start, break_end)


def validate_submission_deadline(appointment_date: date | datetime, request_instant: datetime) -> None:
    if not is_eligible_weekday(appointment_date):
        raise DeadlineViolation('Appointments can only be scheduled on weekdays (Monday-Friday).')

    # The cutoff only applies to same-day bookings.
    if as_date(appointment_date) == request_instant.date() and not is_before_cutoff(request_instant):
        raise DeadlineViolation(
            f'Appointments for today must be requested before {SUBMISSION_CUTOFF:%I:%M %p}. '
            'Please schedule for a future date.'
        )
