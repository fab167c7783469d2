from datetime import date, datetime, time

import pytest

from backend.core.errors import DeadlineViolation
from backend.scheduling.calendar_rules import (
    intervals_overlap,
    is_before_cutoff,
    is_eligible_weekday,
    overlaps_break_window,
    project_time_onto,
    validate_submission_deadline,
)


def test_intervals_overlap_treats_ranges_as_half_open() -> None:
    nine = datetime(2026, 1, 5, 9, 0)
    ten = datetime(2026, 1, 5, 10, 0)
    eleven = datetime(2026, 1, 5, 11, 0)

    assert intervals_overlap(nine, ten, datetime(2026, 1, 5, 9, 30), eleven)
    assert intervals_overlap(nine, eleven, ten, datetime(2026, 1, 5, 10, 30))
    assert not intervals_overlap(nine, ten, ten, eleven)
    assert not intervals_overlap(ten, eleven, nine, ten)


@pytest.mark.parametrize(
    ('day', 'expected'),
    [
        (date(2026, 1, 5), True),
        (date(2026, 1, 7), True),
        (date(2026, 1, 9), True),
        (date(2026, 1, 10), False),
        (date(2026, 1, 11), False),
    ],
)
def test_is_eligible_weekday(day: date, expected: bool) -> None:
    assert is_eligible_weekday(day) is expected
    assert is_eligible_weekday(datetime.combine(day, time(10, 0))) is expected


@pytest.mark.parametrize(
    ('instant', 'expected'),
    [
        (datetime(2026, 1, 5, 8, 0), True),
        (datetime(2026, 1, 5, 13, 59, 59), True),
        (datetime(2026, 1, 5, 14, 0), False),
        (datetime(2026, 1, 5, 16, 30), False),
    ],
)
def test_is_before_cutoff(instant: datetime, expected: bool) -> None:
    assert is_before_cutoff(instant) is expected


@pytest.mark.parametrize(
    ('start', 'end', 'expected'),
    [
        (time(11, 30), time(12, 30), True),
        (time(12, 0), time(13, 0), True),
        (time(12, 15), time(12, 45), True),
        (time(11, 0), time(14, 0), True),
        (time(13, 0), time(14, 0), False),
        (time(11, 0), time(12, 0), False),
    ],
)
def test_overlaps_break_window(start: time, end: time, expected: bool) -> None:
    day = date(2026, 1, 6)

    assert overlaps_break_window(datetime.combine(day, start), datetime.combine(day, end)) is expected


def test_project_time_onto_keeps_time_of_day() -> None:
    projected = project_time_onto(date(2026, 2, 2), datetime(2026, 1, 5, 9, 45))

    assert projected == datetime(2026, 2, 2, 9, 45)
    assert project_time_onto(date(2026, 2, 2), time(15, 0)) == datetime(2026, 2, 2, 15, 0)


def test_validate_submission_deadline_rejects_weekend_at_any_hour() -> None:
    with pytest.raises(DeadlineViolation, match='weekdays'):
        validate_submission_deadline(date(2026, 1, 10), datetime(2026, 1, 5, 8, 0))


def test_validate_submission_deadline_rejects_same_day_after_cutoff() -> None:
    with pytest.raises(DeadlineViolation, match='before 02:00 PM'):
        validate_submission_deadline(date(2026, 1, 5), datetime(2026, 1, 5, 14, 0))


def test_validate_submission_deadline_accepts_same_day_before_cutoff() -> None:
    validate_submission_deadline(date(2026, 1, 5), datetime(2026, 1, 5, 13, 59))


def test_validate_submission_deadline_skips_cutoff_for_future_dates() -> None:
    validate_submission_deadline(date(2026, 1, 6), datetime(2026, 1, 5, 23, 0))
    validate_submission_deadline(date(2026, 1, 12), datetime(2026, 1, 9, 22, 30))
