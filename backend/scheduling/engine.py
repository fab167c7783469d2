"""Appointment scheduling engine.

Validates booking requests against the business calendar and the two
exclusion layers (busy days and busy time slots), detects conflicts with
approved appointments, and runs the cascading reschedule when a day is
blocked after appointments were already booked on it.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Mapping

from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core import config
from backend.core.clock import SystemClock
from backend.core.errors import (
    BreakWindowViolation,
    DayBlocked,
    InvalidInput,
    NotFound,
    SchedulingConflict,
    SchedulingError,
    SlotBlocked,
)
from backend.models.appointment import Appointment, AppointmentStatus
from backend.models.busy_day import BusyDay
from backend.models.busy_time_slot import BusyTimeSlot
from backend.schemas.appointment import AppointmentCreate, AppointmentUpdate
from backend.scheduling import notifications
from backend.scheduling.appointment_store import AppointmentStore, check_time_range
from backend.scheduling.blocked_time import BlockedTimeStore
from backend.scheduling.calendar_rules import (
    BREAK_END,
    BREAK_START,
    as_date,
    overlaps_break_window,
    project_time_onto,
    validate_submission_deadline,
)
from backend.scheduling.directory import DatabaseDirectory, Directory

logger = logging.getLogger(__name__)

PENDING = AppointmentStatus.PENDING.value
APPROVED = AppointmentStatus.APPROVED.value
REJECTED = AppointmentStatus.REJECTED.value

RESCHEDULABLE_STATUSES = (PENDING, APPROVED)
TEMPORAL_FIELDS = ('appointment_date', 'start_time', 'end_time')
NULLABLE_FIELDS = {'user_id', 'agenda', 'email', 'created_by'}
FIELD_LABELS = {
    'full_name': 'Full name',
    'unit_id': 'Unit ID',
    'appointment_date': 'Appointment date',
    'start_time': 'Appointment start time',
    'end_time': 'Appointment end time',
    'status': 'Appointment status',
}
REQUIRED_FIELDS = ('full_name', 'unit_id', 'appointment_date', 'start_time', 'end_time')


@dataclass
class FailedMove:
    appointment_id: int
    appointment: Appointment
    reason: str


@dataclass
class BlockDayResult:
    busy_day: BusyDay
    moved_appointments: list[Appointment] = field(default_factory=list)
    failed_moves: list[FailedMove] = field(default_factory=list)

    @property
    def total_moved(self) -> int:
        return len(self.moved_appointments)

    @property
    def total_failed(self) -> int:
        return len(self.failed_moves)


@dataclass
class _RescheduleOutcome:
    appointment_id: int
    appointment: Appointment
    moved: bool
    reason: str | None = None


def _format_clock_time(value: datetime | time) -> str:
    return value.strftime('%I:%M %p')


def _first_error_message(exc: PydanticValidationError) -> str:
    error = exc.errors()[0]
    message = error['msg'].removeprefix('Value error, ')
    location = '.'.join(str(part) for part in error.get('loc', ()))
    return f'{location}: {message}' if location else message


class SchedulingEngine:
    def __init__(
        self,
        db: Session,
        clock=None,
        notifier: notifications.Notifier | None = None,
        directory: Directory | None = None,
        horizon_days: int | None = None,
        skip_weekends: bool | None = None,
    ):
        self.db = db
        self.clock = clock or SystemClock()
        self.notifier = notifier or notifications.get_notifier()
        self.directory = directory or DatabaseDirectory(db)
        self.appointments = AppointmentStore(db)
        self.blocked_time = BlockedTimeStore(db, self.appointments)
        self.horizon_days = config.RESCHEDULE_HORIZON_DAYS if horizon_days is None else horizon_days
        self.skip_weekends = config.RESCHEDULE_SKIP_WEEKENDS if skip_weekends is None else skip_weekends

    @contextmanager
    def _transaction(self):
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    # Validation helpers

    @staticmethod
    def _parse(model: type[BaseModel], data: BaseModel | Mapping[str, Any]):
        if isinstance(data, model):
            return data
        if isinstance(data, BaseModel):
            data = data.model_dump(exclude_unset=True)

        try:
            return model.model_validate(data)
        except PydanticValidationError as exc:
            raise InvalidInput(_first_error_message(exc)) from exc

    def _check_references(self, unit_id: int | None, user_id: int | None) -> None:
        if unit_id is not None and not self.directory.is_unit_active(unit_id):
            raise InvalidInput('Unit not found or inactive.')
        if user_id is not None and not self.directory.user_exists(user_id):
            raise InvalidInput('Linked user account not found.')

    def _check_calendar_policy(self, appointment_date: date, start_time: datetime, end_time: datetime) -> None:
        validate_submission_deadline(appointment_date, self.clock.now())

        if overlaps_break_window(start_time, end_time):
            raise BreakWindowViolation(
                f'Appointments cannot be scheduled during the break '
                f'({_format_clock_time(BREAK_START)} - {_format_clock_time(BREAK_END)}). '
                'Please choose a different time.'
            )

        if self.blocked_time.is_day_blocked(appointment_date):
            raise DayBlocked('This day is marked as busy. Appointments cannot be scheduled on this date.')

        if self.blocked_time.is_slot_blocked(appointment_date, start_time, end_time):
            raise SlotBlocked(
                'This time slot is marked as busy. Appointments cannot be scheduled during this time.'
            )

    def _check_conflicts(
        self,
        appointment_date: date,
        start_time: datetime,
        end_time: datetime,
        exclude_id: int | None = None,
    ) -> None:
        conflicts = self.appointments.find_conflicting(appointment_date, start_time, end_time, exclude_id)
        if not conflicts:
            return

        conflict = conflicts[0]
        raise SchedulingConflict(
            f'Time slot conflict: There is already an appointment scheduled from '
            f'{_format_clock_time(conflict.start_time)} to {_format_clock_time(conflict.end_time)} '
            'on this date. Please choose a different time.',
            conflicting_id=conflict.id,
            conflict_start=conflict.start_time.isoformat(),
            conflict_end=conflict.end_time.isoformat(),
        )

    def _notify(self, event: str, appointment: Appointment) -> None:
        # Delivery problems never undo a committed change.
        try:
            recipient = appointment.email
            if not recipient and appointment.user_id is not None:
                recipient = self.directory.get_user_email(appointment.user_id)

            if not recipient:
                logger.debug('No recipient for %s notification on appointment %s', event, appointment.id)
                return

            subject, body = notifications.build_status_message(event, appointment)
            self.notifier.send(recipient, subject, body)
        except Exception:
            logger.exception('Failed to send %s notification for appointment %s', event, appointment.id)

    def _get_or_raise(self, appointment_id: int) -> Appointment:
        appointment = self.appointments.get(appointment_id)
        if appointment is None:
            raise NotFound('Appointment not found.')
        return appointment

    # Appointments

    def get_appointment(self, appointment_id: int) -> Appointment:
        return self._get_or_raise(appointment_id)

    def list_appointments(
        self,
        status: str | None = None,
        day: date | None = None,
        unit_id: int | None = None,
        user_id: int | None = None,
        is_deleted: bool = False,
    ) -> list[Appointment]:
        return self.appointments.find_all(
            status=status,
            day=day,
            unit_id=unit_id,
            user_id=user_id,
            is_deleted=is_deleted,
        )

    def create_appointment(self, data: AppointmentCreate | Mapping[str, Any]) -> Appointment:
        data = self._parse(AppointmentCreate, data)

        for field_name in REQUIRED_FIELDS:
            if getattr(data, field_name) is None:
                raise InvalidInput(f'{FIELD_LABELS[field_name]} is required.')

        check_time_range(data.appointment_date, data.start_time, data.end_time)
        self._check_references(data.unit_id, data.user_id)

        with self._transaction():
            self._check_calendar_policy(data.appointment_date, data.start_time, data.end_time)
            self._check_conflicts(data.appointment_date, data.start_time, data.end_time)

            appointment = self.appointments.create(
                full_name=data.full_name,
                unit_id=data.unit_id,
                user_id=data.user_id,
                appointment_date=data.appointment_date,
                start_time=data.start_time,
                end_time=data.end_time,
                status=data.status or PENDING,
                agenda=data.agenda,
                email=data.email,
                created_by=data.created_by,
                is_deleted=False,
            )

        self.db.refresh(appointment)
        logger.info('Created appointment %s for unit %s on %s', appointment.id, appointment.unit_id, appointment.appointment_date)
        return appointment

    def update_appointment(
        self,
        appointment_id: int,
        patch: AppointmentUpdate | Mapping[str, Any],
    ) -> Appointment:
        patch = self._parse(AppointmentUpdate, patch)
        appointment = self._get_or_raise(appointment_id)

        changes = {field_name: getattr(patch, field_name) for field_name in patch.model_fields_set}
        for field_name, value in changes.items():
            if value is None and field_name not in NULLABLE_FIELDS:
                raise InvalidInput(f'{FIELD_LABELS.get(field_name, field_name)} cannot be cleared.')

        new_date = changes.get('appointment_date', appointment.appointment_date)
        new_start = changes.get('start_time', appointment.start_time)
        new_end = changes.get('end_time', appointment.end_time)
        check_time_range(new_date, new_start, new_end)

        if 'unit_id' in changes or 'user_id' in changes:
            self._check_references(changes.get('unit_id'), changes.get('user_id'))

        previous_status = appointment.status
        previous_slot = (appointment.appointment_date, appointment.start_time, appointment.end_time)
        touches_schedule = any(field_name in changes for field_name in TEMPORAL_FIELDS)

        with self._transaction():
            # A status-only change (approve/reject) skips the calendar rules.
            if touches_schedule:
                self._check_calendar_policy(new_date, new_start, new_end)
            self._check_conflicts(new_date, new_start, new_end, exclude_id=appointment.id)

            self.appointments.update(appointment, **changes)

        self.db.refresh(appointment)
        logger.info('Updated appointment %s (%s)', appointment.id, ', '.join(sorted(changes)) or 'no changes')

        events = []
        if appointment.status == APPROVED and previous_status != APPROVED:
            events.append(notifications.APPROVED)
        if appointment.status == REJECTED and previous_status != REJECTED:
            events.append(notifications.REJECTED)
        if (appointment.appointment_date, appointment.start_time, appointment.end_time) != previous_slot:
            events.append(notifications.RESCHEDULED)

        for event in events:
            self._notify(event, appointment)

        return appointment

    def delete_appointment(self, appointment_id: int) -> Appointment:
        appointment = self._get_or_raise(appointment_id)

        with self._transaction():
            self.appointments.soft_delete(appointment)

        self.db.refresh(appointment)
        logger.info('Soft-deleted appointment %s', appointment_id)
        return appointment

    def hard_delete_appointment(self, appointment_id: int) -> Appointment:
        appointment = self._get_or_raise(appointment_id)

        with self._transaction():
            self.appointments.hard_delete(appointment)

        logger.info('Permanently deleted appointment %s', appointment_id)
        return appointment

    # Busy days

    def is_day_blocked(self, day: date) -> bool:
        return self.blocked_time.is_day_blocked(day)

    def list_busy_days(self, start: date | None = None, end: date | None = None) -> list[BusyDay]:
        return self.blocked_time.list_busy_days(start, end)

    def unblock_day(self, day: date) -> BusyDay | None:
        # Appointments moved away by an earlier block stay where they are.
        with self._transaction():
            busy_day = self.blocked_time.unblock_day(day)

        logger.info('Unblocked %s (%s)', as_date(day), 'removed' if busy_day else 'was not blocked')
        return busy_day

    def block_day(self, day: date) -> BlockDayResult:
        """Blocks ``day`` and relocates every pending or approved appointment on it.

        Each appointment is handled in its own transaction: it is either moved
        to the first free date within the horizon (same time of day, status
        unchanged) or rejected when no such date exists. A store error on one
        appointment is reported as a failed move and the batch continues.
        """
        day = as_date(day)

        with self._transaction():
            busy_day = self.blocked_time.block_day(day)
        self.db.refresh(busy_day)

        affected = self.appointments.list_for_day(day, RESCHEDULABLE_STATUSES)
        logger.info('Blocked %s; %s appointment(s) to reschedule', day, len(affected))

        outcomes = [self._reschedule(appointment, day) for appointment in affected]

        result = BlockDayResult(busy_day=busy_day)
        for outcome in outcomes:
            if outcome.moved:
                result.moved_appointments.append(outcome.appointment)
            else:
                result.failed_moves.append(
                    FailedMove(outcome.appointment_id, outcome.appointment, outcome.reason or 'Unknown error')
                )

        logger.info('Reschedule for %s finished: %s moved, %s failed', day, result.total_moved, result.total_failed)
        return result

    def _reschedule(self, appointment: Appointment, blocked_day: date) -> _RescheduleOutcome:
        appointment_id = appointment.id

        try:
            with self._transaction():
                next_day = self.blocked_time.find_next_available_date(
                    blocked_day,
                    appointment.start_time,
                    appointment.end_time,
                    self.horizon_days,
                    skip_weekends=self.skip_weekends,
                )

                if next_day is None:
                    self.appointments.update(appointment, status=REJECTED)
                    outcome = _RescheduleOutcome(
                        appointment_id,
                        appointment,
                        moved=False,
                        reason=f'No available date found within {self.horizon_days} days',
                    )
                else:
                    self.appointments.update(
                        appointment,
                        appointment_date=next_day,
                        start_time=project_time_onto(next_day, appointment.start_time),
                        end_time=project_time_onto(next_day, appointment.end_time),
                    )
                    outcome = _RescheduleOutcome(appointment_id, appointment, moved=True)

            self.db.refresh(appointment)
        except (SchedulingError, SQLAlchemyError) as exc:
            logger.warning('Could not reschedule appointment %s: %s', appointment_id, exc)
            return _RescheduleOutcome(appointment_id, appointment, moved=False, reason=str(exc))

        self._notify(notifications.RESCHEDULED if outcome.moved else notifications.REJECTED, appointment)
        return outcome

    # Busy time slots

    def is_slot_blocked(self, day: date, start_time: datetime | time, end_time: datetime | time) -> bool:
        day = as_date(day)
        return self.blocked_time.is_slot_blocked(
            day,
            project_time_onto(day, start_time),
            project_time_onto(day, end_time),
        )

    def block_slot(
        self,
        day: date,
        start_time: datetime | time,
        end_time: datetime | time,
        reason: str | None = None,
    ) -> BusyTimeSlot:
        with self._transaction():
            slot = self.blocked_time.block_slot(day, start_time, end_time, reason)

        self.db.refresh(slot)
        logger.info('Blocked %s %s-%s', slot.date, _format_clock_time(slot.start_time), _format_clock_time(slot.end_time))
        return slot

    def unblock_slot(self, slot_id: int) -> BusyTimeSlot | None:
        with self._transaction():
            slot = self.blocked_time.unblock_slot(slot_id)

        if slot is not None:
            logger.info('Unblocked busy time slot %s', slot_id)
        return slot

    def list_slots_for_date(self, day: date) -> list[BusyTimeSlot]:
        return self.blocked_time.list_slots_for_date(day)

    def list_slots(self, start: date | None = None, end: date | None = None) -> list[BusyTimeSlot]:
        return self.blocked_time.list_slots(start, end)
