"""Outbound notifications for appointment status changes.

Delivery itself belongs to an external service; the engine only needs
something with ``send(recipient, subject, body)``.
"""

import logging
from typing import Protocol

from backend.core import config
from backend.models.appointment import Appointment

logger = logging.getLogger(__name__)

APPROVED = 'approved'
REJECTED = 'rejected'
RESCHEDULED = 'rescheduled'


class Notifier(Protocol):
    def send(self, recipient: str, subject: str, body: str) -> None:
        ...


class LoggingNotifier:
    def send(self, recipient: str, subject: str, body: str) -> None:
        logger.info('Notification to %s: %s | %s', recipient, subject, body)


class NullNotifier:
    def send(self, recipient: str, subject: str, body: str) -> None:
        return None


def get_notifier() -> Notifier:
    if config.NOTIFICATIONS_ENABLED:
        return LoggingNotifier()
    return NullNotifier()


def _describe_slot(appointment: Appointment) -> str:
    return (
        f'{appointment.appointment_date:%A, %B %d, %Y} from '
        f'{appointment.start_time:%I:%M %p} to {appointment.end_time:%I:%M %p}'
    )


def build_status_message(event: str, appointment: Appointment) -> tuple[str, str]:
    greeting = f'Dear {appointment.full_name},'

    if event == APPROVED:
        subject = 'Your appointment has been approved'
        body = f'{greeting} your appointment on {_describe_slot(appointment)} has been approved.'
    elif event == REJECTED:
        subject = 'Your appointment has been rejected'
        body = f'{greeting} your appointment request for {_describe_slot(appointment)} has been rejected.'
    elif event == RESCHEDULED:
        subject = 'Your appointment has been rescheduled'
        body = f'{greeting} your appointment has been moved to {_describe_slot(appointment)}.'
    else:
        raise ValueError(f'Unknown notification event: {event}')

    return subject, body
