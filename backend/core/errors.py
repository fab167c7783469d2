"""Scheduling error taxonomy.

Every engine failure is a ``SchedulingError`` carrying a ``kind`` and an HTTP
status class; routes translate them into ``HTTPException`` responses.
"""

from fastapi import status


class SchedulingError(Exception):
    kind = 'SchedulingError'
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, **payload):
        super().__init__(message)
        self.message = message
        self.payload = payload

    def to_dict(self) -> dict:
        return {'kind': self.kind, 'message': self.message, **self.payload}


class InvalidInput(SchedulingError):
    kind = 'ValidationError'


class DeadlineViolation(SchedulingError):
    kind = 'DeadlineViolation'


class BreakWindowViolation(SchedulingError):
    kind = 'BreakWindowViolation'


class DayBlocked(SchedulingError):
    kind = 'DayBlocked'


class SlotBlocked(SchedulingError):
    kind = 'SlotBlocked'


class SchedulingConflict(SchedulingError):
    kind = 'SchedulingConflict'
    status_code = status.HTTP_409_CONFLICT


class NotFound(SchedulingError):
    kind = 'NotFound'
    status_code = status.HTTP_404_NOT_FOUND


class AlreadyBlocked(SchedulingError):
    kind = 'AlreadyBlocked'
    status_code = status.HTTP_409_CONFLICT
