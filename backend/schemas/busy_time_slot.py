from datetime import date, datetime, time

from pydantic import BaseModel, field_validator

from backend.core.clock import to_local_naive

MAX_REASON_LENGTH = 500


class BlockSlotRequest(BaseModel):
    date: date
    start_time: datetime | time
    end_time: datetime | time
    reason: str | None = None

    @field_validator('start_time', 'end_time')
    @classmethod
    def normalize_times(cls, value: datetime | time) -> datetime | time:
        if isinstance(value, datetime):
            return to_local_naive(value)
        return value

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > MAX_REASON_LENGTH:
            raise ValueError(f'Reason must be {MAX_REASON_LENGTH} characters or fewer.')

        return normalized


class BusyTimeSlotResponse(BaseModel):
    id: int
    date: date
    start_time: datetime
    end_time: datetime
    reason: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class SlotBlockedResponse(BaseModel):
    date: date
    start_time: datetime
    end_time: datetime
    is_blocked: bool
