from datetime import date, datetime

from pydantic import BaseModel, field_validator

from backend.core.clock import to_local_naive
from backend.models.appointment import AppointmentStatus

MAX_AGENDA_LENGTH = 1000
APPOINTMENT_STATUSES = {status.value for status in AppointmentStatus}


class AppointmentFields(BaseModel):
    # Everything is optional here; the engine decides which fields are
    # required for a create and what an explicit null means for an update.
    full_name: str | None = None
    unit_id: int | None = None
    user_id: int | None = None
    appointment_date: date | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: str | None = None
    agenda: str | None = None
    email: str | None = None
    created_by: str | None = None

    @field_validator('appointment_date', mode='before')
    @classmethod
    def truncate_appointment_date(cls, value):
        if isinstance(value, str) and len(value.strip()) > 10:
            try:
                value = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
            except ValueError as exc:
                raise ValueError('Invalid appointment date format.') from exc

        if isinstance(value, datetime):
            return to_local_naive(value).date()

        return value

    @field_validator('start_time', 'end_time')
    @classmethod
    def normalize_times(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        return to_local_naive(value)

    @field_validator('full_name', 'created_by')
    @classmethod
    def strip_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        return normalized or None

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip().lower()
        if not normalized:
            return None
        if '@' not in normalized:
            raise ValueError('Invalid email address.')

        return normalized

    @field_validator('agenda')
    @classmethod
    def validate_agenda(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > MAX_AGENDA_LENGTH:
            raise ValueError(f'Agenda must be {MAX_AGENDA_LENGTH} characters or fewer.')

        return normalized

    @field_validator('status')
    @classmethod
    def validate_status(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip().lower()
        if normalized not in APPOINTMENT_STATUSES:
            raise ValueError(f'Invalid appointment status: {value}.')

        return normalized


class AppointmentCreate(AppointmentFields):
    pass


class AppointmentUpdate(AppointmentFields):
    pass


class UnitSummary(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class UserSummary(BaseModel):
    id: int
    email: str | None = None
    full_name: str | None = None
    contact_number: str | None = None

    class Config:
        from_attributes = True


class AppointmentResponse(BaseModel):
    id: int
    # Rows created before the column existed carry no name.
    full_name: str | None = None
    unit_id: int
    user_id: int | None = None
    appointment_date: date
    start_time: datetime
    end_time: datetime
    status: str
    agenda: str | None = None
    email: str | None = None
    created_by: str | None = None
    is_deleted: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
    unit: UnitSummary | None = None
    user: UserSummary | None = None

    class Config:
        from_attributes = True
