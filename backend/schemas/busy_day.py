from datetime import date, datetime

from pydantic import BaseModel

from backend.schemas.appointment import AppointmentResponse


class BlockDayRequest(BaseModel):
    date: date


class BusyDayResponse(BaseModel):
    id: int
    date: date
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class FailedMoveResponse(BaseModel):
    appointment_id: int
    appointment: AppointmentResponse
    reason: str


class BlockDayResponse(BaseModel):
    busy_day: BusyDayResponse
    moved_appointments: list[AppointmentResponse]
    failed_moves: list[FailedMoveResponse]
    total_moved: int
    total_failed: int


class DayBlockedResponse(BaseModel):
    date: date
    is_blocked: bool
