from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError

from backend.auth.dependencies import require_admin
from backend.models.user import User
from backend.routes.deps import database_unavailable, get_engine
from backend.schemas.appointment import AppointmentResponse
from backend.schemas.busy_day import (
    BlockDayRequest,
    BlockDayResponse,
    BusyDayResponse,
    DayBlockedResponse,
    FailedMoveResponse,
)
from backend.scheduling.engine import BlockDayResult, SchedulingEngine

router = APIRouter(tags=['busy-days'])


def to_block_day_response(result: BlockDayResult) -> BlockDayResponse:
    return BlockDayResponse(
        busy_day=BusyDayResponse.model_validate(result.busy_day),
        moved_appointments=[
            AppointmentResponse.model_validate(appointment) for appointment in result.moved_appointments
        ],
        failed_moves=[
            FailedMoveResponse(
                appointment_id=failed.appointment_id,
                appointment=AppointmentResponse.model_validate(failed.appointment),
                reason=failed.reason,
            )
            for failed in result.failed_moves
        ],
        total_moved=result.total_moved,
        total_failed=result.total_failed,
    )


@router.post('', response_model=BlockDayResponse)
def block_day(
    data: BlockDayRequest,
    _admin: User = Depends(require_admin),
    engine: SchedulingEngine = Depends(get_engine),
):
    try:
        return to_block_day_response(engine.block_day(data.date))
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/check', response_model=DayBlockedResponse)
def is_day_blocked(
    day: date = Query(..., alias='date'),
    engine: SchedulingEngine = Depends(get_engine),
):
    try:
        return DayBlockedResponse(date=day, is_blocked=engine.is_day_blocked(day))
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('', response_model=list[BusyDayResponse])
def list_busy_days(
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    engine: SchedulingEngine = Depends(get_engine),
):
    try:
        return engine.list_busy_days(start, end)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.delete('/{day}', response_model=BusyDayResponse | None)
def unblock_day(
    day: date,
    _admin: User = Depends(require_admin),
    engine: SchedulingEngine = Depends(get_engine),
):
    try:
        return engine.unblock_day(day)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc
