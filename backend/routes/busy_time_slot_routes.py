from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError

from backend.auth.dependencies import require_admin
from backend.core.clock import to_local_naive
from backend.core.errors import SchedulingError
from backend.models.user import User
from backend.routes.deps import database_unavailable, get_engine, scheduling_http_error
from backend.schemas.busy_time_slot import BlockSlotRequest, BusyTimeSlotResponse, SlotBlockedResponse
from backend.scheduling.calendar_rules import project_time_onto
from backend.scheduling.engine import SchedulingEngine

router = APIRouter(tags=['busy-time-slots'])


@router.post('', response_model=BusyTimeSlotResponse, status_code=status.HTTP_201_CREATED)
def block_slot(
    data: BlockSlotRequest,
    _admin: User = Depends(require_admin),
    engine: SchedulingEngine = Depends(get_engine),
):
    try:
        return engine.block_slot(data.date, data.start_time, data.end_time, data.reason)
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.delete('/{slot_id}', status_code=status.HTTP_204_NO_CONTENT)
def unblock_slot(
    slot_id: int,
    _admin: User = Depends(require_admin),
    engine: SchedulingEngine = Depends(get_engine),
):
    try:
        slot = engine.unblock_slot(slot_id)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    if slot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={'kind': 'NotFound', 'message': 'Busy time slot not found.'},
        )


@router.get('/check', response_model=SlotBlockedResponse)
def is_slot_blocked(
    day: date = Query(..., alias='date'),
    start_time: datetime = Query(...),
    end_time: datetime = Query(...),
    engine: SchedulingEngine = Depends(get_engine),
):
    start_time = project_time_onto(day, to_local_naive(start_time))
    end_time = project_time_onto(day, to_local_naive(end_time))

    try:
        return SlotBlockedResponse(
            date=day,
            start_time=start_time,
            end_time=end_time,
            is_blocked=engine.is_slot_blocked(day, start_time, end_time),
        )
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/by-date/{day}', response_model=list[BusyTimeSlotResponse])
def list_slots_for_date(day: date, engine: SchedulingEngine = Depends(get_engine)):
    try:
        return engine.list_slots_for_date(day)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('', response_model=list[BusyTimeSlotResponse])
def list_slots(
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    engine: SchedulingEngine = Depends(get_engine),
):
    try:
        return engine.list_slots(start, end)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc
