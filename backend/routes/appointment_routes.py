from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import SQLAlchemyError

from backend.auth.dependencies import get_optional_user, require_admin
from backend.core.errors import SchedulingError
from backend.models.user import User
from backend.routes.deps import database_unavailable, get_engine, scheduling_http_error
from backend.schemas.appointment import AppointmentCreate, AppointmentResponse, AppointmentUpdate
from backend.scheduling.engine import SchedulingEngine

router = APIRouter(tags=['appointments'])


@router.get('', response_model=list[AppointmentResponse])
def list_appointments(
    appointment_status: str | None = Query(default=None, alias='status'),
    day: date | None = Query(default=None, alias='date'),
    unit_id: int | None = Query(default=None),
    user_id: int | None = Query(default=None),
    is_deleted: bool = Query(default=False),
    engine: SchedulingEngine = Depends(get_engine),
):
    try:
        return engine.list_appointments(
            status=appointment_status.strip().lower() if appointment_status else None,
            day=day,
            unit_id=unit_id,
            user_id=user_id,
            is_deleted=is_deleted,
        )
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/{appointment_id}', response_model=AppointmentResponse)
def get_appointment(appointment_id: int, engine: SchedulingEngine = Depends(get_engine)):
    try:
        return engine.get_appointment(appointment_id)
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: AppointmentCreate,
    current_user: User | None = Depends(get_optional_user),
    engine: SchedulingEngine = Depends(get_engine),
):
    # A signed-in requester is linked to the appointment unless an account was given explicitly.
    if data.user_id is None and current_user is not None:
        data = data.model_copy(update={'user_id': current_user.id})

    try:
        return engine.create_appointment(data)
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.put('/{appointment_id}', response_model=AppointmentResponse)
def update_appointment(
    appointment_id: int,
    data: AppointmentUpdate,
    engine: SchedulingEngine = Depends(get_engine),
):
    try:
        return engine.update_appointment(appointment_id, data)
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.delete('/{appointment_id}', response_model=AppointmentResponse)
def delete_appointment(appointment_id: int, engine: SchedulingEngine = Depends(get_engine)):
    try:
        return engine.delete_appointment(appointment_id)
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.delete('/{appointment_id}/permanent', status_code=status.HTTP_204_NO_CONTENT)
def hard_delete_appointment(
    appointment_id: int,
    _admin: User = Depends(require_admin),
    engine: SchedulingEngine = Depends(get_engine),
):
    try:
        engine.hard_delete_appointment(appointment_id)
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc
