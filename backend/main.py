import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from backend.core import config
from backend.core.logging import setup_logging
from backend.database import Base, engine, ensure_appointment_schema
from backend.models import appointment, busy_day, busy_time_slot, unit, user  # noqa: F401
from backend.routes import appointment_routes, busy_day_routes, busy_time_slot_routes

setup_logging()
config.validate_runtime_config()

app = FastAPI(title='Office Appointment Scheduling API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


def format_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = '.'.join(str(part) for part in error.get('loc', ()) if part != 'body')
        message = str(error.get('msg', 'Invalid value')).removeprefix('Value error, ')
        messages.append(f'{location}: {message}' if location else message)
    return '; '.join(messages)


@app.exception_handler(RequestValidationError)
async def request_validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={'detail': {'kind': 'ValidationError', 'message': format_validation_errors(exc)}},
    )


@app.on_event('startup')
def initialize_database() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        ensure_appointment_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Appointment Scheduling API Running'}


app.include_router(appointment_routes.router, prefix='/appointments')
app.include_router(busy_day_routes.router, prefix='/busy-days')
app.include_router(busy_time_slot_routes.router, prefix='/busy-time-slots')
