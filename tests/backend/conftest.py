import os
from datetime import date, datetime, time

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from backend.core.clock import FixedClock  # noqa: E402
from backend.database import Base  # noqa: E402
from backend.models.appointment import Appointment  # noqa: E402
from backend.models.busy_day import BusyDay  # noqa: E402,F401
from backend.models.busy_time_slot import BusyTimeSlot  # noqa: E402,F401
from backend.models.unit import Unit  # noqa: E402
from backend.models.user import User  # noqa: E402
from backend.scheduling.engine import SchedulingEngine  # noqa: E402

# Monday 2026-01-05, 09:00.
NOW = datetime(2026, 1, 5, 9, 0)


class RecordingNotifier:
    def __init__(self):
        self.sent: list[tuple[str, str, str]] = []

    def send(self, recipient: str, subject: str, body: str) -> None:
        self.sent.append((recipient, subject, body))

    @property
    def subjects(self) -> list[str]:
        return [subject for _, subject, _ in self.sent]


@pytest.fixture
def db_session():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def unit(db_session) -> Unit:
    records_unit = Unit(name='Records Section', is_active=True)
    db_session.add(records_unit)
    db_session.commit()
    db_session.refresh(records_unit)
    return records_unit


@pytest.fixture
def user(db_session, unit) -> User:
    account = User(email='staff@office.gov', full_name='Maria Santos', unit_id=unit.id, role='user', is_active=True)
    db_session.add(account)
    db_session.commit()
    db_session.refresh(account)
    return account


@pytest.fixture
def admin(db_session) -> User:
    account = User(email='admin@office.gov', full_name='Office Admin', role='admin', is_active=True)
    db_session.add(account)
    db_session.commit()
    db_session.refresh(account)
    return account


@pytest.fixture
def scheduling_engine(db_session, clock, notifier, unit) -> SchedulingEngine:
    return SchedulingEngine(db_session, clock=clock, notifier=notifier, horizon_days=60, skip_weekends=False)


@pytest.fixture
def appointment_factory(db_session, unit):
    """Inserts appointment rows directly, bypassing the booking rules."""

    def create(
        day: date,
        start: time,
        end: time,
        status: str = 'approved',
        **fields,
    ) -> Appointment:
        appointment = Appointment(
            full_name=fields.pop('full_name', 'Juan Dela Cruz'),
            unit_id=fields.pop('unit_id', unit.id),
            appointment_date=day,
            start_time=datetime.combine(day, start),
            end_time=datetime.combine(day, end),
            status=status,
            is_deleted=fields.pop('is_deleted', False),
            **fields,
        )
        db_session.add(appointment)
        db_session.commit()
        db_session.refresh(appointment)
        return appointment

    return create


@pytest.fixture
def api_client(scheduling_engine, admin):
    from fastapi.testclient import TestClient

    from backend.auth.dependencies import get_optional_user, require_admin
    from backend.main import app
    from backend.routes.deps import get_engine

    app.dependency_overrides[get_engine] = lambda: scheduling_engine
    app.dependency_overrides[get_optional_user] = lambda: None
    app.dependency_overrides[require_admin] = lambda: admin
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
