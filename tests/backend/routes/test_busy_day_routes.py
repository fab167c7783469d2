from datetime import date, time

from backend.routes.busy_day_routes import block_day, to_block_day_response
from backend.schemas.busy_day import BlockDayRequest
from backend.scheduling.engine import SchedulingEngine

TUESDAY = date(2026, 1, 6)


def test_block_day_route_reports_moved_and_failed(scheduling_engine, appointment_factory, admin) -> None:
    moved = appointment_factory(TUESDAY, time(9, 0), time(10, 0), status='approved')

    response = block_day(BlockDayRequest(date=TUESDAY), _admin=admin, engine=scheduling_engine)

    assert response.busy_day.date == TUESDAY
    assert response.total_moved == 1
    assert response.total_failed == 0
    assert response.moved_appointments[0].id == moved.id
    assert response.moved_appointments[0].appointment_date == date(2026, 1, 7)


def test_to_block_day_response_serializes_failures(db_session, clock, notifier, appointment_factory) -> None:
    engine = SchedulingEngine(db_session, clock=clock, notifier=notifier, horizon_days=0)
    stranded = appointment_factory(TUESDAY, time(9, 0), time(10, 0), status='pending')

    response = to_block_day_response(engine.block_day(TUESDAY))

    assert response.total_failed == 1
    assert response.failed_moves[0].appointment_id == stranded.id
    assert response.failed_moves[0].appointment.status == 'rejected'
    assert response.failed_moves[0].reason == 'No available date found within 0 days'


def test_post_busy_day_blocks_and_reschedules(api_client, appointment_factory) -> None:
    appointment = appointment_factory(TUESDAY, time(14, 0), time(15, 0), status='pending')

    response = api_client.post('/busy-days', json={'date': '2026-01-06'})

    assert response.status_code == 200
    body = response.json()
    assert body['busy_day']['date'] == '2026-01-06'
    assert body['total_moved'] == 1
    assert body['moved_appointments'][0]['id'] == appointment.id
    assert body['moved_appointments'][0]['start_time'] == '2026-01-07T14:00:00'
    assert body['failed_moves'] == []


def test_post_busy_day_rejects_bad_date(api_client) -> None:
    response = api_client.post('/busy-days', json={'date': 'next tuesday'})

    assert response.status_code == 400
    assert response.json()['detail']['kind'] == 'ValidationError'


def test_check_and_list_busy_days(api_client, scheduling_engine) -> None:
    scheduling_engine.block_day(TUESDAY)
    scheduling_engine.block_day(date(2026, 1, 20))

    blocked = api_client.get('/busy-days/check', params={'date': '2026-01-06'})
    free = api_client.get('/busy-days/check', params={'date': '2026-01-07'})
    listed = api_client.get('/busy-days', params={'start': '2026-01-01', 'end': '2026-01-10'})

    assert blocked.json() == {'date': '2026-01-06', 'is_blocked': True}
    assert free.json() == {'date': '2026-01-07', 'is_blocked': False}
    assert [item['date'] for item in listed.json()] == ['2026-01-06']


def test_delete_busy_day_unblocks_and_is_noop_when_missing(api_client, scheduling_engine) -> None:
    scheduling_engine.block_day(TUESDAY)

    removed = api_client.delete('/busy-days/2026-01-06')
    repeated = api_client.delete('/busy-days/2026-01-06')

    assert removed.status_code == 200
    assert removed.json()['date'] == '2026-01-06'
    assert repeated.status_code == 200
    assert repeated.json() is None
    assert not scheduling_engine.is_day_blocked(TUESDAY)
