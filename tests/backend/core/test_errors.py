from backend.core.errors import AlreadyBlocked, InvalidInput, NotFound, SchedulingConflict


def test_error_kinds_and_status_codes() -> None:
    assert InvalidInput('bad').status_code == 400
    assert InvalidInput('bad').kind == 'ValidationError'
    assert SchedulingConflict('taken').status_code == 409
    assert AlreadyBlocked('taken').status_code == 409
    assert NotFound('missing').status_code == 404


def test_to_dict_includes_payload() -> None:
    error = SchedulingConflict('Time slot conflict', conflicting_id=7, conflict_start='2026-01-06T09:00:00')

    assert error.to_dict() == {
        'kind': 'SchedulingConflict',
        'message': 'Time slot conflict',
        'conflicting_id': 7,
        'conflict_start': '2026-01-06T09:00:00',
    }
    assert str(error) == 'Time slot conflict'
