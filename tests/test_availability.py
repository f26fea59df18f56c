from datetime import date, timedelta, datetime

from scheduling.availability import is_slot_taken, taken_slots, taken_slots_for_token


def _day(offset=7):
    return datetime.utcnow().date() + timedelta(days=offset)


def test_only_active_appointments_count(app, make_request):
    day = _day()
    make_request(appointment_date=day, appointment_time_slot="15:00-16:00", status="new")
    make_request(appointment_date=day, appointment_time_slot="09:00-10:00", status="in_progress")
    make_request(appointment_date=day, appointment_time_slot="10:00-11:00", status="resolved")
    make_request(appointment_date=day, appointment_time_slot="11:00-12:00", status="closed")
    make_request(appointment_date=_day(8), appointment_time_slot="14:00-15:00")

    assert taken_slots(day) == ["09:00-10:00", "15:00-16:00"]


def test_exclude_removes_own_booking(app, make_request):
    day = _day()
    mine = make_request(appointment_date=day, appointment_time_slot="09:00-10:00")
    make_request(appointment_date=day, appointment_time_slot="10:00-11:00")

    assert taken_slots(day, exclude_id=mine.id) == ["10:00-11:00"]
    assert not is_slot_taken(day, "09:00-10:00", exclude_id=mine.id)
    assert is_slot_taken(day, "09:00-10:00")


def test_token_lookup_excludes_holder(app, make_request):
    day = _day()
    mine = make_request(appointment_date=day, appointment_time_slot="09:00-10:00")

    assert taken_slots_for_token(day, mine.reschedule_token) == []
    assert taken_slots_for_token(day, "unknown-token") == ["09:00-10:00"]
    assert taken_slots_for_token(day) == ["09:00-10:00"]


def test_endpoint_with_and_without_token(client, make_request):
    day = _day()
    mine = make_request(appointment_date=day, appointment_time_slot="16:00-17:00")

    res = client.get(f"/api/appointment-slots?date={day.isoformat()}")
    assert res.status_code == 200
    assert res.get_json() == {"taken": ["16:00-17:00"]}

    res = client.get(f"/api/appointment-slots?date={day.isoformat()}&token={mine.reschedule_token}")
    assert res.get_json() == {"taken": []}


def test_endpoint_requires_valid_date(client):
    for query in ("", "?date=", "?date=2026-02-30", "?date=tomorrow"):
        res = client.get(f"/api/appointment-slots{query}")
        assert res.status_code == 400
        assert res.get_json()["error"] == "Valid date (YYYY-MM-DD) is required."


def test_past_dates_are_still_answerable(client):
    res = client.get(f"/api/appointment-slots?date={date(2020, 1, 1).isoformat()}")
    assert res.status_code == 200
    assert res.get_json() == {"taken": []}
