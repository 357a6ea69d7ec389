from datetime import date, datetime, timedelta

import pytest

from services import time_window
from services.errors import InvalidTimeSlot, ValidationError

DAY = date(2026, 3, 10)
SESSION = datetime(2026, 3, 10, 10, 0)


@pytest.mark.parametrize("slot, expected", [
    ("10:00", (10, 0)),
    ("7:05", (7, 5)),
    ("23:59", (23, 59)),
    ("00:00", (0, 0)),
    ("10:00 AM", (10, 0)),
    ("10:00 pm", (22, 0)),
    ("12:00 AM", (0, 0)),
    ("12:30 PM", (12, 30)),
    ("6:15PM", (18, 15)),
])
def test_parse_time_slot_accepts_both_formats(slot, expected):
    assert time_window.parse_time_slot(slot) == expected


@pytest.mark.parametrize("slot", ["", "10", "25:00", "10:60", "13:00 PM", "0:30 AM", "ten", None, "10:00 XM"])
def test_parse_time_slot_rejects_malformed(slot):
    with pytest.raises(InvalidTimeSlot):
        time_window.parse_time_slot(slot)


def test_normalize_time_slot_is_zero_padded_24_hour():
    assert time_window.normalize_time_slot("7:05 PM") == "19:05"
    assert time_window.normalize_time_slot("7:05") == "07:05"


def test_session_instant_accepts_iso_date_strings():
    assert time_window.session_instant("2026-03-10", "10:00 AM") == SESSION


def test_parse_date_rejects_garbage():
    with pytest.raises(ValidationError):
        time_window.parse_date("10/03/2026")


def test_can_cancel_boundary_at_exactly_sixty_minutes_is_false():
    assert time_window.can_cancel(DAY, "10:00", SESSION - timedelta(minutes=60)) is False


def test_can_cancel_one_second_past_cutoff_is_true():
    now = SESSION - timedelta(minutes=60, seconds=1)
    assert time_window.can_cancel(DAY, "10:00", now) is True


def test_can_cancel_inside_cutoff_is_false():
    assert time_window.can_cancel(DAY, "10:00", SESSION - timedelta(minutes=45)) is False
    assert time_window.can_cancel(DAY, "10:00", SESSION + timedelta(minutes=5)) is False


def test_can_cancel_uses_configured_cutoff():
    now = SESSION - timedelta(minutes=90)
    assert time_window.can_cancel(DAY, "10:00", now, cutoff_minutes=120) is False


@pytest.mark.parametrize("offset_minutes, expected", [
    (61, False),
    (60, True),
    (0, True),
    (-30, True),
    (-31, False),
])
def test_can_check_in_window_is_inclusive(offset_minutes, expected):
    # offset = session - now
    now = SESSION - timedelta(minutes=offset_minutes)
    assert time_window.can_check_in(DAY, "10:00", now) is expected


def test_can_check_in_just_outside_by_one_second():
    assert time_window.can_check_in(DAY, "10:00", SESSION - timedelta(minutes=60, seconds=1)) is False
    assert time_window.can_check_in(DAY, "10:00", SESSION + timedelta(minutes=30, seconds=1)) is False


def test_malformed_slots_fail_closed():
    assert time_window.can_cancel(DAY, "late morning", SESSION - timedelta(days=3)) is False
    assert time_window.can_check_in(DAY, "99:99", SESSION) is False
    assert time_window.is_past(DAY, "??", SESSION - timedelta(days=3)) is True
    assert time_window.time_until(DAY, "??", SESSION - timedelta(days=3)) == ""


def test_is_past_truncates_now_to_the_minute():
    assert time_window.is_past(DAY, "10:00", datetime(2026, 3, 10, 9, 59, 59)) is False
    assert time_window.is_past(DAY, "10:00", datetime(2026, 3, 10, 10, 0, 45)) is True


def test_midnight_rollover():
    late = datetime(2026, 3, 9, 23, 30)
    assert time_window.is_past(DAY, "00:00", late) is False
    assert time_window.can_cancel(DAY, "12:00 AM", late) is False
    assert time_window.can_check_in(DAY, "00:15", late) is True
    assert time_window.can_cancel(DAY, "00:31", late) is True


def test_time_until_uses_largest_unit():
    assert time_window.time_until(DAY, "10:00", SESSION - timedelta(days=2, hours=3)) == "in 2 days"
    assert time_window.time_until(DAY, "10:00", SESSION - timedelta(days=1)) == "in 1 day"
    assert time_window.time_until(DAY, "10:00", SESSION - timedelta(hours=3, minutes=20)) == "in 3 hours"
    assert time_window.time_until(DAY, "10:00", SESSION - timedelta(minutes=45)) == "in 45 minutes"
    assert time_window.time_until(DAY, "10:00", SESSION - timedelta(minutes=1)) == "in 1 minute"


def test_time_until_is_empty_for_started_sessions():
    assert time_window.time_until(DAY, "10:00", SESSION) == ""
    assert time_window.time_until(DAY, "10:00", SESSION + timedelta(minutes=1)) == ""


def test_is_today():
    assert time_window.is_today(DAY, datetime(2026, 3, 10, 23, 59)) is True
    assert time_window.is_today(DAY, datetime(2026, 3, 11, 0, 0)) is False
