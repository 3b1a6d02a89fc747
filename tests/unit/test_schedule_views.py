from datetime import date

from gymdesk.models.booking import Booking, BookingStatus
from gymdesk.models.member import Member
from gymdesk.models.trainer import Trainer
from gymdesk.utils.schedule import (
    bucket_by_day, calendar_events, pending_counts, trainer_clients, upcoming_sessions,
)

MEMBERS = [Member(id="101", name="Alice"), Member(id="102", name="Bob"), Member(id="103", name="Cara")]
TRAINERS = [Trainer(id="t1", name="Alex"), Trainer(id="t2", name="Maria")]


def _b(id, day, start, member="101", trainer="t1", status=BookingStatus.CONFIRMED):
    end = f"{int(start[:2]) + 1:02d}:00"
    return Booking(id=id, member_id=member, trainer_id=trainer, date=day,
                   start_time=start, end_time=end, status=status)


def test_calendar_events_use_names_and_fall_back_to_unknown():
    events = calendar_events(
        [_b("1", "2025-11-03", "09:00"), _b("2", "2025-11-03", "10:00", member="999", trainer="t9")],
        MEMBERS, TRAINERS,
    )
    assert events[0]["title"] == "Alice w/ Alex"
    assert events[0]["start"] == "2025-11-03T09:00"
    assert events[0]["end"] == "2025-11-03T10:00"
    assert events[1]["title"] == "Unknown w/ Unknown"
    assert events[1]["booking"].id == "2"


def test_bucket_by_day_orders_days_and_start_times():
    bookings = [
        _b("c", "2025-11-05", "09:00"),
        _b("b", "2025-11-03", "11:00"),
        _b("a", "2025-11-03", "09:00"),
    ]
    days = bucket_by_day(bookings)
    assert list(days) == ["2025-11-03", "2025-11-05"]
    assert [b.id for b in days["2025-11-03"]] == ["a", "b"]


def test_upcoming_sessions_confirmed_from_today_soonest_first():
    bookings = [
        _b("past", "2025-11-02", "09:00"),
        _b("pending", "2025-11-04", "09:00", status=BookingStatus.PENDING),
        _b("later", "2025-11-10", "09:00"),
        _b("today", "2025-11-03", "18:00"),
        _b("soon", "2025-11-04", "08:00"),
        _b("latest", "2025-12-01", "08:00"),
    ]
    upcoming = upcoming_sessions(bookings, today=date(2025, 11, 3))
    assert [b.id for b in upcoming] == ["today", "soon", "later"]
    assert len(upcoming_sessions(bookings, today=date(2025, 11, 3), limit=None)) == 4


def test_pending_counts():
    counts = pending_counts([
        _b("1", "2025-11-03", "09:00", status=BookingStatus.PENDING),
        _b("2", "2025-11-03", "10:00", status=BookingStatus.PENDING_TRAINER),
        _b("3", "2025-11-03", "11:00", status=BookingStatus.PENDING_TRAINER),
        _b("4", "2025-11-03", "12:00"),
    ])
    assert counts == {BookingStatus.PENDING: 1, BookingStatus.PENDING_TRAINER: 2}


def test_trainer_clients_counts_upcoming_sessions_of_any_status():
    bookings = [
        _b("1", "2025-11-01", "09:00", member="101"),
        _b("2", "2025-11-04", "09:00", member="101", status=BookingStatus.PENDING),
        _b("3", "2025-11-05", "09:00", member="101"),
        _b("4", "2025-10-01", "09:00", member="102"),
        _b("5", "2025-11-05", "09:00", member="103", trainer="t2"),
    ]
    clients = trainer_clients("t1", bookings, MEMBERS, today=date(2025, 11, 3))
    assert [(m.id, n) for m, n in clients] == [("101", 2), ("102", 0)]
