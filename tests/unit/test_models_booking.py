import pytest

from gymdesk.models.base import ValidationError
from gymdesk.models.booking import (
    Booking, BookingRepository, BookingStatus, InvalidTransition,
    awaiting_party, create_booking, transition_booking,
)
from gymdesk.models.user import Role


def _booking(status=BookingStatus.PENDING, **kwargs):
    fields = dict(id="b1", member_id="101", trainer_id="t1", date="2025-11-03",
                  start_time="09:00", end_time="10:00", status=status)
    fields.update(kwargs)
    return Booking(**fields)


# -------------------------
# Status parsing
# -------------------------
def test_legacy_pending_trainer_spelling_is_canonicalised():
    booking = Booking.from_dict({
        "id": "b1", "memberId": "101", "trainerId": "t1", "date": "2025-11-03",
        "startTime": "09:00", "endTime": "10:00", "status": "Pending Trainer",
    })
    assert booking.status is BookingStatus.PENDING_TRAINER
    assert booking.to_dict()["status"] == "PendingTrainer"


def test_unknown_status_is_rejected():
    with pytest.raises(ValueError):
        BookingStatus.parse("Maybe")


# -------------------------
# Creation
# -------------------------
@pytest.mark.parametrize("actor, expected", [
    (Role.TRAINER, BookingStatus.PENDING),
    (Role.MEMBER, BookingStatus.PENDING_TRAINER),
    (Role.ADMIN, BookingStatus.CONFIRMED),
    ("trainer", BookingStatus.PENDING),
])
def test_initial_status_depends_on_actor(actor, expected):
    booking = create_booking(actor, "101", "t1", "2025-11-03", "09:00", "10:00")
    assert booking.status is expected
    assert booking.id


@pytest.mark.parametrize("missing", ["member_id", "trainer_id", "date", "start_time", "end_time"])
def test_create_requires_every_field(missing):
    fields = dict(member_id="101", trainer_id="t1", date="2025-11-03", start_time="09:00", end_time="10:00")
    fields[missing] = ""
    with pytest.raises(ValidationError):
        create_booking(Role.ADMIN, **fields)


def test_double_booking_is_not_rejected():
    """Overlapping sessions for one trainer are accepted; no conflict check exists."""
    first = create_booking(Role.ADMIN, "101", "t1", "2025-11-03", "09:00", "10:00")
    second = create_booking(Role.ADMIN, "102", "t1", "2025-11-03", "09:30", "10:30")
    same_member = create_booking(Role.MEMBER, "101", "t2", "2025-11-03", "09:00", "10:00")
    assert first.id != second.id
    assert {first.status, second.status} == {BookingStatus.CONFIRMED}
    assert same_member.status is BookingStatus.PENDING_TRAINER


# -------------------------
# Confirm
# -------------------------
@pytest.mark.parametrize("status", [BookingStatus.PENDING, BookingStatus.PENDING_TRAINER])
def test_confirm_pending(status):
    booking = _booking(status=status)
    confirmed = transition_booking(booking, "confirm")
    assert confirmed.status is BookingStatus.CONFIRMED
    assert booking.status is status  # original untouched
    assert confirmed.id == booking.id


def test_confirm_on_confirmed_returns_same_record():
    booking = _booking(status=BookingStatus.CONFIRMED)
    assert transition_booking(booking, "confirm") is booking
    assert booking.status is BookingStatus.CONFIRMED


# -------------------------
# Edit
# -------------------------
def test_admin_edit_keeps_status_unless_overridden():
    booking = _booking(status=BookingStatus.PENDING_TRAINER)
    edited = transition_booking(booking, "edit", Role.ADMIN, {"start_time": "11:00", "end_time": "12:00"})
    assert (edited.start_time, edited.end_time) == ("11:00", "12:00")
    assert edited.status is BookingStatus.PENDING_TRAINER

    overridden = transition_booking(booking, "edit", Role.ADMIN, {"status": "Confirmed", "trainer_id": "t2"})
    assert overridden.status is BookingStatus.CONFIRMED
    assert overridden.trainer_id == "t2"


def test_trainer_edit_resets_to_pending():
    booking = _booking(status=BookingStatus.CONFIRMED)
    edited = transition_booking(booking, "edit", Role.TRAINER, {"date": "2025-11-10"})
    assert edited.date == "2025-11-10"
    assert edited.status is BookingStatus.PENDING


def test_trainer_cannot_change_status_or_trainer():
    booking = _booking()
    with pytest.raises(ValidationError):
        transition_booking(booking, "edit", Role.TRAINER, {"status": "Confirmed"})
    with pytest.raises(ValidationError):
        transition_booking(booking, "edit", Role.TRAINER, {"trainer_id": "t2"})


def test_edit_cannot_blank_required_field():
    with pytest.raises(ValidationError):
        transition_booking(_booking(), "edit", Role.ADMIN, {"date": ""})


@pytest.mark.parametrize("actor", [Role.MEMBER, None])
def test_member_cannot_edit(actor):
    with pytest.raises(InvalidTransition):
        transition_booking(_booking(), "edit", actor, {"date": "2025-11-10"})


def test_delete_returns_none():
    assert transition_booking(_booking(), "delete", Role.ADMIN) is None


def test_unknown_action_is_rejected():
    with pytest.raises(InvalidTransition):
        transition_booking(_booking(), "archive")


# -------------------------
# Awaiting party
# -------------------------
def test_awaiting_party():
    assert awaiting_party(_booking(status=BookingStatus.PENDING)) is Role.MEMBER
    assert awaiting_party(_booking(status=BookingStatus.PENDING_TRAINER)) is Role.TRAINER
    assert awaiting_party(_booking(status=BookingStatus.CONFIRMED)) is None


# -------------------------
# Repository
# -------------------------
def test_repository_filters_and_apply(store):
    repo = BookingRepository(store)
    repo.add(_booking(id="b1", member_id="101", trainer_id="t1"))
    repo.add(_booking(id="b2", member_id="102", trainer_id="t1", status=BookingStatus.PENDING_TRAINER))
    repo.add(_booking(id="b3", member_id="101", trainer_id="t2"))

    assert [b.id for b in repo.for_member("101")] == ["b1", "b3"]
    assert [b.id for b in repo.for_trainer("t1")] == ["b1", "b2"]

    repo.apply("b2", "confirm", Role.TRAINER)
    assert repo.get("b2").status is BookingStatus.CONFIRMED

    assert repo.apply("b3", "delete", Role.ADMIN) is None
    assert repo.get("b3") is None

    with pytest.raises(LookupError):
        repo.apply("missing", "confirm")


def test_failed_transition_leaves_store_untouched(store):
    repo = BookingRepository(store)
    repo.add(_booking(id="b1"))
    before = store.get_collection("gymSchedules")
    with pytest.raises(InvalidTransition):
        repo.apply("b1", "edit", Role.MEMBER, {"date": "2025-12-01"})
    assert store.get_collection("gymSchedules") == before


def test_unknown_stored_status_does_not_erase_other_sessions(seeded_store):
    rows = seeded_store.get_collection("gymSchedules")
    cancelled = dict(rows[0], id="old", status="Cancelled")
    seeded_store.set_collection("gymSchedules", rows + [cancelled])

    repo = BookingRepository(seeded_store)
    assert len(repo.all()) == len(rows)
    repo.add(create_booking(Role.ADMIN, "101", "t1", "2099-01-01", "09:00", "10:00"))

    stored = seeded_store.get_collection("gymSchedules")
    assert len(stored) == len(rows) + 2
    assert cancelled in stored
