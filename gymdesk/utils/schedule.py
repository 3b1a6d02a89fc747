"""Read-only views over bookings for calendars and dashboards."""
from collections import OrderedDict

from gymdesk.models.booking import BookingStatus
from gymdesk.utils.helpers import local_today, parse_day

UNKNOWN = 'Unknown'


def _names(records):
    return {r.id: r.name for r in records}


def _start_key(booking):
    return (booking.date or '', booking.start_time or '')


def calendar_events(bookings, members, trainers):
    """One event per booking, titled 'member w/ trainer'."""
    member_names = _names(members)
    trainer_names = _names(trainers)
    events = []
    for booking in bookings:
        member_name = member_names.get(booking.member_id, UNKNOWN)
        trainer_name = trainer_names.get(booking.trainer_id, UNKNOWN)
        events.append({
            'title': f"{member_name} w/ {trainer_name}",
            'start': f"{booking.date}T{booking.start_time}",
            'end': f"{booking.date}T{booking.end_time}",
            'status': booking.status.value,
            'booking': booking,
        })
    return events


def bucket_by_day(bookings):
    """Bookings grouped by day (days in order), each day sorted by start time."""
    days = OrderedDict()
    for booking in sorted(bookings, key=_start_key):
        days.setdefault(booking.date, []).append(booking)
    return days


def upcoming_sessions(bookings, today=None, limit=3):
    """Confirmed sessions from today on, soonest first."""
    today = parse_day(today) if today is not None else local_today()
    upcoming = []
    for booking in bookings:
        if booking.status != BookingStatus.CONFIRMED:
            continue
        day = parse_day(booking.date)
        if day is not None and day >= today:
            upcoming.append(booking)
    upcoming.sort(key=_start_key)
    return upcoming[:limit] if limit is not None else upcoming


def pending_counts(bookings):
    counts = {BookingStatus.PENDING: 0, BookingStatus.PENDING_TRAINER: 0}
    for booking in bookings:
        if booking.status in counts:
            counts[booking.status] += 1
    return counts


def trainer_clients(trainer_id, bookings, members, today=None):
    """
    Members who have at least one session with the trainer, paired with how
    many of those sessions are today or later (any status).
    """
    trainer_id = str(trainer_id)
    today = parse_day(today) if today is not None else local_today()
    sessions = [b for b in bookings if b.trainer_id == trainer_id]
    client_ids = {b.member_id for b in sessions}

    clients = []
    for member in members:
        if member.id not in client_ids:
            continue
        upcoming = 0
        for booking in sessions:
            day = parse_day(booking.date)
            if booking.member_id == member.id and day is not None and day >= today:
                upcoming += 1
        clients.append((member, upcoming))
    return clients
