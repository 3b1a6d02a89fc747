import copy
import logging
from enum import Enum

from gymdesk.models.base import Repository, ValidationError, new_id
from gymdesk.models.database import SCHEDULES_KEY
from gymdesk.models.user import Role
from gymdesk.utils.helpers import is_blank

logger = logging.getLogger(__name__)


class InvalidTransition(Exception):
    """The requested action is not allowed for this booking/actor."""


class BookingStatus(str, Enum):
    CONFIRMED = 'Confirmed'
    PENDING = 'Pending'                   # waiting on the member
    PENDING_TRAINER = 'PendingTrainer'    # waiting on the trainer

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        # Older records spell the trainer-pending state with a space.
        if text == 'Pending Trainer':
            return cls.PENDING_TRAINER
        return cls(text)


INITIAL_STATUS = {
    Role.ADMIN: BookingStatus.CONFIRMED,
    Role.TRAINER: BookingStatus.PENDING,
    Role.MEMBER: BookingStatus.PENDING_TRAINER,
}

CONFIRM = 'confirm'
EDIT = 'edit'
DELETE = 'delete'

ADMIN_EDITABLE = ('member_id', 'trainer_id', 'date', 'start_time', 'end_time', 'status')
TRAINER_EDITABLE = ('member_id', 'date', 'start_time', 'end_time')


class Booking:
    """One training session between a member and a trainer."""

    def __init__(self, id=None, member_id=None, trainer_id=None, date=None,
                 start_time=None, end_time=None, status=BookingStatus.PENDING):
        self.id = str(id) if id is not None else None
        self.member_id = str(member_id) if member_id is not None else None
        self.trainer_id = str(trainer_id) if trainer_id is not None else None
        self.date = date
        self.start_time = start_time
        self.end_time = end_time
        self.status = BookingStatus.parse(status)

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            member_id=data.get('memberId'),
            trainer_id=data.get('trainerId'),
            date=data.get('date'),
            start_time=data.get('startTime'),
            end_time=data.get('endTime'),
            status=data['status'],
        )

    def to_dict(self):
        return {
            'id': self.id,
            'memberId': self.member_id,
            'trainerId': self.trainer_id,
            'date': self.date,
            'startTime': self.start_time,
            'endTime': self.end_time,
            'status': self.status.value,
        }

    def __eq__(self, other):
        if not isinstance(other, Booking):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"<Booking id={self.id} member={self.member_id} trainer={self.trainer_id} "
                f"date={self.date} {self.start_time}-{self.end_time} status={self.status.value}>")


def _require(fields):
    missing = [name for name, value in fields.items() if is_blank(value)]
    if missing:
        raise ValidationError('Please fill out all fields.')


def create_booking(actor, member_id, trainer_id, date, start_time, end_time):
    """
    Build a new booking whose starting status depends on who asked for it.

    Overlapping sessions for the same trainer or member are accepted as is.
    """
    actor = Role.parse(actor)
    _require({
        'member': member_id, 'trainer': trainer_id, 'date': date,
        'start time': start_time, 'end time': end_time,
    })
    return Booking(
        id=new_id(),
        member_id=member_id,
        trainer_id=trainer_id,
        date=date,
        start_time=start_time,
        end_time=end_time,
        status=INITIAL_STATUS[actor],
    )


def awaiting_party(booking):
    """Role whose confirmation the booking is waiting for (None once confirmed)."""
    if booking.status == BookingStatus.PENDING:
        return Role.MEMBER
    if booking.status == BookingStatus.PENDING_TRAINER:
        return Role.TRAINER
    return None


def transition_booking(booking, action, actor=None, changes=None):
    """
    Apply action to booking and return the result.

    * ``confirm`` - pending bookings become Confirmed; a Confirmed booking is
      returned as the very same object.
    * ``edit`` - admins may change any field including status; trainers may
      change member/date/times and the booking goes back to Pending; members
      cannot edit.
    * ``delete`` - returns None (the caller drops the record).

    Authorization is the caller's job: ``actor`` only selects the edit rules.
    """
    if action == CONFIRM:
        if booking.status == BookingStatus.CONFIRMED:
            return booking
        confirmed = copy.copy(booking)
        confirmed.status = BookingStatus.CONFIRMED
        return confirmed

    if action == DELETE:
        return None

    if action == EDIT:
        actor = Role.parse(actor) if actor is not None else None
        if actor == Role.ADMIN:
            allowed = ADMIN_EDITABLE
        elif actor == Role.TRAINER:
            allowed = TRAINER_EDITABLE
        else:
            raise InvalidTransition("Only an admin or the trainer can edit a session.")

        changes = dict(changes or {})
        unknown = sorted(set(changes) - set(allowed))
        if unknown:
            raise ValidationError(f"Cannot change: {', '.join(unknown)}")

        edited = copy.copy(booking)
        for field, value in changes.items():
            if field == 'status':
                try:
                    value = BookingStatus.parse(value)
                except ValueError:
                    raise ValidationError(f"Unknown session status '{value}'.")
            elif field in ('member_id', 'trainer_id') and value is not None:
                value = str(value)
            setattr(edited, field, value)
        _require({
            'member': edited.member_id, 'trainer': edited.trainer_id, 'date': edited.date,
            'start time': edited.start_time, 'end time': edited.end_time,
        })
        if actor == Role.TRAINER:
            edited.status = BookingStatus.PENDING
        return edited

    raise InvalidTransition(f"Unknown booking action: {action!r}")


class BookingRepository(Repository):
    key = SCHEDULES_KEY
    model = Booking

    def for_member(self, member_id):
        return [b for b in self.all() if b.member_id == str(member_id)]

    def for_trainer(self, trainer_id):
        return [b for b in self.all() if b.trainer_id == str(trainer_id)]

    def apply(self, booking_id, action, actor=None, changes=None):
        """
        Run transition_booking against the stored record and persist the result
        in one read-modify-write. Returns the new record (None after delete).
        Raises LookupError when the booking does not exist.
        """
        booking_id = str(booking_id)
        with self.editing() as bookings:
            for i, existing in enumerate(bookings):
                if existing.id == booking_id:
                    result = transition_booking(existing, action, actor=actor, changes=changes)
                    if result is None:
                        bookings.pop(i)
                    else:
                        bookings[i] = result
                    logger.debug("Booking %s: %s by %s", booking_id, action, actor)
                    return result
            raise LookupError(booking_id)
