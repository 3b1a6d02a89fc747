# routes/trainer_routes.py
from flask import Blueprint, session, jsonify, current_app, abort
from gymdesk.models.booking import BookingRepository, awaiting_party, create_booking, CONFIRM, DELETE, EDIT
from gymdesk.models.member import MemberRepository
from gymdesk.models.user import Role
from gymdesk.routes.admin import apply_booking, booking_changes
from gymdesk.routes.auth import request_data
from gymdesk.utils.decorators import trainer_required
from gymdesk.utils.schedule import bucket_by_day, pending_counts, trainer_clients

trainer_routes_bp = Blueprint('trainer_routes', __name__)

TRAINER_FIELDS = ('memberId', 'date', 'startTime', 'endTime')


def _own_booking(booking_id):
    booking = BookingRepository(current_app.store).get(booking_id)
    if booking is None or booking.trainer_id != str(session['user_id']):
        abort(404, description="Session not found.")
    return booking


@trainer_routes_bp.route('/schedule')
@trainer_required
def my_schedule():
    """Trainer's sessions grouped by day, with pending counts"""
    sessions = BookingRepository(current_app.store).for_trainer(session['user_id'])
    member_names = {m.id: m.name for m in MemberRepository(current_app.store).all()}
    days = {}
    for day, items in bucket_by_day(sessions).items():
        days[day] = []
        for booking in items:
            data = booking.to_dict()
            data['memberName'] = member_names.get(booking.member_id, 'Unknown')
            days[day].append(data)
    counts = pending_counts(sessions)
    return jsonify({
        'days': days,
        'pending': {status.value: count for status, count in counts.items()},
    })


@trainer_routes_bp.route('/schedule', methods=['POST'])
@trainer_required
def add_session():
    """Book a member; the member has to confirm it"""
    data = request_data()
    booking = create_booking(
        Role.TRAINER,
        data.get('memberId'), session['user_id'], data.get('date'),
        data.get('startTime'), data.get('endTime'),
    )
    BookingRepository(current_app.store).add(booking)
    return jsonify(booking.to_dict()), 201


@trainer_routes_bp.route('/schedule/<booking_id>', methods=['PUT'])
@trainer_required
def edit_session(booking_id):
    _own_booking(booking_id)
    changes = booking_changes(request_data(), allowed=TRAINER_FIELDS)
    booking = apply_booking(booking_id, EDIT, Role.TRAINER, changes)
    return jsonify(booking.to_dict())


@trainer_routes_bp.route('/schedule/<booking_id>/confirm', methods=['POST'])
@trainer_required
def confirm_session(booking_id):
    booking = _own_booking(booking_id)
    if awaiting_party(booking) != Role.TRAINER:
        return jsonify({'error': 'This session is not waiting for your confirmation.'}), 403
    booking = apply_booking(booking_id, CONFIRM, Role.TRAINER)
    return jsonify(booking.to_dict())


@trainer_routes_bp.route('/schedule/<booking_id>', methods=['DELETE'])
@trainer_required
def delete_session(booking_id):
    _own_booking(booking_id)
    apply_booking(booking_id, DELETE, Role.TRAINER)
    return jsonify({'message': 'Session deleted.'})


@trainer_routes_bp.route('/clients')
@trainer_required
def my_clients():
    bookings = BookingRepository(current_app.store).all()
    members = MemberRepository(current_app.store).all()
    return jsonify([
        dict(member.to_dict(), upcomingSessions=upcoming)
        for member, upcoming in trainer_clients(session['user_id'], bookings, members)
    ])
