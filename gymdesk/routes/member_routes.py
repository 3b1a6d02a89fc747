# routes/member_routes.py
from flask import Blueprint, session, jsonify, current_app, abort
from gymdesk.models.base import ValidationError
from gymdesk.models.booking import BookingRepository, awaiting_party, create_booking, CONFIRM, DELETE
from gymdesk.models.member import MemberRepository
from gymdesk.models.membership_plan import PlanRepository
from gymdesk.models.trainer import TrainerRepository
from gymdesk.models.user import Role
from gymdesk.routes.admin import apply_booking
from gymdesk.routes.auth import request_data
from gymdesk.utils.dashboard import member_json
from gymdesk.utils.decorators import member_required
from gymdesk.utils.schedule import pending_counts, upcoming_sessions

# Blueprint without url_prefix; app.register_blueprint(..., url_prefix='/member') sets the path.
member_routes_bp = Blueprint('member', __name__)


def _current_member():
    member = MemberRepository(current_app.store).get(session['user_id'])
    if member is None:
        abort(404, description="Member profile not found.")
    return member


def _own_booking(booking_id):
    booking = BookingRepository(current_app.store).get(booking_id)
    if booking is None or booking.member_id != str(session['user_id']):
        abort(404, description="Session not found.")
    return booking


def _booking_json(booking, trainer_names):
    data = booking.to_dict()
    data['trainerName'] = trainer_names.get(booking.trainer_id, 'Unknown')
    return data


@member_routes_bp.route('/plan')
@member_required
def my_plan():
    """Current plan, expiry and the next few confirmed sessions"""
    member = _current_member()
    plans = PlanRepository(current_app.store).all()
    trainer_names = {t.id: t.name for t in TrainerRepository(current_app.store).all()}
    sessions = BookingRepository(current_app.store).for_member(member.id)
    return jsonify({
        'member': member_json(member, plans),
        'plans': [p.to_dict() for p in plans],
        'upcomingSessions': [_booking_json(b, trainer_names) for b in upcoming_sessions(sessions)],
    })


@member_routes_bp.route('/plan/request', methods=['POST'])
@member_required
def request_plan():
    plan_name = request_data().get('plan')
    if PlanRepository(current_app.store).find_by_name(plan_name) is None:
        raise ValidationError(f"Unknown plan '{plan_name}'.")

    members = MemberRepository(current_app.store)
    with members.editing() as items:
        member = next((m for m in items if m.id == str(session['user_id'])), None)
        if member is None:
            abort(404, description="Member profile not found.")
        member.request_plan(plan_name)
    current_app.logger.info("Member %s requested plan %s", member.id, plan_name)
    return jsonify(member.to_dict())


@member_routes_bp.route('/schedule')
@member_required
def my_schedule():
    trainer_names = {t.id: t.name for t in TrainerRepository(current_app.store).all()}
    sessions = BookingRepository(current_app.store).for_member(session['user_id'])
    counts = pending_counts(sessions)
    return jsonify({
        'sessions': [_booking_json(b, trainer_names) for b in sessions],
        'pending': {status.value: count for status, count in counts.items()},
    })


@member_routes_bp.route('/schedule', methods=['POST'])
@member_required
def request_session():
    """Ask a trainer for a session; the trainer has to confirm it"""
    data = request_data()
    booking = create_booking(
        Role.MEMBER,
        session['user_id'], data.get('trainerId'), data.get('date'),
        data.get('startTime'), data.get('endTime'),
    )
    BookingRepository(current_app.store).add(booking)
    return jsonify(booking.to_dict()), 201


@member_routes_bp.route('/schedule/<booking_id>/confirm', methods=['POST'])
@member_required
def confirm_session(booking_id):
    booking = _own_booking(booking_id)
    if awaiting_party(booking) != Role.MEMBER:
        return jsonify({'error': 'This session is not waiting for your confirmation.'}), 403
    booking = apply_booking(booking_id, CONFIRM, Role.MEMBER)
    return jsonify(booking.to_dict())


@member_routes_bp.route('/schedule/<booking_id>', methods=['DELETE'])
@member_required
def cancel_session(booking_id):
    _own_booking(booking_id)
    apply_booking(booking_id, DELETE, Role.MEMBER)
    return jsonify({'message': 'Session cancelled.'})
