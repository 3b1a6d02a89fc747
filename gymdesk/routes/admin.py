# routes/admin.py
from flask import Blueprint, request, jsonify, current_app, abort
from gymdesk.models.account import add_member, add_trainer, delete_account_with_profile, update_member
from gymdesk.models.base import ValidationError, new_id
from gymdesk.models.booking import BookingRepository, create_booking, CONFIRM, DELETE, EDIT
from gymdesk.models.inventory import InventoryItem, InventoryRepository
from gymdesk.models.member import MemberRepository
from gymdesk.models.membership_plan import MembershipPlan, PlanRepository
from gymdesk.models.trainer import TrainerRepository
from gymdesk.models.user import Role, UserRepository
from gymdesk.routes.auth import request_data
from gymdesk.utils.dashboard import admin_dashboard, member_json, renewals_json
from gymdesk.utils.decorators import admin_required
from gymdesk.utils.schedule import bucket_by_day, calendar_events

admin_bp = Blueprint('admin', __name__)

BOOKING_FIELDS = {
    'memberId': 'member_id',
    'trainerId': 'trainer_id',
    'date': 'date',
    'startTime': 'start_time',
    'endTime': 'end_time',
    'status': 'status',
}


def _store():
    return current_app.store


def _require_plan(plan_name):
    if PlanRepository(_store()).find_by_name(plan_name) is None:
        raise ValidationError(f"Unknown plan '{plan_name}'.")


def _update_member(member_id, change):
    """Apply change(member) to the stored member in one read-modify-write."""
    members = MemberRepository(_store())
    with members.editing() as items:
        member = next((m for m in items if m.id == member_id), None)
        if member is None:
            abort(404, description="Member not found.")
        change(member)
    return member


def booking_changes(data, allowed=tuple(BOOKING_FIELDS)):
    """Map camelCase request fields onto booking attribute names."""
    return {BOOKING_FIELDS[k]: v for k, v in data.items() if k in allowed}


def apply_booking(booking_id, action, actor, changes=None):
    try:
        return BookingRepository(_store()).apply(booking_id, action, actor=actor, changes=changes)
    except LookupError:
        abort(404, description="Session not found.")


# ---------------------------
# Dashboard
# ---------------------------
@admin_bp.route('/dashboard')
@admin_required
def dashboard():
    """Admin dashboard with statistics"""
    timeframe = request.args.get('timeframe', '6M')
    try:
        payload = admin_dashboard(
            MemberRepository(_store()).all(),
            PlanRepository(_store()).all(),
            InventoryRepository(_store()).count_by_status(),
            window=timeframe,
        )
    except ValueError as e:
        raise ValidationError(str(e))
    return jsonify(payload)


# ---------------------------
# Members
# ---------------------------
@admin_bp.route('/members')
@admin_required
def members():
    plans = PlanRepository(_store()).all()
    return jsonify([member_json(m, plans) for m in MemberRepository(_store()).all()])


@admin_bp.route('/members', methods=['POST'])
@admin_required
def add_member_route():
    data = request_data()
    _require_plan(data.get('plan'))
    member = add_member(_store(), data.get('name'), data.get('email'), data.get('plan'))
    return jsonify(member.to_dict()), 201


@admin_bp.route('/members/<member_id>', methods=['PUT'])
@admin_required
def edit_member(member_id):
    data = request_data()
    if data.get('plan'):
        _require_plan(data['plan'])
    member = update_member(
        _store(), member_id,
        name=data.get('name'), email=data.get('email'), plan_name=data.get('plan'),
    )
    if member is None:
        abort(404, description="Member not found.")
    return jsonify(member.to_dict())


@admin_bp.route('/members/<member_id>', methods=['DELETE'])
@admin_required
def delete_member(member_id):
    removed = delete_account_with_profile(UserRepository(_store()), MemberRepository(_store()), member_id)
    if removed is None:
        abort(404, description="Member not found.")
    return jsonify({'message': f'{removed.name} deleted.'})


@admin_bp.route('/members/<member_id>/approve', methods=['POST'])
@admin_required
def approve_member(member_id):
    member = _update_member(member_id, lambda m: m.approve_plan())
    current_app.logger.info("Approved plan %s for member %s", member.plan, member.id)
    return jsonify(member.to_dict())


# ---------------------------
# Renewals
# ---------------------------
@admin_bp.route('/renewals')
@admin_required
def renewals():
    return jsonify(renewals_json(MemberRepository(_store()).all(), PlanRepository(_store()).all()))


@admin_bp.route('/renewals/<member_id>/renew', methods=['POST'])
@admin_required
def renew_member(member_id):
    member = _update_member(member_id, lambda m: m.renew())
    return jsonify(member.to_dict())


@admin_bp.route('/renewals/<member_id>/change-plan', methods=['POST'])
@admin_required
def change_member_plan(member_id):
    plan_name = request_data().get('plan')
    _require_plan(plan_name)
    member = _update_member(member_id, lambda m: m.change_plan(plan_name))
    return jsonify(member.to_dict())


@admin_bp.route('/renewals/<member_id>', methods=['DELETE'])
@admin_required
def delete_lapsed_member(member_id):
    return delete_member(member_id)


# ---------------------------
# Membership plans
# ---------------------------
@admin_bp.route('/plans')
@admin_required
def plans():
    return jsonify([p.to_dict() for p in PlanRepository(_store()).all()])


@admin_bp.route('/plans', methods=['POST'])
@admin_required
def add_plan():
    data = request_data()
    plan = MembershipPlan(id=new_id(), name=data.get('name'), price=data.get('price'),
                          duration=data.get('duration'))
    PlanRepository(_store()).add(plan)
    return jsonify(plan.to_dict()), 201


@admin_bp.route('/plans/<plan_id>', methods=['PUT'])
@admin_required
def edit_plan(plan_id):
    repo = PlanRepository(_store())
    existing = repo.get(plan_id)
    if existing is None:
        abort(404, description="Plan not found.")
    data = request_data()
    plan = MembershipPlan(
        id=plan_id,
        name=data.get('name', existing.name),
        price=data.get('price', existing.price),
        duration=data.get('duration', existing.duration),
    )
    if not repo.replace(plan):
        abort(404, description="Plan not found.")
    if plan.name != existing.name:
        current_app.logger.warning("Plan '%s' renamed to '%s'; members keep the old name",
                                   existing.name, plan.name)
    return jsonify(plan.to_dict())


@admin_bp.route('/plans/<plan_id>', methods=['DELETE'])
@admin_required
def delete_plan(plan_id):
    if PlanRepository(_store()).remove(plan_id) is None:
        abort(404, description="Plan not found.")
    return jsonify({'message': 'Plan deleted.'})


# ---------------------------
# Trainers
# ---------------------------
@admin_bp.route('/trainers')
@admin_required
def trainers():
    return jsonify([t.to_dict() for t in TrainerRepository(_store()).all()])


@admin_bp.route('/trainers', methods=['POST'])
@admin_required
def add_trainer_route():
    data = request_data()
    trainer = add_trainer(
        _store(),
        name=data.get('name'),
        specialty=data.get('specialty'),
        salary=data.get('salary'),
        email=data.get('email'),
        username=data.get('username'),
        password=data.get('password'),
    )
    return jsonify(trainer.to_dict()), 201


@admin_bp.route('/trainers/<trainer_id>', methods=['PUT'])
@admin_required
def edit_trainer(trainer_id):
    data = request_data()
    repo = TrainerRepository(_store())
    with repo.editing() as items:
        trainer = next((t for t in items if t.id == trainer_id), None)
        if trainer is None:
            abort(404, description="Trainer not found.")
        trainer.update_details(data.get('name'), data.get('specialty'), data.get('salary'))
    return jsonify(trainer.to_dict())


@admin_bp.route('/trainers/<trainer_id>', methods=['DELETE'])
@admin_required
def delete_trainer(trainer_id):
    removed = delete_account_with_profile(UserRepository(_store()), TrainerRepository(_store()), trainer_id)
    if removed is None:
        abort(404, description="Trainer not found.")
    return jsonify({'message': f'{removed.name} deleted.'})


# ---------------------------
# Inventory
# ---------------------------
@admin_bp.route('/inventory')
@admin_required
def inventory():
    return jsonify([item.to_dict() for item in InventoryRepository(_store()).all()])


@admin_bp.route('/inventory', methods=['POST'])
@admin_required
def add_inventory_item():
    data = request_data()
    item = InventoryItem(
        id=new_id(),
        name=data.get('name'),
        category=data.get('category', 'Equipment'),
        quantity=data.get('quantity', 1),
        status=data.get('status', 'Operational'),
    )
    InventoryRepository(_store()).add(item)
    return jsonify(item.to_dict()), 201


@admin_bp.route('/inventory/<item_id>', methods=['PUT'])
@admin_required
def edit_inventory_item(item_id):
    repo = InventoryRepository(_store())
    existing = repo.get(item_id)
    if existing is None:
        abort(404, description="Item not found.")
    data = request_data()
    item = InventoryItem(
        id=item_id,
        name=data.get('name', existing.name),
        category=data.get('category', existing.category),
        quantity=data.get('quantity', existing.quantity),
        status=data.get('status', existing.status),
    )
    repo.replace(item)
    return jsonify(item.to_dict())


@admin_bp.route('/inventory/<item_id>', methods=['DELETE'])
@admin_required
def delete_inventory_item(item_id):
    if InventoryRepository(_store()).remove(item_id) is None:
        abort(404, description="Item not found.")
    return jsonify({'message': 'Item deleted.'})


# ---------------------------
# Schedules
# ---------------------------
@admin_bp.route('/schedules')
@admin_required
def schedules():
    """All sessions as calendar events, plus a per-day breakdown"""
    bookings = BookingRepository(_store()).all()
    events = calendar_events(bookings, MemberRepository(_store()).all(), TrainerRepository(_store()).all())
    for event in events:
        event['booking'] = event['booking'].to_dict()
    days = {day: [b.to_dict() for b in items] for day, items in bucket_by_day(bookings).items()}
    return jsonify({'events': events, 'days': days})


@admin_bp.route('/schedules', methods=['POST'])
@admin_required
def add_schedule():
    data = request_data()
    booking = create_booking(
        Role.ADMIN,
        data.get('memberId'), data.get('trainerId'), data.get('date'),
        data.get('startTime'), data.get('endTime'),
    )
    BookingRepository(_store()).add(booking)
    return jsonify(booking.to_dict()), 201


@admin_bp.route('/schedules/<booking_id>', methods=['PUT'])
@admin_required
def edit_schedule(booking_id):
    booking = apply_booking(booking_id, EDIT, Role.ADMIN, booking_changes(request_data()))
    return jsonify(booking.to_dict())


@admin_bp.route('/schedules/<booking_id>/confirm', methods=['POST'])
@admin_required
def confirm_schedule(booking_id):
    booking = apply_booking(booking_id, CONFIRM, Role.ADMIN)
    return jsonify(booking.to_dict())


@admin_bp.route('/schedules/<booking_id>', methods=['DELETE'])
@admin_required
def delete_schedule(booking_id):
    apply_booking(booking_id, DELETE, Role.ADMIN)
    return jsonify({'message': 'Session deleted.'})
