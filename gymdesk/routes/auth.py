from flask import Blueprint, request, session, jsonify, current_app
from gymdesk.models.account import authenticate, signup_member
from gymdesk.utils.decorators import login_required

auth_bp = Blueprint('auth', __name__)


def request_data():
    """JSON body, falling back to form fields."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


@auth_bp.route('/signup', methods=['POST'])
def signup():
    """Create a member account (no plan yet)"""
    data = request_data()
    member = signup_member(
        current_app.store,
        name=data.get('name'),
        email=data.get('email'),
        username=data.get('username'),
        password=data.get('password'),
    )
    current_app.logger.info("New member signup: %s", member.id)
    return jsonify({'message': 'Account created. Please log in.', 'member': member.to_dict()}), 201


@auth_bp.route('/login', methods=['GET'])
def login():
    """Tell the client how to authenticate"""
    return jsonify({'message': 'POST username (or email) and password to log in.'})


@auth_bp.route('/login', methods=['POST'])
def login_post():
    data = request_data()
    login_name = data.get('username') or data.get('email')
    user = authenticate(current_app.store, login_name, data.get('password'))
    if user is None:
        return jsonify({'error': 'Invalid credentials.'}), 401

    session.clear()
    session['user_id'] = user['id']
    session['username'] = user['username']
    session['role'] = user['role']
    current_app.logger.info("%s logged in as %s", user['username'], user['role'])
    return jsonify({'user': user})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """Logout user and clear session"""
    session.clear()
    return jsonify({'message': 'Logged out.'})


@auth_bp.route('/me')
@login_required
def me():
    return jsonify({
        'id': session['user_id'],
        'username': session.get('username'),
        'role': session.get('role'),
    })
