from functools import wraps
from flask import session, url_for


def _login_needed():
    return {'error': 'Authentication required', 'redirect': url_for('auth.login')}, 401


def _forbidden(message):
    return {'error': message}, 403


def login_required(f):
    """Decorator to require login for routes"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'user_id' not in session:
            return _login_needed()
        return f(*args, **kwargs)
    return decorated_function


def role_required(*allowed_roles, message=None):
    """Decorator to require one of the given roles"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if 'user_id' not in session:
                return _login_needed()
            if session.get('role') not in allowed_roles:
                return _forbidden(message or f'Access denied. Required roles: {", ".join(allowed_roles)}')
            return f(*args, **kwargs)
        return decorated_function
    return decorator


admin_required = role_required('admin', message='Access denied. Admin privileges required.')
member_required = role_required('member', message='Access denied. Member login required.')
trainer_required = role_required('trainer', message='Access denied. Trainer login required.')
