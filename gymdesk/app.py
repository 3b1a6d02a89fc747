from flask import Flask, jsonify, session
import logging
import os

from gymdesk.models.base import ValidationError
from gymdesk.models.booking import InvalidTransition
from gymdesk.models.database import MemoryKeyValueStore, SqliteKeyValueStore, insert_default_data

# Import route blueprints
from gymdesk.routes.auth import auth_bp
from gymdesk.routes.admin import admin_bp
from gymdesk.routes.member_routes import member_routes_bp
from gymdesk.routes.trainer_routes import trainer_routes_bp


def _env_flag(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def create_store(config):
    """Build the key-value store selected by STORE_BACKEND."""
    backend = config.get('STORE_BACKEND', 'sqlite')
    if backend == 'memory':
        return MemoryKeyValueStore()
    if backend == 'sqlite':
        return SqliteKeyValueStore(config['DATABASE_PATH'])
    raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")


def create_app(test_config=None):
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = os.environ.get(
        'SECRET_KEY',
        'your-secret-key-change-in-production'
    )
    app.config['DATABASE_PATH'] = os.environ.get(
        'DATABASE_PATH',
        'gymdesk.db'
    )
    app.config['STORE_BACKEND'] = os.environ.get('STORE_BACKEND', 'sqlite')
    app.config['SEED_DEFAULT_DATA'] = _env_flag('SEED_DEFAULT_DATA', True)
    app.config['LOG_LEVEL'] = os.environ.get('LOG_LEVEL', 'INFO')

    if test_config:
        app.config.update(test_config)

    app.config.setdefault('SESSION_COOKIE_SAMESITE', 'Lax')
    app.config.setdefault('SESSION_COOKIE_HTTPONLY', True)

    app.logger.setLevel(getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO))

    # Storage; attached to the app for the blueprints
    app.store = create_store(app.config)
    if app.config['SEED_DEFAULT_DATA']:
        insert_default_data(app.store)
    app.logger.info("Using %s store", app.config['STORE_BACKEND'])

    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(admin_bp, url_prefix='/admin')
    app.register_blueprint(member_routes_bp, url_prefix='/member')
    app.register_blueprint(trainer_routes_bp, url_prefix='/trainer')

    @app.route('/')
    def home():
        return jsonify({
            'app': 'gymdesk',
            'user': session.get('username'),
            'role': session.get('role'),
        })

    # Error handlers
    @app.errorhandler(ValidationError)
    def validation_failed(error):
        return jsonify({'error': str(error)}), 400

    @app.errorhandler(InvalidTransition)
    def invalid_transition(error):
        return jsonify({'error': str(error)}), 409

    @app.errorhandler(404)
    def page_not_found(error):
        description = getattr(error, 'description', None) or "Not found"
        return jsonify({'error': description}), 404

    @app.errorhandler(500)
    def internal_server_error(error):
        app.logger.error("Internal server error: %s", error)
        return jsonify({'error': "Internal server error"}), 500

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(debug=True, host='0.0.0.0', port=5000)
