import uuid

from flask import Flask, g
from flask_sqlalchemy import SQLAlchemy
from flask_socketio import SocketIO

db = SQLAlchemy()
socketio = SocketIO()


def create_app(config_name='default'):
    """Application factory pattern"""
    from config import config

    app = Flask(__name__)
    app.config.from_object(config[config_name])

    from franchise_auction.logger import configure_logging
    configure_logging(app)

    # Initialize extensions
    from franchise_auction.extensions import csrf, limiter
    db.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)
    # Handlers must be declared before init_app binds them to this app's server
    from franchise_auction import sockets
    socketio.init_app(app, cors_allowed_origins="*")

    # Register blueprints
    from franchise_auction.routes import main_bp, api_bp
    app.register_blueprint(main_bp)
    app.register_blueprint(api_bp, url_prefix='/api')

    from franchise_auction.errors import register_error_handlers
    register_error_handlers(app)

    from franchise_auction.auth import hash_password_command
    app.cli.add_command(hash_password_command)

    @app.before_request
    def assign_request_id():
        g.request_id = uuid.uuid4().hex[:8]

    # Event hub listeners
    sockets.register_listeners()

    # Create database tables and the auction session record
    with app.app_context():
        db.create_all()
        from franchise_auction.services.session_service import session_service
        session_service.init()

    return app
