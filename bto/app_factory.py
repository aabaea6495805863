'''
Assembles the Flask app: configuration, server-side sessions, database
session factory, blueprints and error handlers. Does not start a server;
used by bto.run, WSGI servers and tests alike.
'''
# bto/app_factory.py
import os
from typing import Optional

from flask import Flask, jsonify
from flask_session import Session

from bto.config import BASE_DIR, Settings, get_settings
from bto.db.init_db import auto_init
from bto.db.session import build_engine, build_session_factory
from bto.logger import get_logger

logger = get_logger(__name__)

SESSION_FACTORY_KEY = "bto.session_factory"


def create_app(settings: Optional[Settings] = None, *, initialise_db: bool = True) -> Flask:
    """Application factory."""
    settings = settings or get_settings()

    app = Flask(__name__)

    # basic configuration
    app.config["SECRET_KEY"] = settings.secret_key
    app.config["DATABASE_URL"] = settings.database_url
    app.config["JSON_SORT_KEYS"] = False

    # server-side sessions
    app.config["SESSION_TYPE"] = "filesystem"
    app.config["SESSION_PERMANENT"] = False
    app.config["SESSION_USE_SIGNER"] = True
    app.config["SESSION_KEY_PREFIX"] = "bto:"
    session_dir = os.path.join(BASE_DIR, "flask_session")
    os.makedirs(session_dir, exist_ok=True)
    app.config["SESSION_FILE_DIR"] = session_dir
    Session(app)

    # database
    engine = build_engine(settings.database_url)
    session_factory = build_session_factory(engine)
    app.extensions[SESSION_FACTORY_KEY] = session_factory
    if initialise_db:
        auto_init(engine, session_factory, settings)

    # blueprints
    from bto.routes.auth import auth_bp
    from bto.routes.project import project_bp
    from bto.routes.application import application_bp
    from bto.routes.registration import registration_bp
    from bto.routes.withdrawal import withdrawal_bp
    from bto.routes.enquiry import enquiry_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(project_bp)
    app.register_blueprint(application_bp)
    app.register_blueprint(registration_bp)
    app.register_blueprint(withdrawal_bp)
    app.register_blueprint(enquiry_bp)

    register_error_handlers(app)

    logger.info(f"app created (database: {engine.url})")
    return app


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"ok": False, "error_type": "NOT_FOUND", "error_message": "resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"ok": False, "error_type": "VALIDATION_ERROR", "error_message": "method not allowed"}), 405

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"unhandled error: {error}")
        return jsonify({"ok": False, "error_type": "SYSTEM_ERROR", "error_message": "internal error"}), 500
