# blogapp/__init__.py
import logging
import os

from flask import Flask, current_app, g, request

from blogapp.auth.provider import AuthProvider
from blogapp.auth.session import SessionManager
from blogapp.config import Config
from blogapp.extensions import db, migrate, cors
from blogapp.routes import register_routes  # <- usar el init de routes
from blogapp.services.profiles import ProfileStore


def bearer_token():
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header.replace("Bearer ", "", 1).strip() or None
    return None


def load_session():
    """Arma el SessionManager del request y reanuda el token si viene."""
    profiles = ProfileStore()
    provider = AuthProvider.from_config(current_app.config, token_versions=profiles)
    g.session_manager = SessionManager(provider, profiles).start()
    provider.resume(bearer_token())


def close_session(exc=None):
    manager = g.pop("session_manager", None)
    if manager is not None:
        manager.close()
        manager.provider.close()


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(level=app.config.get("LOG_LEVEL", "INFO"))

    # Inicializar extensiones
    db.init_app(app)
    migrate.init_app(app, db)
    cors.init_app(
        app,
        resources={r"/*": {"origins": "*"}},
        supports_credentials=True,
        allow_headers=["Content-Type", "Authorization"]
    )

    # Registrar blueprints centralizado
    register_routes(app)

    app.before_request(load_session)
    app.teardown_request(close_session)

    with app.app_context():
        if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite:///") and not app.testing:
            os.makedirs(os.path.join(Config.basedir, "instance"), exist_ok=True)
        db.create_all()

    return app
