# blogapp/auth/decorators.py
from functools import wraps
from flask import jsonify, g

from blogapp.auth.session import SessionState


def _guard():
    manager = getattr(g, "session_manager", None)
    if manager is None or manager.state is SessionState.LOADING:
        return jsonify({"error": "Sesión cargando, reintentá"}), 503
    if not manager.is_authenticated:
        return jsonify({"error": "No logueado"}), 401
    return None


def login_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        denied = _guard()
        if denied:
            return denied
        return f(*args, **kwargs)
    return decorated


def admin_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        denied = _guard()
        if denied:
            return denied
        if not g.session_manager.is_admin:
            return jsonify({"error": "Access denied: admins only"}), 403
        return f(*args, **kwargs)
    return decorated
