# blogapp/routes/auth.py
from flask import Blueprint, request, jsonify, g

from blogapp.auth.decorators import login_required

auth_bp = Blueprint("auth", __name__)


def _credentials():
    data = request.get_json(silent=True) or {}
    return data.get("email"), data.get("password")


def _session_payload(manager):
    profile = manager.current_profile()
    return {
        "access_token": manager.token,
        "user": {
            **manager.identity.to_dict(),
            "role": profile.role if profile else "user",
            "is_admin": manager.is_admin,
            "display_name": profile.display_name if profile else manager.identity.display_name,
        },
    }


# 🆕 Alta
@auth_bp.route("/signup", methods=["POST"])
def signup():
    email, password = _credentials()
    if not email or not password:
        return jsonify({"error": "Email and password required"}), 400

    manager = g.session_manager
    result = manager.sign_up(email, password)
    if not result.success:
        return jsonify(result.to_dict()), result.status_code
    return jsonify(_session_payload(manager)), 201


# 🔐 Login
@auth_bp.route("/login", methods=["POST"])
def login():
    email, password = _credentials()
    if not email or not password:
        return jsonify({"error": "Email and password required"}), 400

    manager = g.session_manager
    result = manager.log_in(email, password)
    if not result.success:
        return jsonify(result.to_dict()), result.status_code
    return jsonify(_session_payload(manager)), 200


@auth_bp.route("/logout", methods=["POST"])
def logout():
    result = g.session_manager.log_out()
    if not result.success:
        return jsonify(result.to_dict()), result.status_code
    return jsonify({"message": "Logged out"}), 200


@auth_bp.route("/me", methods=["GET"])
@login_required
def me():
    manager = g.session_manager
    return jsonify({"state": manager.state.value, "profile": manager.current_profile().to_dict()}), 200


# 🔄 Releer el perfil (por ejemplo después de un cambio de rol)
@auth_bp.route("/refresh", methods=["POST"])
@login_required
def refresh():
    manager = g.session_manager
    manager.refresh_profile()
    return jsonify(_session_payload(manager)), 200
