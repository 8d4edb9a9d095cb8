# blogapp/routes/admin_routes.py
from flask import Blueprint, current_app, g, jsonify, request

from blogapp.auth.decorators import admin_required
from blogapp.services import AdminDirectory, ContentStoreGateway, ProfileStore

admin_bp = Blueprint("admin", __name__)


@admin_bp.route("/users", methods=["GET"])
@admin_required
def list_users():
    result = AdminDirectory(ProfileStore()).list_users()
    if not result.success:
        return jsonify(result.to_dict()), result.status_code
    return jsonify({"users": [u.to_dict() for u in result.value]}), 200


@admin_bp.route("/users/<string:user_id>/role", methods=["PUT"])
@admin_required
def set_role(user_id):
    role = (request.get_json(silent=True) or {}).get("role")
    if not role:
        return jsonify({"error": "Role required"}), 400

    result = AdminDirectory(ProfileStore()).set_role(user_id, role, g.session_manager.identity.uid)
    if not result.success:
        return jsonify(result.to_dict()), result.status_code
    return jsonify({"message": "User role updated"}), 200


# 📊 Dashboard
@admin_bp.route("/stats", methods=["GET"])
@admin_required
def stats():
    gateway = ContentStoreGateway(ProfileStore(), recent_limit=current_app.config["RECENT_POSTS_LIMIT"])
    result = gateway.stats(g.session_manager.identity.uid)
    if not result.success:
        return jsonify(result.to_dict()), result.status_code

    data = dict(result.value)
    data["recent"] = [p.to_dict() for p in data["recent"]]
    return jsonify(data), 200
