import queue

from flask import Blueprint, Response, current_app, g, json, jsonify, request, stream_with_context

from blogapp.auth.decorators import login_required
from blogapp.extensions import db
from blogapp.services import ContentStoreGateway, ProfileStore

post_bp = Blueprint("posts", __name__)

STREAM_KEEPALIVE_SECONDS = 15


def get_gateway():
    return ContentStoreGateway(ProfileStore(), recent_limit=current_app.config["RECENT_POSTS_LIMIT"])


def _error(result):
    return jsonify(result.to_dict()), result.status_code


def _parse_bool(value):
    return str(value).strip().lower() in ("1", "true", "yes")


# 🟢 Crear un nuevo post
@post_bp.route("/", methods=["POST"])
@login_required
def create_post():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Payload must be a JSON object"}), 400

    # Validar campos obligatorios
    required_fields = ["title", "content"]
    missing = [f for f in required_fields if not data.get(f)]
    if missing:
        return jsonify({"error": f"Missing required fields: {', '.join(missing)}"}), 400

    gateway = get_gateway()
    created = gateway.create(data, g.session_manager.identity.uid)
    if not created.success:
        return _error(created)

    post = gateway.get_by_id(created.value)
    if not post.success:
        return _error(post)
    return jsonify({"message": "Post created", "id": created.value, "data": post.value.to_dict()}), 201


# 🟣 Listar posts (filtros opcionales)
@post_bp.route("/", methods=["GET"])
def get_posts():
    result = get_gateway().list()
    if not result.success:
        return _error(result)

    posts = result.value
    if "published" in request.args:
        wanted = _parse_bool(request.args["published"])
        posts = [p for p in posts if p.is_published == wanted]
    category = request.args.get("category", type=str)
    if category:
        posts = [p for p in posts if (p.category or "").lower() == category.lower()]

    return jsonify({"posts": [p.to_dict() for p in posts], "total": len(posts)}), 200


@post_bp.route("/my-posts", methods=["GET"])
@login_required
def get_my_posts():
    manager = g.session_manager
    result = get_gateway().list()
    if not result.success:
        return _error(result)

    # Si es admin, puede ver todos los posts
    posts = result.value
    if not manager.is_admin:
        posts = [p for p in posts if p.author_id == manager.identity.uid]
    return jsonify({"posts": [p.to_dict() for p in posts], "total": len(posts)}), 200


# 📡 Cambios en vivo (server-sent events)
@post_bp.route("/stream", methods=["GET"])
def stream_posts():
    gateway = get_gateway()
    initial = gateway.list()
    if not initial.success:
        return _error(initial)
    first = [p.to_dict() for p in initial.value]

    # El commit solo avisa; la lectura se hace acá, en el request del stream
    changed = queue.Queue()
    unsubscribe = gateway.watch(lambda: changed.put(True))

    def events():
        try:
            yield f"data: {json.dumps(first)}\n\n"
            while True:
                try:
                    changed.get(timeout=STREAM_KEEPALIVE_SECONDS)
                except queue.Empty:
                    yield ": keep-alive\n\n"
                    continue
                # Varios commits seguidos se juntan en una sola lectura
                while not changed.empty():
                    changed.get_nowait()
                db.session.rollback()
                result = gateway.list()
                if result.success:
                    yield f"data: {json.dumps([p.to_dict() for p in result.value])}\n\n"
        finally:
            unsubscribe()

    return Response(stream_with_context(events()), mimetype="text/event-stream",
                    headers={"Cache-Control": "no-cache"})


# 🔵 Ver un solo post (por ID o slug)
@post_bp.route("/<string:identifier>", methods=["GET"])
def get_post_detail(identifier):
    result = get_gateway().get_by_id(identifier)
    if not result.success:
        return _error(result)
    return jsonify(result.value.to_dict()), 200


# 🟡 Editar post (solo dueño o admin)
@post_bp.route("/<int:id>", methods=["PUT"])
@login_required
def edit_post(id):
    data = request.get_json(silent=True) or {}
    gateway = get_gateway()
    result = gateway.update(id, data, g.session_manager.identity.uid)
    if not result.success:
        return _error(result)

    post = gateway.get_by_id(id)
    if not post.success:
        return _error(post)
    return jsonify({"message": "Post updated", "data": post.value.to_dict()}), 200


# 🔴 Borrar post (dueño o admin)
@post_bp.route("/<int:id>", methods=["DELETE"])
@login_required
def delete_post(id):
    result = get_gateway().delete(id, g.session_manager.identity.uid)
    if not result.success:
        return _error(result)
    return jsonify({"message": "Post deleted"}), 200
