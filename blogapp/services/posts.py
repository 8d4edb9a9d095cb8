# blogapp/services/posts.py
"""
Gateway de la colección de posts.

Todas las operaciones devuelven Ok/Err. Los payloads con tipos inválidos dan
InvalidInput; cualquier error al escribir se convierte en BackendError
después de hacer rollback. Editar y borrar exigen que quien llama sea el
autor o un admin.

Orden de list()/subscribe(): timestamp del servidor descendente, empate por
id descendente; los posts sin timestamp van al final.
"""
import logging
from datetime import datetime

from slugify import slugify
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from blogapp.extensions import db
from blogapp.models import Post
from blogapp.services.realtime import post_changes
from blogapp.utils.results import ErrorKind, Ok, backend_error, invalid_input, not_found, unauthorized

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("title", "sub_title", "content", "category", "image_url", "created_at")


def check_fields(data):
    """Tipos de los campos del payload; devuelve Err o None."""
    if not isinstance(data, dict):
        return invalid_input("Payload must be a JSON object")
    for name in TEXT_FIELDS:
        if name in data and data[name] is not None and not isinstance(data[name], str):
            return invalid_input(f"Field '{name}' must be a string")
    if "is_published" in data and not isinstance(data["is_published"], bool):
        return invalid_input("Field 'is_published' must be a boolean")
    return None


def generate_unique_slug(title, author_id, exclude_id=None):
    """Genera un slug único; si ya existe agrega un sufijo"""
    base_slug = slugify(title or "") or "post"
    slug = base_slug
    i = 1
    while True:
        query = db.select(Post.id).filter_by(slug=slug)
        if exclude_id is not None:
            query = query.filter(Post.id != exclude_id)
        if db.session.scalar(query) is None:
            return slug
        slug = f"{base_slug}-{i}-{slugify(str(author_id))}"
        i += 1


def ordered_posts_query():
    return db.select(Post).order_by(Post.timestamp.desc().nulls_last(), Post.id.desc())


class ContentStoreGateway:
    def __init__(self, profiles, recent_limit=5):
        self.profiles = profiles
        self.recent_limit = recent_limit

    def _fail(self, action, error):
        db.session.rollback()
        logger.exception("Error al %s", action)
        return backend_error(str(error))

    # 🟢 Crear
    def create(self, post, author_id):
        bad = check_fields(post)
        if bad:
            return bad
        fields = {name: post[name] for name in Post.EDITABLE_FIELDS if name in post}
        try:
            new_post = Post(
                **fields,
                author_id=author_id,
                created_at=post.get("created_at") or datetime.utcnow().isoformat() + "Z",
                slug=generate_unique_slug(fields.get("title"), author_id),
            )
            db.session.add(new_post)
            db.session.commit()
            logger.info("Post %s creado por %s", new_post.id, author_id)
            return Ok(new_post.id)
        except Exception as e:
            return self._fail("crear el post", e)

    # 🟣 Listar
    def list(self):
        try:
            return Ok(list(db.session.scalars(ordered_posts_query()).all()))
        except SQLAlchemyError as e:
            return self._fail("listar los posts", e)

    def watch(self, callback):
        """callback() después de cada commit que toca la colección, sin datos.

        El que escucha vuelve a leer cuando le conviene (el stream lo hace
        en su propio request). Devuelve el disposer.
        """
        return post_changes.add(callback)

    def subscribe(self, on_change):
        """on_change(posts) después de cada commit que toca la colección.

        Devuelve el disposer; se puede llamar varias veces.
        """
        def deliver():
            # Sesión propia: la del commit ya no puede ejecutar SQL
            with Session(db.engine) as session:
                posts = list(session.scalars(ordered_posts_query()).all())
            on_change(posts)

        return self.watch(deliver)

    # 🔵 Ver uno (por id o slug)
    def get_by_id(self, identifier):
        try:
            if isinstance(identifier, int) or str(identifier).isdigit():
                post = db.session.get(Post, int(identifier))
            else:
                post = db.session.scalar(db.select(Post).filter_by(slug=identifier))
        except SQLAlchemyError as e:
            return self._fail("leer el post", e)
        if post is None:
            return not_found("Blog not found")
        return Ok(post)

    def _authorize(self, post, caller_id, action):
        if post.author_id == caller_id:
            return None
        role = self.profiles.get(caller_id)
        if role.success and role.value.is_admin:
            return None
        if not role.success and role.kind is ErrorKind.BACKEND_ERROR:
            return role
        return unauthorized(f"Unauthorized: You can only {action} your own blogs")

    # 🟡 Editar (solo dueño o admin)
    def update(self, post_id, patch, caller_id):
        bad = check_fields(patch)
        if bad:
            return bad

        found = self.get_by_id(post_id)
        if not found.success:
            return found
        post = found.value

        denied = self._authorize(post, caller_id, "edit")
        if denied:
            return denied

        # Cualquier falla a mitad del patch se deshace entera
        try:
            old_title = post.title
            for name in Post.EDITABLE_FIELDS:
                if name in patch:
                    setattr(post, name, patch[name])
            if "title" in patch and patch["title"] != old_title:
                post.slug = generate_unique_slug(patch["title"], post.author_id, exclude_id=post.id)
            post.updated_at = datetime.utcnow()
            db.session.commit()
            return Ok()
        except Exception as e:
            return self._fail("actualizar el post", e)

    # 🔴 Borrar (dueño o admin)
    def delete(self, post_id, caller_id):
        found = self.get_by_id(post_id)
        if not found.success:
            return found
        post = found.value

        denied = self._authorize(post, caller_id, "delete")
        if denied:
            return denied

        try:
            db.session.delete(post)
            db.session.commit()
            logger.info("Post %s borrado por %s", post_id, caller_id)
            return Ok()
        except SQLAlchemyError as e:
            return self._fail("borrar el post", e)

    # 📊 Números del dashboard
    def stats(self, caller_id):
        result = self.list()
        if not result.success:
            return result
        posts = result.value
        mine = [p for p in posts if p.author_id == caller_id]
        others = [p for p in posts if p.author_id != caller_id]
        published = sum(1 for p in posts if p.is_published)
        return Ok({
            "blogs": len(posts),
            "published": published,
            "drafts": len(posts) - published,
            "my_blogs": len(mine),
            "recent": (mine + others)[:self.recent_limit],
        })
