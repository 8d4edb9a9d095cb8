# blogapp/services/profiles.py
import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from blogapp.extensions import db
from blogapp.models import BlogUser
from blogapp.utils.results import ErrorKind, Ok, backend_error, not_found

logger = logging.getLogger(__name__)


def default_display_name(email):
    return (email or "").split("@")[0] or "User"


class ProfileStore:
    """Documentos de perfil (blog_users), uno por identidad."""

    def create(self, uid, email, display_name=None):
        try:
            profile = db.session.get(BlogUser, uid)
            if profile is None:
                profile = BlogUser(
                    id=uid,
                    email=email,
                    display_name=display_name or default_display_name(email),
                    role="user",
                    is_active=True,
                    token_version=0,
                )
                db.session.add(profile)
                db.session.commit()
            return Ok(profile)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.exception("Error al crear el perfil %s", uid)
            return backend_error(str(e))

    def get(self, uid):
        try:
            profile = db.session.get(BlogUser, uid)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.exception("Error al leer el perfil %s", uid)
            return backend_error(str(e))
        if profile is None:
            return not_found("User profile not found")
        return Ok(profile)

    def get_or_create(self, identity):
        """Perfil de la identidad; si no existe lo crea con rol 'user'."""
        result = self.get(identity.uid)
        if result.success:
            return result
        if result.kind is ErrorKind.NOT_FOUND:
            return self.create(identity.uid, identity.email, identity.display_name)
        return result

    def token_version(self, uid):
        """Versión vigente de los tokens de uid; 0 si todavía no tiene perfil."""
        result = self.get(uid)
        if result.success:
            return Ok(result.value.token_version or 0)
        if result.kind is ErrorKind.NOT_FOUND:
            return Ok(0)
        return result

    def revoke_tokens(self, uid):
        try:
            profile = db.session.get(BlogUser, uid)
            if profile is None:
                return not_found("User profile not found")
            profile.token_version = (profile.token_version or 0) + 1
            db.session.commit()
            return Ok()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.exception("Error al revocar los tokens de %s", uid)
            return backend_error(str(e))

    def set_role(self, uid, role):
        try:
            profile = db.session.get(BlogUser, uid)
            if profile is None:
                return not_found("User profile not found")
            profile.role = role
            profile.updated_at = datetime.utcnow()
            db.session.commit()
            return Ok()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.exception("Error al cambiar el rol de %s", uid)
            return backend_error(str(e))

    def list_by_created(self):
        try:
            users = db.session.scalars(
                db.select(BlogUser).order_by(BlogUser.created_at.desc())
            ).all()
            return Ok(list(users))
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.exception("Error al listar perfiles")
            return backend_error(str(e))
