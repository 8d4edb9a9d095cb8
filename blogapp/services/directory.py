# blogapp/services/directory.py
import logging

from blogapp.models import ROLES
from blogapp.utils.results import ErrorKind, forbidden, unauthorized

logger = logging.getLogger(__name__)


class AdminDirectory:
    """Listado de usuarios y cambio de rol para el panel de admin."""

    def __init__(self, profiles):
        self.profiles = profiles

    def list_users(self):
        return self.profiles.list_by_created()

    def set_role(self, target_id, role, caller_id):
        # Nadie cambia su propio rol, ni siquiera un admin
        if target_id == caller_id:
            return forbidden("You cannot change your own role")
        if role not in ROLES:
            return forbidden(f"Invalid role: '{role}'")

        caller = self.profiles.get(caller_id)
        if not caller.success:
            if caller.kind is ErrorKind.BACKEND_ERROR:
                return caller
            return unauthorized("Unauthorized: only admins can change roles")
        if not caller.value.is_admin:
            return unauthorized("Unauthorized: only admins can change roles")

        result = self.profiles.set_role(target_id, role)
        if result.success:
            logger.info("Rol de %s cambiado a %s por %s", target_id, role, caller_id)
        return result
