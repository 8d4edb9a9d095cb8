# blogapp/auth/session.py
"""
Estado de sesión: identidad actual y perfil (rol) derivado.

Estados: loading -> anonymous | authenticated. Cada notificación del
proveedor resuelve el perfil una sola vez y sale de 'loading'. El único que
escribe identidad y perfil es _handle_auth_state (y refresh_profile, que
solo vuelve a leer el perfil).
"""
import logging
from enum import Enum

from blogapp.auth.provider import AuthProviderError, AuthProviderUnavailable
from blogapp.models import BlogUser
from blogapp.services.profiles import default_display_name
from blogapp.utils.listeners import ListenerSet
from blogapp.utils.results import Ok, auth_error, backend_error

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    LOADING = "loading"
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


class SessionManager:
    def __init__(self, provider, profiles):
        self.provider = provider
        self.profiles = profiles
        self.state = SessionState.LOADING
        self.identity = None
        self._profile = None
        self._listeners = ListenerSet("session")
        self._unsubscribe = None

    def start(self):
        if self._unsubscribe is None:
            self._unsubscribe = self.provider.on_auth_state_change(self._handle_auth_state)
        return self

    def close(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._listeners.clear()

    def listen(self, callback):
        """callback(session) en cada transición; devuelve el disposer."""
        return self._listeners.add(callback)

    def _handle_auth_state(self, identity):
        self.identity = identity
        self._profile = self._resolve_profile(identity) if identity else None
        self.state = SessionState.AUTHENTICATED if identity else SessionState.ANONYMOUS
        logger.info("Sesión %s (%s)", self.state.value, identity.uid if identity else "-")
        self._listeners.notify(self)

    def _resolve_profile(self, identity):
        result = self.profiles.get_or_create(identity)
        if result.success:
            return result.value
        # El perfil se repara en la próxima lectura
        logger.warning("No se pudo resolver el perfil de %s: %s", identity.uid, result.message)
        return BlogUser(
            id=identity.uid,
            email=identity.email,
            display_name=identity.display_name or default_display_name(identity.email),
            role="user",
            is_active=True,
        )

    # 🔐 Operaciones
    def sign_up(self, email, password):
        """Crea la identidad; el perfil (rol 'user') lo crea el handler de estado."""
        try:
            return Ok(self.provider.create_identity(email, password))
        except AuthProviderError as e:
            return auth_error(str(e))
        except AuthProviderUnavailable as e:
            return backend_error(str(e))

    def log_in(self, email, password):
        try:
            return Ok(self.provider.authenticate(email, password))
        except AuthProviderError as e:
            return auth_error(str(e))
        except AuthProviderUnavailable as e:
            return backend_error(str(e))

    def log_out(self):
        """Cierra la sesión y revoca los tokens emitidos hasta ahora."""
        return self.provider.sign_out()

    def current_profile(self):
        return self._profile

    def refresh_profile(self):
        if self.identity is None:
            return
        self._profile = self._resolve_profile(self.identity)
        self._listeners.notify(self)

    @property
    def is_authenticated(self):
        return self.state is SessionState.AUTHENTICATED

    @property
    def is_admin(self):
        return self._profile is not None and self._profile.is_admin

    @property
    def token(self):
        if self.identity is None:
            return None
        try:
            return self.provider.issue_token(self.identity)
        except AuthProviderUnavailable as e:
            logger.warning("No se pudo emitir el token de %s: %s", self.identity.uid, e)
            return None
