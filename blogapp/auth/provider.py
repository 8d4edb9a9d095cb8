# blogapp/auth/provider.py
"""
Cliente del proveedor externo de identidad.

El alta y el login se hacen contra el servicio HTTP configurado en
AUTH_PROVIDER_URL. Después del login emitimos nuestro propio JWT, y en cada
request lo reanudamos con resume(). Todo cambio de identidad se empuja a los
listeners registrados con on_auth_state_change().
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import jwt
import requests

from blogapp.utils.listeners import ListenerSet
from blogapp.utils.results import Ok

logger = logging.getLogger(__name__)


class AuthProviderError(Exception):
    """El proveedor rechazó las credenciales o el alta."""


class AuthProviderUnavailable(Exception):
    """No se pudo hablar con el proveedor."""


@dataclass(frozen=True)
class Identity:
    uid: str
    email: str
    display_name: Optional[str] = None

    def to_dict(self):
        return {"uid": self.uid, "email": self.email, "display_name": self.display_name}


class AuthProvider:
    def __init__(self, base_url, jwt_secret, timeout=5, token_hours=8, token_versions=None):
        self.base_url = base_url.rstrip("/")
        self.jwt_secret = jwt_secret
        self.timeout = timeout
        self.token_hours = token_hours
        # Guarda la versión de tokens por uid (ProfileStore); None = sin revocación
        self.token_versions = token_versions
        self.current_identity = None
        self._listeners = ListenerSet("auth-state")

    @classmethod
    def from_config(cls, config, token_versions=None):
        return cls(
            config["AUTH_PROVIDER_URL"],
            config["JWT_SECRET_KEY"],
            timeout=config.get("AUTH_PROVIDER_TIMEOUT", 5),
            token_hours=config.get("JWT_EXPIRES_HOURS", 8),
            token_versions=token_versions,
        )

    def on_auth_state_change(self, handler):
        """Registra handler(identity | None); devuelve el disposer."""
        return self._listeners.add(handler)

    def _set_identity(self, identity):
        self.current_identity = identity
        self._listeners.notify(identity)

    def _post(self, path, payload):
        try:
            response = requests.post(f"{self.base_url}{path}", json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.warning("Proveedor de identidad no disponible: %s", e)
            raise AuthProviderUnavailable("Identity provider unavailable") from e

        try:
            data = response.json() or {}
        except ValueError:
            data = {}

        if response.status_code not in (200, 201):
            message = data.get("error") or "Invalid credentials"
            raise AuthProviderError(message)

        uid = data.get("uid") or data.get("user_id")
        if not uid:
            raise AuthProviderError("Identity provider returned no user id")
        return Identity(uid=str(uid), email=data.get("email") or payload["email"],
                        display_name=data.get("display_name"))

    def create_identity(self, email, password):
        identity = self._post("/signup", {"email": email, "password": password})
        logger.info("Identidad creada: %s", identity.uid)
        self._set_identity(identity)
        return identity

    def authenticate(self, email, password):
        identity = self._post("/login", {"email": email, "password": password})
        logger.info("Login correcto: %s", identity.uid)
        self._set_identity(identity)
        return identity

    def sign_out(self):
        """Revoca los tokens emitidos a la identidad actual y la limpia."""
        identity = self.current_identity
        result = Ok()
        if identity is not None and self.token_versions is not None:
            result = self.token_versions.revoke_tokens(identity.uid)
            if not result.success:
                logger.warning("No se pudieron revocar los tokens de %s: %s", identity.uid, result.message)
        self._set_identity(None)
        return result

    # 🛡️ Tokens propios
    def _token_version(self, uid):
        if self.token_versions is None:
            return 0
        result = self.token_versions.token_version(uid)
        return result.value if result.success else None

    def issue_token(self, identity):
        version = self._token_version(identity.uid)
        if version is None:
            raise AuthProviderUnavailable("Token store unavailable")
        payload = {
            "sub": identity.uid,
            "email": identity.email,
            "display_name": identity.display_name,
            "ver": version,
            "exp": datetime.utcnow() + timedelta(hours=self.token_hours),
        }
        return jwt.encode(payload, self.jwt_secret, algorithm="HS256")

    def resume(self, token):
        """Reanuda la sesión de un token y notifica la identidad (o None)."""
        identity = None
        if token:
            try:
                payload = jwt.decode(token, self.jwt_secret, algorithms=["HS256"])
                identity = Identity(uid=payload["sub"], email=payload.get("email", ""),
                                    display_name=payload.get("display_name"))
            except jwt.ExpiredSignatureError:
                logger.info("Token expirado")
            except (jwt.InvalidTokenError, KeyError) as e:
                logger.info("Token inválido: %s", e)

        if identity is not None and payload.get("ver", 0) != self._token_version(identity.uid):
            logger.info("Token revocado para %s", identity.uid)
            identity = None

        self._set_identity(identity)
        return identity

    def close(self):
        self._listeners.clear()
