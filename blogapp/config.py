# blogapp/config.py
import os


class Config:
    """Configuración base, leída del entorno con valores de desarrollo."""

    SECRET_KEY = os.environ.get("SECRET_KEY") or "dev-secret-key"

    # JWT propio que se entrega al cliente después del login
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY") or "supersecret"
    JWT_EXPIRES_HOURS = int(os.environ.get("JWT_EXPIRES_HOURS", 8))

    basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL") or \
        "sqlite:///" + os.path.join(basedir, "instance", "blog.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Servicio externo de identidad (alta, login)
    AUTH_PROVIDER_URL = (os.environ.get("AUTH_PROVIDER_URL") or "http://localhost:9099/identity").rstrip("/")
    AUTH_PROVIDER_TIMEOUT = float(os.environ.get("AUTH_PROVIDER_TIMEOUT", 5))

    RECENT_POSTS_LIMIT = 5

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    AUTH_PROVIDER_URL = "http://identity.test"
    JWT_SECRET_KEY = "test-secret-key-with-enough-length-32"
