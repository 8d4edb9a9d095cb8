import pytest

from blogapp import create_app
from blogapp.auth.provider import AuthProvider
from blogapp.auth.session import SessionManager
from blogapp.config import TestConfig
from blogapp.extensions import db
from blogapp.models import BlogUser
from blogapp.services import AdminDirectory, ContentStoreGateway, ProfileStore
from blogapp.services.realtime import post_changes


class FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload


class FakeIdentityService:
    """Servicio de identidad en memoria que reemplaza requests.post."""

    def __init__(self):
        self.accounts = {}
        self.calls = []

    def post(self, url, json=None, timeout=None, **kwargs):
        self.calls.append(url)
        action = url.rsplit("/", 1)[-1]
        email, password = json["email"], json["password"]

        if action == "signup":
            if email in self.accounts:
                return FakeResponse(400, {"error": "EMAIL_EXISTS"})
            if len(password) < 6:
                return FakeResponse(400, {"error": "WEAK_PASSWORD"})
            uid = f"uid-{len(self.accounts) + 1}"
            self.accounts[email] = (uid, password)
            return FakeResponse(200, {"uid": uid, "email": email})

        if action == "login":
            account = self.accounts.get(email)
            if not account or account[1] != password:
                return FakeResponse(401, {"error": "INVALID_LOGIN_CREDENTIALS"})
            return FakeResponse(200, {"uid": account[0], "email": email})

        return FakeResponse(404, {"error": "unknown action"})


@pytest.fixture()
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture(autouse=True)
def identity_service(monkeypatch):
    service = FakeIdentityService()
    monkeypatch.setattr("blogapp.auth.provider.requests.post", service.post)
    return service


@pytest.fixture(autouse=True)
def reset_post_changes():
    yield
    post_changes.clear()


@pytest.fixture()
def profiles(app):
    return ProfileStore()


@pytest.fixture()
def gateway(profiles):
    return ContentStoreGateway(profiles)


@pytest.fixture()
def directory(profiles):
    return AdminDirectory(profiles)


@pytest.fixture()
def make_session(app, profiles):
    managers = []

    def factory(profile_store=None):
        provider = AuthProvider.from_config(app.config, token_versions=profiles)
        manager = SessionManager(provider, profile_store or profiles).start()
        managers.append(manager)
        return manager

    yield factory
    for manager in managers:
        manager.close()


@pytest.fixture()
def make_user(make_session):
    """Da de alta una identidad y devuelve su uid; role='admin' la promueve."""
    def factory(email, password="secret123", role="user"):
        result = make_session().sign_up(email, password)
        assert result.success
        if role != "user":
            profile = db.session.get(BlogUser, result.value.uid)
            profile.role = role
            db.session.commit()
        return result.value.uid

    return factory
