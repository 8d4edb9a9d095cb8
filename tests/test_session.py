import requests

from blogapp.auth.session import SessionState
from blogapp.extensions import db
from blogapp.models import BlogUser
from blogapp.utils.results import ErrorKind, backend_error


class CountingProfiles:
    """Envuelve ProfileStore y cuenta las resoluciones de perfil."""

    def __init__(self, inner):
        self.inner = inner
        self.resolutions = 0

    def get_or_create(self, identity):
        self.resolutions += 1
        return self.inner.get_or_create(identity)


class BrokenProfiles:
    def get_or_create(self, identity):
        return backend_error("profiles offline")


def test_starts_loading_and_resume_without_token_is_anonymous(make_session):
    manager = make_session()
    assert manager.state is SessionState.LOADING

    manager.provider.resume(None)

    assert manager.state is SessionState.ANONYMOUS
    assert manager.current_profile() is None
    assert manager.is_admin is False


def test_sign_up_creates_user_profile(make_session):
    manager = make_session()
    result = manager.sign_up("ana@example.com", "secret123")

    assert result.success
    assert manager.state is SessionState.AUTHENTICATED
    profile = manager.current_profile()
    assert profile.role == "user"
    assert profile.is_active is True
    assert profile.display_name == "ana"
    assert manager.is_admin is False
    assert db.session.get(BlogUser, result.value.uid) is not None


def test_sign_up_then_log_in_yields_same_identity(make_session):
    signed_up = make_session().sign_up("ana@example.com", "secret123")
    logged_in = make_session().log_in("ana@example.com", "secret123")

    assert signed_up.success and logged_in.success
    assert signed_up.value.uid == logged_in.value.uid


def test_duplicate_sign_up_passes_provider_message(make_session):
    make_session().sign_up("ana@example.com", "secret123")
    result = make_session().sign_up("ana@example.com", "other-pass")

    assert not result.success
    assert result.kind is ErrorKind.AUTH_ERROR
    assert result.message == "EMAIL_EXISTS"


def test_log_in_with_bad_password_is_auth_error(make_session):
    make_session().sign_up("ana@example.com", "secret123")
    manager = make_session()

    result = manager.log_in("ana@example.com", "wrong-pass")

    assert result.kind is ErrorKind.AUTH_ERROR
    assert result.message == "INVALID_LOGIN_CREDENTIALS"
    assert manager.state is SessionState.LOADING


def test_provider_unreachable_is_backend_error(make_session, monkeypatch):
    def refuse(*args, **kwargs):
        raise requests.exceptions.ConnectionError("connection refused")

    monkeypatch.setattr("blogapp.auth.provider.requests.post", refuse)

    result = make_session().log_in("ana@example.com", "secret123")
    assert result.kind is ErrorKind.BACKEND_ERROR


def test_log_in_creates_missing_profile(make_session, identity_service):
    # Identidad existente en el proveedor pero sin perfil local
    identity_service.accounts["old@example.com"] = ("uid-legacy", "secret123")
    manager = make_session()

    assert manager.log_in("old@example.com", "secret123").success
    assert manager.current_profile().role == "user"
    assert db.session.get(BlogUser, "uid-legacy") is not None


def test_log_out_clears_session(make_session):
    manager = make_session()
    manager.sign_up("ana@example.com", "secret123")

    assert manager.log_out().success
    assert manager.state is SessionState.ANONYMOUS
    assert manager.identity is None
    assert manager.current_profile() is None
    assert manager.token is None


def test_one_profile_resolution_per_notification(make_session, profiles):
    counting = CountingProfiles(profiles)
    manager = make_session(counting)

    manager.sign_up("ana@example.com", "secret123")
    assert counting.resolutions == 1

    manager.log_out()
    assert counting.resolutions == 1

    manager.log_in("ana@example.com", "secret123")
    assert counting.resolutions == 2


def test_profile_failure_still_leaves_loading(make_session, profiles):
    manager = make_session(BrokenProfiles())
    uid = manager.sign_up("ana@example.com", "secret123").value.uid

    assert manager.state is SessionState.AUTHENTICATED
    assert manager.current_profile().role == "user"
    assert manager.is_admin is False
    assert db.session.get(BlogUser, uid) is None

    # Con el store sano, la siguiente lectura crea el perfil que faltaba
    manager.profiles = profiles
    manager.refresh_profile()

    stored = db.session.get(BlogUser, uid)
    assert stored is not None
    assert stored.role == "user"
    assert manager.current_profile() is stored


def test_refresh_profile_picks_up_role_change(make_session):
    manager = make_session()
    uid = manager.sign_up("ana@example.com", "secret123").value.uid

    profile = db.session.get(BlogUser, uid)
    profile.role = "admin"
    db.session.commit()

    manager.refresh_profile()
    assert manager.is_admin is True


def test_token_resumes_same_identity(make_session):
    first = make_session()
    uid = first.sign_up("ana@example.com", "secret123").value.uid

    second = make_session()
    second.provider.resume(first.token)

    assert second.state is SessionState.AUTHENTICATED
    assert second.identity.uid == uid


def test_invalid_token_resumes_anonymous(make_session):
    manager = make_session()
    manager.provider.resume("not-a-token")
    assert manager.state is SessionState.ANONYMOUS


def test_listeners_see_every_transition(make_session):
    manager = make_session()
    seen = []
    dispose = manager.listen(lambda m: seen.append(m.state))

    manager.sign_up("ana@example.com", "secret123")
    manager.log_out()
    dispose()
    manager.log_in("ana@example.com", "secret123")

    assert seen == [SessionState.AUTHENTICATED, SessionState.ANONYMOUS]


def test_close_stops_auth_notifications(make_session):
    make_session().sign_up("ana@example.com", "secret123")
    manager = make_session()
    manager.provider.resume(None)
    manager.close()
    manager.close()

    manager.provider.authenticate("ana@example.com", "secret123")

    assert manager.state is SessionState.ANONYMOUS
    assert manager.identity is None


def test_log_out_revokes_issued_tokens(make_session):
    manager = make_session()
    manager.sign_up("ana@example.com", "secret123")
    old_token = manager.token

    assert manager.log_out().success

    other = make_session()
    other.provider.resume(old_token)
    assert other.state is SessionState.ANONYMOUS
    assert other.identity is None


def test_log_in_after_log_out_issues_working_token(make_session):
    manager = make_session()
    uid = manager.sign_up("ana@example.com", "secret123").value.uid
    manager.log_out()

    manager.log_in("ana@example.com", "secret123")
    fresh = manager.token

    other = make_session()
    other.provider.resume(fresh)
    assert other.identity.uid == uid


def test_log_out_reports_revocation_failure(make_session, profiles, monkeypatch):
    manager = make_session()
    manager.sign_up("ana@example.com", "secret123")
    monkeypatch.setattr(profiles, "revoke_tokens", lambda uid: backend_error("profiles offline"))

    result = manager.log_out()

    assert result.kind is ErrorKind.BACKEND_ERROR
    assert manager.state is SessionState.ANONYMOUS


def test_token_is_none_when_version_store_fails(make_session, profiles, monkeypatch):
    manager = make_session()
    manager.sign_up("ana@example.com", "secret123")
    monkeypatch.setattr(profiles, "token_version", lambda uid: backend_error("profiles offline"))

    assert manager.token is None
