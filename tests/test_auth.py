import pytest

from garage import auth
from garage.config import Settings


def test_sign_in_and_out(sb):
    sb.auth.add_user("ann@example.org", "hunter22")
    assert auth.current_identity(sb) is None

    me = auth.sign_in(sb, " ann@example.org ", "hunter22")
    assert me.email == "ann@example.org"
    assert auth.current_identity(sb) == me
    assert me.display_name == "Ann"

    auth.sign_out(sb)
    assert auth.current_identity(sb) is None


def test_bad_credentials_propagate(sb):
    sb.auth.add_user("ann@example.org", "hunter22")
    with pytest.raises(RuntimeError, match="Invalid login credentials"):
        auth.sign_in(sb, "ann@example.org", "nope")


def test_password_reset_redirects_to_reset_page(sb, monkeypatch):
    monkeypatch.setenv("SITE_URL", "https://attendance.example.org/")
    settings = Settings()
    auth.request_password_reset(sb, "ann@example.org", settings.reset_password_url)
    assert sb.auth.reset_requests == [("ann@example.org", "https://attendance.example.org/reset-password")]


@pytest.mark.parametrize("pw, confirm, expected", [
    ("abc", "abc", "Password must be at least 6 characters"),
    ("abcdef", "abcdeg", "Passwords don't match"),
    ("abcdef", "abcdef", None),
])
def test_validate_new_password(pw, confirm, expected):
    assert auth.validate_new_password(pw, confirm) == expected


def test_recovery_link_establishes_session(sb):
    sb.auth.add_user("ann@example.org", "old-pass", token="tok-1")
    params = {"type": "recovery", "access_token": "tok-1", "refresh_token": "r-1"}
    assert auth.establish_reset_session(sb, params) is True
    auth.update_password(sb, "new-pass")
    assert sb.auth.password_updates == ["new-pass"]


def test_bad_recovery_link_is_rejected(sb):
    params = {"type": "recovery", "access_token": "forged", "refresh_token": "r"}
    assert auth.establish_reset_session(sb, params) is False


def test_reset_without_link_needs_existing_session(sb):
    assert auth.establish_reset_session(sb, {}) is False
    assert auth.recovery_tokens({"type": "signup", "access_token": "a", "refresh_token": "b"}) is None
    sb.auth.add_user("ann@example.org", "pw1234")
    auth.sign_in(sb, "ann@example.org", "pw1234")
    assert auth.establish_reset_session(sb, {}) is True


def test_identity_for_token(sb):
    user = sb.auth.add_user("bo@example.org", "pw1234", token="tok-2")
    assert auth.identity_for_token(sb, "tok-2") == auth.Identity(user_id=user.id, email="bo@example.org")
