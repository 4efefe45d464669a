# garage/auth.py
"""
Thin wrapper over the Supabase auth client.

Identity is returned as an explicit value so callers that need it (location
creation stamps `created_by`) get it passed in rather than reading ambient
session state.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

log = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.email.split("@")[0].title() if self.email else "there"


def _identity_from_user(user) -> Optional[Identity]:
    if not user or not getattr(user, "id", None):
        return None
    return Identity(user_id=str(user.id), email=getattr(user, "email", None))


def current_identity(client) -> Optional[Identity]:
    session = client.auth.get_session()
    return _identity_from_user(session.user) if session else None


def identity_for_token(client, access_token: str) -> Optional[Identity]:
    res = client.auth.get_user(access_token)
    return _identity_from_user(res.user) if res else None


def sign_in(client, email: str, password: str) -> Identity:
    res = client.auth.sign_in_with_password({"email": email.strip(), "password": password})
    identity = _identity_from_user(res.user)
    if identity is None:
        raise RuntimeError("Sign in returned no user")
    log.info("Signed in %s", identity.email)
    return identity


def sign_out(client) -> None:
    client.auth.sign_out()


def request_password_reset(client, email: str, redirect_to: str) -> None:
    client.auth.reset_password_for_email(email.strip(), options={"redirect_to": redirect_to})


def update_password(client, password: str) -> None:
    client.auth.update_user({"password": password})


def validate_new_password(password: str, confirm: str) -> Optional[str]:
    """Return an error message, or None when the pair is acceptable."""
    if len(password or "") < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    if password != confirm:
        return "Passwords don't match"
    return None


def recovery_tokens(params: Mapping[str, str]) -> Optional[Tuple[str, str]]:
    """(access_token, refresh_token) when the URL carries a recovery link, else None."""
    if params.get("type") != "recovery":
        return None
    access, refresh = params.get("access_token"), params.get("refresh_token")
    if not (access and refresh):
        return None
    return access, refresh


def establish_reset_session(client, params: Mapping[str, str]) -> bool:
    """
    True when the password may be reset: either the recovery tokens in the URL
    produce a session, or the client is already signed in.
    """
    tokens = recovery_tokens(params)
    if tokens:
        try:
            client.auth.set_session(*tokens)
        except Exception:
            log.warning("Recovery link rejected", exc_info=True)
            return False
        return True
    return client.auth.get_session() is not None
