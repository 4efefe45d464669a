# dashboard/lib/auth.py
import logging

import streamlit as st

from garage import auth
from garage.config import get_settings

from dashboard.hooks.base import error_message
from . import session

log = logging.getLogger(__name__)


def signin_page():
    from dashboard.pages import FORGOT_PASSWORD

    st.title("Sign in")
    st.caption("Use your team account to continue.")
    with st.form("signin"):
        email = st.text_input("Email").strip().lower()
        password = st.text_input("Password", type="password")
        go = st.form_submit_button("Sign in", type="primary")

    if go:
        if not (email and password):
            st.error("Enter your email and password.")
        else:
            try:
                auth.sign_in(session.client(), email, password)
            except Exception as exc:
                log.warning("Sign in failed for %s: %s", email, exc)
                st.error(error_message(exc, "Sign in failed"))
            else:
                session.forget_session()
                st.rerun()

    st.page_link(FORGOT_PASSWORD, label="Forgot your password?")


def forgot_password_page():
    from dashboard.pages import SIGNIN

    st.title("Forgot password")
    with st.form("forgot_password"):
        email = st.text_input("Email").strip().lower()
        go = st.form_submit_button("Send reset link", type="primary")

    if go:
        if not email:
            st.error("Enter your email.")
        else:
            try:
                auth.request_password_reset(session.client(), email, get_settings().reset_password_url)
            except Exception as exc:
                log.error("Password reset request failed for %s", email, exc_info=True)
                st.error(error_message(exc, "Could not send the reset email"))
            else:
                st.success("If that email has an account, a reset link is on its way.")

    st.page_link(SIGNIN, label="Back to sign in")


def reset_password_page():
    from dashboard.pages import FORGOT_PASSWORD

    st.title("Reset password")
    sb = session.client()

    if not st.session_state.get("recovery_ready"):
        if not auth.establish_reset_session(sb, st.query_params.to_dict()):
            st.error("This reset link is invalid or has expired.")
            st.page_link(FORGOT_PASSWORD, label="Request a new link")
            return
        st.session_state["recovery_ready"] = True
        # Tokens should not linger in the address bar
        st.query_params.clear()

    with st.form("reset_password"):
        pw1 = st.text_input("New password", type="password")
        pw2 = st.text_input("Confirm new password", type="password")
        go = st.form_submit_button("Update password", type="primary")

    if go:
        problem = auth.validate_new_password(pw1, pw2)
        if problem:
            st.error(problem)
            return
        try:
            auth.update_password(sb, pw1)
        except Exception as exc:
            log.error("Password update failed", exc_info=True)
            st.error(error_message(exc, "Failed to update password"))
            return
        st.session_state.pop("recovery_ready", None)
        st.success("Password updated. You're signed in.")


def sidebar_account(identity: auth.Identity):
    """Who is signed in, plus sign out."""
    st.sidebar.caption(f"Signed in as **{identity.email or identity.user_id}**")
    if st.sidebar.button("Sign out", key="sign_out"):
        try:
            auth.sign_out(session.client())
        except Exception:
            log.warning("Sign out failed; clearing local session anyway", exc_info=True)
        session.forget_session()
        st.session_state.pop("sb", None)
        st.rerun()
