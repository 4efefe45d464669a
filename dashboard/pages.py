# dashboard/pages.py
import streamlit as st

from dashboard.lib.auth import forgot_password_page, reset_password_page, signin_page
from dashboard.views.dashboard import dashboard_page
from dashboard.views.placeholders import analytics_page, attendance_page, reports_page
from dashboard.views.settings import settings_page

# Signed out
SIGNIN = st.Page(signin_page, title="Sign in", icon="🔑", url_path="signin", default=True)
FORGOT_PASSWORD = st.Page(forgot_password_page, title="Forgot password", icon="✉️", url_path="forgot-password")
RESET_PASSWORD = st.Page(reset_password_page, title="Reset password", icon="🔐", url_path="reset-password")

# Signed in
DASHBOARD = st.Page(dashboard_page, title="Dashboard", icon="📊", url_path="dashboard", default=True)
SETTINGS = st.Page(settings_page, title="Settings", icon="⚙️", url_path="settings")
ATTENDANCE = st.Page(attendance_page, title="Attendance", icon="🗓️", url_path="attendance")
ANALYTICS = st.Page(analytics_page, title="Analytics", icon="📈", url_path="analytics")
REPORTS = st.Page(reports_page, title="Reports", icon="📄", url_path="reports")

SIGNED_OUT = [SIGNIN, FORGOT_PASSWORD, RESET_PASSWORD]

SIGNED_IN = {
    "Main": [DASHBOARD, ATTENDANCE, ANALYTICS, REPORTS],
    "Account": [SETTINGS, RESET_PASSWORD],
}
