# dashboard/main.py
import logging

from dotenv import load_dotenv
load_dotenv()

import streamlit as st

from garage.config import get_settings

logging.basicConfig(
    level=get_settings().LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(message)s",
)

from dashboard.lib import session
from dashboard.lib.auth import sidebar_account
from dashboard.pages import SIGNED_IN, SIGNED_OUT

# ──────────────────────────────────────────────────────────────────────────────
st.set_page_config(page_title="Garage Attendance", page_icon="📊", layout="wide", initial_sidebar_state="expanded")

# Auth gate
identity = session.identity()
if identity is None:
    nav = st.navigation(SIGNED_OUT, position="hidden")
else:
    sidebar_account(identity)
    nav = st.navigation(SIGNED_IN)

nav.run()
