"""Dice Config Streamlit entry point.

Every browser tab is its own Streamlit session with its own configuration
store; the stores stay in sync through the shared storage directory.

Run with: streamlit run frontend/app.py
"""

import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# .env must be loaded before frontend.config.settings reads the environment
from dotenv import load_dotenv
load_dotenv(PROJECT_ROOT / ".env")

import streamlit as st

# `streamlit run` puts frontend/ on the path, not the project root
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from frontend.config.settings import config
from frontend.services import set_session_id
from frontend.ui.components import render_sidebar
from frontend.ui.pages import render_home_page
from frontend.utils import SessionState

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

_PAGE_CSS = """
<style>
section[data-testid="stSidebar"] > div { padding-top: 1rem; }
/* Dice buttons: one row, equal weight */
.stButton > button { font-size: 1rem; font-weight: 600; min-width: 3.5rem; }
div[data-testid="stMetricValue"] { font-size: 1.6rem; }
footer { visibility: hidden; }
</style>
"""


def main():
    st.set_page_config(
        page_title=config.APP_NAME,
        page_icon=config.APP_ICON,
        layout="centered",
        initial_sidebar_state="expanded",
    )
    st.markdown(_PAGE_CSS, unsafe_allow_html=True)

    SessionState.init_defaults()
    # The shared client is used by health checks; the controller keeps its own per session
    set_session_id(SessionState.get_session_id())

    render_sidebar()
    render_home_page()


if __name__ == "__main__":
    main()
