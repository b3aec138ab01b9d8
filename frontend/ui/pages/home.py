"""Home page for the Dice Config app."""

import logging

import streamlit as st

from frontend.config.settings import config
from frontend.ui.components import render_dice_selector
from frontend.utils import SessionState

logger = logging.getLogger(__name__)


def render_home_page() -> None:
    """Render the die picker."""
    st.title(f"{config.APP_ICON} {config.APP_NAME}")
    st.caption(
        "Pick a die or enter a custom number of sides. "
        "Your choice is shared with your other open tabs."
    )

    last_error = SessionState.get('last_error')
    if last_error:
        st.warning(last_error)

    render_dice_selector()
