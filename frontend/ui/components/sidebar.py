"""Sidebar component for the Dice Config app.

Shows how this session is kept in sync with other tabs:
- Active storage medium
- Consecutive sync failures and whether polling has taken over
- Backend health

The sync section is a fragment that reruns on the refresh interval, since
the store changes from background threads.
"""

import logging

import streamlit as st

from frontend.config.settings import config
from frontend.services import get_dice_controller
from frontend.sync import StorageType
from frontend.utils import SessionState

logger = logging.getLogger(__name__)

_STORAGE_LABELS = {
    StorageType.LOCAL_STORAGE: "Shared (all tabs)",
    StorageType.SESSION_STORAGE: "This tab only",
    StorageType.UNAVAILABLE: "Memory only",
}


def render_sidebar() -> None:
    """Render the sidebar with sync status and controls."""
    with st.sidebar:
        st.markdown(f"## {config.APP_ICON} {config.APP_NAME}")
        st.caption(f"v{config.APP_VERSION}")

        st.divider()

        render_sync_status()

        st.divider()

        if st.button("Clear configuration", key="clear_config", width='stretch'):
            get_dice_controller().clear()
            SessionState.clear_mode('custom')
            st.toast("Configuration cleared")
            st.rerun()

        st.divider()

        render_backend_status()


@st.fragment(run_every=config.CONFIG_REFRESH_INTERVAL_SECONDS)
def render_sync_status() -> None:
    """Render storage medium, failure counter and polling state."""
    st.markdown("### Sync")
    snapshot = SessionState.get_dice_store().snapshot()

    st.caption(f"Storage: {_STORAGE_LABELS.get(snapshot.storage_type, snapshot.storage_type.value)}")

    if snapshot.polling_active:
        st.caption(f"Polling every {config.SYNC_POLL_INTERVAL_SECONDS:g}s")
    elif snapshot.storage_type == StorageType.LOCAL_STORAGE:
        st.caption("Live updates")
    else:
        st.caption("No cross-tab updates")

    if snapshot.sync_retry_count:
        st.caption(f"Sync failures: {snapshot.sync_retry_count}/{config.MAX_SYNC_RETRIES}")

    if snapshot.session_config is not None:
        st.caption(f"Last change: {snapshot.session_config.sync_key}")


def render_backend_status() -> None:
    """Render backend health status."""
    client = get_dice_controller().client
    if client.health_check():
        st.caption("Backend connected")
    else:
        st.caption("Backend unavailable")
