"""Dice selector component.

Predefined buttons and a validated custom input. The current
configuration is shown in a fragment that reruns on an interval, so a
choice made in another tab shows up here without a manual reload.
"""

import logging

import streamlit as st

from frontend.config.settings import config
from frontend.services import get_dice_controller
from frontend.utils import (
    SessionState,
    TAB_PREDEFINED,
    TAB_CUSTOM,
    DiceInputValidator,
    ConfigUpdateError,
    BackendUnavailableError,
)

logger = logging.getLogger(__name__)


def render_dice_selector() -> None:
    """Render the full selector: current die, predefined grid, custom form."""
    controller = get_dice_controller()

    if not SessionState.get('config_loaded'):
        controller.load()
        SessionState.set('config_loaded', True)

    render_current_config()

    st.divider()

    tab_labels = {TAB_PREDEFINED: "Predefined", TAB_CUSTOM: "Custom"}
    selected = st.radio(
        "Selection method",
        options=list(tab_labels),
        format_func=tab_labels.get,
        index=0 if SessionState.get_selected_tab() == TAB_PREDEFINED else 1,
        horizontal=True,
        label_visibility="collapsed",
    )
    SessionState.set_selected_tab(selected)

    if selected == TAB_PREDEFINED:
        render_predefined_options()
    else:
        render_custom_input()


@st.fragment(run_every=config.CONFIG_REFRESH_INTERVAL_SECONDS)
def render_current_config() -> None:
    """Show the active configuration from the session's store."""
    store = SessionState.get_dice_store()
    dice = store.config

    if dice is None:
        st.info("No die configured yet. Pick one below.")
        return

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Die", dice.display_format)
    with col2:
        low, high = dice.probability_range
        st.metric("Range", f"{low} - {high}")
    with col3:
        st.metric("Chance per face", f"{dice.individual_probability:.2%}")
    st.caption(f"Selected via {dice.selection_method.value} option")


def render_predefined_options() -> None:
    """Grid of buttons, one per predefined die."""
    controller = get_dice_controller()
    options = controller.predefined_options()
    current = controller.store.config

    columns = st.columns(len(options))
    for col, sides in zip(columns, options):
        with col:
            is_current = current is not None and current.dice_sides == sides
            st.button(
                f"D{sides}",
                key=f"predefined_{sides}",
                type="primary" if is_current else "secondary",
                width='stretch',
                on_click=_apply_config,
                args=(sides, "predefined"),
            )


def render_custom_input() -> None:
    """Custom side count with live validation."""
    st.text_input(
        f"Number of sides ({config.MIN_SIDES}-{config.MAX_SIDES})",
        key='custom_value',
        placeholder="e.g. 100",
        on_change=_on_custom_change,
    )

    error = SessionState.get_custom_error()
    if error:
        st.error(error)

    st.button(
        "Apply",
        key="apply_custom",
        type="primary",
        disabled=bool(error) or not SessionState.get('custom_value'),
        on_click=_on_apply_custom,
    )


def _on_custom_change() -> None:
    """Validate the custom field whenever it changes."""
    value = SessionState.get('custom_value', "")
    result = get_dice_controller().validate_custom(value)
    SessionState.set_custom_error(None if result else result.error_message)


def _on_apply_custom() -> None:
    value = SessionState.get('custom_value', "")
    result = DiceInputValidator.validate_custom_sides(value)
    if not result:
        SessionState.set_custom_error(result.error_message)
        return
    if _apply_config(int(value), "custom"):
        SessionState.clear_mode('custom')


def _apply_config(sides: int, selection_method: str) -> bool:
    """Submit a configuration and report the outcome as a toast."""
    controller = get_dice_controller()
    try:
        dice = controller.update_config(sides, selection_method)
    except ConfigUpdateError as e:
        st.toast(f"Rejected: {e.message}")
        SessionState.set('last_error', e.message)
        return False
    except BackendUnavailableError as e:
        logger.error(f"Backend unavailable while saving D{sides}: {e}")
        st.toast("Backend unavailable, configuration not saved")
        SessionState.set('last_error', e.message)
        return False

    SessionState.set('last_error', None)
    st.toast(f"Die set to {dice.display_format}")
    return True
