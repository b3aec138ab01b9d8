"""Reusable UI components for the Dice Config app."""
from frontend.ui.components.sidebar import (
    render_sidebar,
    render_sync_status,
    render_backend_status,
)
from frontend.ui.components.dice_selector import (
    render_dice_selector,
    render_current_config,
    render_predefined_options,
    render_custom_input,
)

__all__ = [
    # Sidebar
    "render_sidebar",
    "render_sync_status",
    "render_backend_status",
    # Dice selector
    "render_dice_selector",
    "render_current_config",
    "render_predefined_options",
    "render_custom_input",
]
