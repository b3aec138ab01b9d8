"""Page components for the Dice Config app."""
from frontend.ui.pages.home import render_home_page

__all__ = [
    "render_home_page",
]
