"""Dice Config Frontend Package.

Streamlit frontend with:
- Frozen dataclass configuration
- Cross-session configuration store (frontend.sync)
- Backend API client with retry logic
- Session state management
- Reusable UI components
"""

__version__ = "1.0.0"
