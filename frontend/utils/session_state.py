"""Per-tab state for the Dice Config app.

Streamlit keeps one ``st.session_state`` per browser tab. Pages and
components go through ``SessionState`` instead of touching it directly;
it also owns the tab's DiceConfigStore so the store lives exactly as long
as the Streamlit session.
"""

import logging
import threading
import uuid
from typing import Any, Callable, Dict, List, Optional

import streamlit as st
from streamlit import runtime
from streamlit.runtime.scriptrunner import get_script_run_ctx

logger = logging.getLogger(__name__)

TAB_PREDEFINED = "predefined"
TAB_CUSTOM = "custom"

STORE_KEY = 'dice_store'
CONTROLLER_KEY = 'dice_controller'

# Started stores by Streamlit session id; Streamlit has no session-end hook
_open_stores: Dict[str, Any] = {}
_open_stores_lock = threading.Lock()


def _new_session_id() -> str:
    return str(uuid.uuid4())


def _streamlit_session_id() -> Optional[str]:
    ctx = get_script_run_ctx(suppress_warning=True)
    return ctx.session_id if ctx is not None else None


def _session_is_active(session_id: str) -> bool:
    if not runtime.exists():
        return True
    return runtime.get_instance().is_active_session(session_id)


def close_abandoned_stores(is_active: Callable[[str], bool] = _session_is_active) -> int:
    """Close the stores of Streamlit sessions that have ended.

    Returns:
        Number of stores closed
    """
    with _open_stores_lock:
        abandoned = [(sid, store) for sid, store in _open_stores.items() if not is_active(sid)]
        for sid, _ in abandoned:
            del _open_stores[sid]

    for sid, store in abandoned:
        try:
            store.close()
        except Exception as e:
            logger.warning(f"Failed to close store of ended session {sid[:8]}...: {e}")
    if abandoned:
        logger.info(f"Closed {len(abandoned)} store(s) of ended sessions")
    return len(abandoned)


class SessionState:
    """Typed access to the current tab's session state.

    Example:
        >>> SessionState.init_defaults()
        >>> store = SessionState.get_dice_store()
        >>> store.config
    """

    DEFAULTS: Dict[str, Callable[[], Any]] = {
        'session_id': _new_session_id,  # sent as X-Session-ID
        'selected_tab': lambda: TAB_PREDEFINED,
        'custom_value': str,
        'custom_error': lambda: None,
        'config_loaded': lambda: False,
        'last_error': lambda: None,
    }

    # Keys reset together when a form is abandoned
    MODE_KEYS: Dict[str, List[str]] = {
        'custom': ['custom_value', 'custom_error'],
    }

    @classmethod
    def _state(cls):
        """The live session state mapping (patched in tests)."""
        return st.session_state

    @classmethod
    def init_defaults(cls) -> None:
        """Fill in missing keys; existing values are left alone."""
        state = cls._state()
        missing = [key for key in cls.DEFAULTS if key not in state]
        for key in missing:
            state[key] = cls.DEFAULTS[key]()
        if missing:
            logger.debug(f"Session state defaults set for: {', '.join(missing)}")

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        return cls._state().get(key, default)

    @classmethod
    def set(cls, key: str, value: Any) -> None:
        cls._state()[key] = value

    @classmethod
    def has(cls, key: str) -> bool:
        return key in cls._state()

    @classmethod
    def clear(cls, key: str) -> None:
        state = cls._state()
        if key in state:
            del state[key]

    @classmethod
    def clear_mode(cls, mode: str) -> None:
        for key in cls.MODE_KEYS.get(mode, ()):
            cls.clear(key)

    @classmethod
    def get_or_set(cls, key: str, default: Any) -> Any:
        state = cls._state()
        if key not in state:
            state[key] = default
        return state[key]

    @classmethod
    def get_session_id(cls) -> str:
        """This tab's session ID, created on first use."""
        session_id = cls.get('session_id')
        if not session_id:
            session_id = _new_session_id()
            cls.set('session_id', session_id)
            logger.info(f"New browser session {session_id[:8]}...")
        return session_id

    # Dice store
    @classmethod
    def get_dice_store(cls, factory: Optional[Callable[[], Any]] = None):
        """Get this session's started DiceConfigStore, creating it once.

        Args:
            factory: Builds an unstarted store (default: create_dice_store)
        """
        store = cls.get(STORE_KEY)
        if store is None:
            if factory is None:
                # Imported here: frontend.sync depends on frontend.utils
                from frontend.sync import create_dice_store
                factory = create_dice_store
            close_abandoned_stores()
            store = factory().start()
            cls.set(STORE_KEY, store)
            streamlit_id = _streamlit_session_id()
            if streamlit_id is not None:
                with _open_stores_lock:
                    _open_stores[streamlit_id] = store
            logger.info(f"Created dice store for session {cls.get_session_id()[:8]}...")
        return store

    @classmethod
    def reset_dice_store(cls) -> None:
        """Close and forget this session's store."""
        store = cls.get(STORE_KEY)
        if store is not None:
            with _open_stores_lock:
                for sid in [sid for sid, open_store in _open_stores.items() if open_store is store]:
                    del _open_stores[sid]
            store.close()
            cls.clear(STORE_KEY)
        cls.clear(CONTROLLER_KEY)
        cls.set('config_loaded', False)

    # Selector
    @classmethod
    def get_selected_tab(cls) -> str:
        return cls.get('selected_tab', TAB_PREDEFINED)

    @classmethod
    def set_selected_tab(cls, tab: str) -> None:
        cls.set('selected_tab', tab)

    @classmethod
    def set_custom_error(cls, message: Optional[str]) -> None:
        cls.set('custom_error', message)

    @classmethod
    def get_custom_error(cls) -> Optional[str]:
        return cls.get('custom_error')
