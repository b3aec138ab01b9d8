"""Cross-session synchronization of the dice configuration."""
from frontend.sync.models import (
    DiceConfig,
    SessionConfig,
    PersistedRecord,
    SyncStateSnapshot,
    SelectionMethod,
    StorageType,
    build_dice_config,
)
from frontend.sync.storage import (
    StorageBackend,
    FileStorage,
    MemoryStorage,
    probe_storage,
    select_storage_type,
)
from frontend.sync.notifications import (
    ChangeNotifier,
    FileChangeNotifier,
    NullNotifier,
    Subscription,
    get_shared_notifier,
    stop_shared_notifiers,
)
from frontend.sync.poller import SyncPoller
from frontend.sync.store import DiceConfigStore, create_dice_store, generate_sync_key

__all__ = [
    # Models
    "DiceConfig",
    "SessionConfig",
    "PersistedRecord",
    "SyncStateSnapshot",
    "SelectionMethod",
    "StorageType",
    "build_dice_config",
    # Storage
    "StorageBackend",
    "FileStorage",
    "MemoryStorage",
    "probe_storage",
    "select_storage_type",
    # Notifications
    "ChangeNotifier",
    "FileChangeNotifier",
    "NullNotifier",
    "Subscription",
    "get_shared_notifier",
    "stop_shared_notifiers",
    # Store
    "SyncPoller",
    "DiceConfigStore",
    "create_dice_store",
    "generate_sync_key",
]
