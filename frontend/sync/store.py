"""
Dice configuration store with cross-session synchronization.

One DiceConfigStore exists per browser session. It owns the current
configuration plus its session metadata, persists both to the best
available medium and keeps them consistent with other sessions:

- Local writes (set_config, update_session_config, clear) persist the
  whole record under a single key.
- Other sessions' writes arrive through the change notifier and are
  adopted only when their timestamp is strictly newer.
- After MAX_SYNC_RETRIES consecutive undecodable notifications the store
  switches to polling the medium; any successful reconciliation switches
  it back.

All state mutation happens under one reentrant lock, so calls from the
UI thread, the watchdog thread and the poller thread never interleave.
Listeners run after the lock is released.

Example:
    >>> store = create_dice_store()
    >>> with store:
    ...     store.set_config(build_dice_config(20))
    ...     store.config.display_format
    'D20'
"""
import logging
import threading
import time
import uuid
from dataclasses import replace
from typing import Callable, List, Optional

from frontend.config.settings import config as settings
from frontend.sync.models import (
    DiceConfig,
    PersistedRecord,
    SessionConfig,
    StorageType,
    SyncStateSnapshot,
)
from frontend.sync.notifications import ChangeNotifier, Subscription, get_shared_notifier
from frontend.sync.poller import SyncPoller
from frontend.sync.storage import (
    FileStorage,
    MemoryStorage,
    StorageBackend,
    select_storage_type,
)
from frontend.utils.exceptions import StorageError, SyncError

logger = logging.getLogger(__name__)

Listener = Callable[[SyncStateSnapshot], None]

# Fields of SessionConfig that callers may merge through update_session_config
_UPDATABLE_FIELDS = frozenset({"dice_sides", "selection_method", "storage_type", "sync_key"})


def _epoch_ms() -> int:
    return int(time.time() * 1000)


def generate_sync_key(timestamp: int) -> str:
    """Unique identifier for one write."""
    return f"dice-config-{timestamp}-{uuid.uuid4().hex[:12]}"


class DiceConfigStore:
    """Single source of truth for one session's dice configuration."""

    def __init__(
        self,
        primary: Optional[StorageBackend] = None,
        fallback: Optional[StorageBackend] = None,
        notifier: Optional[ChangeNotifier] = None,
        key: str = settings.STORAGE_KEY,
        clock: Callable[[], int] = _epoch_ms,
        expiry_ms: int = settings.SESSION_EXPIRY_MS,
        poll_interval: float = settings.SYNC_POLL_INTERVAL_SECONDS,
        max_sync_retries: int = settings.MAX_SYNC_RETRIES,
    ):
        """Initialize store.

        Args:
            primary: Shared medium ('localStorage'), usually a FileStorage
            fallback: Private medium ('sessionStorage'), usually a MemoryStorage
            notifier: Source of change events for the primary medium
            key: Storage key holding the persisted record
            clock: Returns the current time in epoch milliseconds
            expiry_ms: Age after which a restored record is discarded
            poll_interval: Seconds between polls while in polling mode
            max_sync_retries: Consecutive failures before polling starts
        """
        self.key = key
        self._primary = primary
        self._fallback = fallback
        self._notifier = notifier
        self._clock = clock
        self._expiry_ms = expiry_ms
        self._max_sync_retries = max_sync_retries

        self._lock = threading.RLock()
        self._config: Optional[DiceConfig] = None
        self._session_config: Optional[SessionConfig] = None
        self._storage_type = select_storage_type(primary, fallback)
        self._sync_retry_count = 0
        self._polling_active = False
        self._last_write_ts = 0

        self._listeners: List[Listener] = []
        self._subscription: Optional[Subscription] = None
        self._poller = SyncPoller(self.poll_once, interval=poll_interval)
        self._started = False
        self._closed = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> "DiceConfigStore":
        """Load the persisted record and subscribe to change notifications."""
        with self._lock:
            if self._started:
                return self
            self._started = True
            self._closed = False

        self.hydrate()

        if self._notifier is not None and self._storage_type == StorageType.LOCAL_STORAGE:
            self._subscription = self._notifier.subscribe(self.key, self.handle_storage_event)
        else:
            logger.info(f"No change notifications for {self._storage_type.value}; relying on polling")
        return self

    def close(self) -> None:
        """Unsubscribe and stop polling. State stays readable."""
        with self._lock:
            self._closed = True
            self._started = False
            subscription, self._subscription = self._subscription, None
        if subscription is not None:
            subscription.unsubscribe()
        self._poller.stop()

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def config(self) -> Optional[DiceConfig]:
        return self._config

    @property
    def session_config(self) -> Optional[SessionConfig]:
        return self._session_config

    @property
    def storage_type(self) -> StorageType:
        return self._storage_type

    @property
    def sync_retry_count(self) -> int:
        return self._sync_retry_count

    @property
    def polling_active(self) -> bool:
        return self._polling_active

    @property
    def poller(self) -> SyncPoller:
        return self._poller

    def snapshot(self) -> SyncStateSnapshot:
        with self._lock:
            return SyncStateSnapshot(
                config=self._config,
                session_config=self._session_config,
                storage_type=self._storage_type,
                sync_retry_count=self._sync_retry_count,
                polling_active=self._polling_active,
            )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a state-change listener.

        Returns:
            Callable that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set_config(self, dice_config: DiceConfig) -> SessionConfig:
        """Replace the configuration and stamp new session metadata.

        The input is expected to be validated already.

        Returns:
            The session metadata written alongside the configuration
        """
        with self._lock:
            timestamp = self._next_timestamp()
            session_config = SessionConfig(
                dice_sides=dice_config.dice_sides,
                selection_method=dice_config.selection_method,
                timestamp=timestamp,
                storage_type=self._storage_type,
                sync_key=generate_sync_key(timestamp),
            )
            self._config = dice_config
            self._session_config = session_config
            self._persist_locked()
        logger.info(f"Configuration set to {dice_config.display_format} ({dice_config.selection_method.value})")
        self._emit()
        return session_config

    def update_session_config(self, **updates) -> Optional[SessionConfig]:
        """Merge fields into the session metadata and refresh its timestamp.

        No-op when no metadata exists yet.

        Raises:
            ValueError: For fields that are not part of SessionConfig or are
                managed by the store (timestamp)
        """
        unknown = set(updates) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update session config fields: {', '.join(sorted(unknown))}")

        with self._lock:
            if self._session_config is None:
                return None
            self._session_config = replace(
                self._session_config,
                **updates,
                timestamp=self._next_timestamp(),
            )
            self._persist_locked()
            updated = self._session_config
        self._emit()
        return updated

    def record_sync_failure(self) -> int:
        """Count a failed synchronization; switch to polling at the threshold.

        Returns:
            The new consecutive failure count
        """
        with self._lock:
            self._sync_retry_count += 1
            count = self._sync_retry_count
            if count >= self._max_sync_retries and not self._polling_active:
                self._polling_active = True
                logger.warning(f"{count} consecutive sync failures, falling back to polling")
        self._sync_poller()
        self._emit()
        return count

    def reset_sync_success(self) -> None:
        """Clear the failure counter and leave polling mode."""
        with self._lock:
            self._sync_retry_count = 0
            self._polling_active = False
        self._sync_poller()
        self._emit()

    def clear(self) -> None:
        """Drop configuration, metadata, failure counter and polling flag."""
        with self._lock:
            self._clear_locked()
            self._persist_locked()
        logger.info("Configuration cleared")
        self._sync_poller()
        self._emit()

    def select_storage_type(self) -> StorageType:
        """Re-probe the media and cache the active storage type."""
        with self._lock:
            self._storage_type = select_storage_type(self._primary, self._fallback)
            return self._storage_type

    # ------------------------------------------------------------------
    # Load protocol
    # ------------------------------------------------------------------

    def hydrate(self) -> bool:
        """Restore the persisted record for this session.

        Steps:
        1. Read the record from whichever medium holds it.
        2. Drop it (clear) if expired.
        3. Re-probe the media; if the active medium differs from the one
           recorded, update both and persist.

        Returns:
            True if a configuration was restored
        """
        with self._lock:
            record = self._restore_locked()
            if record.session_config is None:
                self.select_storage_type()
                return False

            if self._is_expired(record.session_config):
                logger.info("Persisted configuration expired, starting empty")
                self._clear_locked()
                self._persist_locked()
                restored = False
            else:
                self._config = record.config
                self._session_config = record.session_config
                self._last_write_ts = max(self._last_write_ts, record.timestamp)
                restored = True

                actual = self.select_storage_type()
                if record.session_config.storage_type != actual:
                    logger.info(
                        f"Storage medium changed from {record.session_config.storage_type.value} "
                        f"to {actual.value}"
                    )
                    self._session_config = replace(
                        self._session_config,
                        storage_type=actual,
                        timestamp=self._next_timestamp(),
                    )
                    self._persist_locked()

        if restored:
            logger.info(f"Restored configuration {self._config.display_format}")
        self._emit()
        return restored

    # ------------------------------------------------------------------
    # Cross-session reconciliation
    # ------------------------------------------------------------------

    def handle_storage_event(self, key: str, old_value: Optional[str], new_value: Optional[str]) -> bool:
        """Process a change notification for the shared medium.

        Undecodable payloads count as sync failures. Decodable ones are
        adopted only when strictly newer.

        Returns:
            True if the payload was adopted
        """
        if key != self.key or new_value is None:
            return False

        try:
            record = PersistedRecord.from_json(new_value)
        except SyncError as e:
            logger.error(f"Storage sync error: {e}")
            self.record_sync_failure()
            return False

        return self._reconcile(record, source="notification")

    def poll_once(self) -> bool:
        """Read the active medium directly and reconcile (one polling tick).

        Errors are logged and the tick skipped; they do not count as
        failures since polling is already the degraded mode.

        Returns:
            True if a newer record was adopted
        """
        with self._lock:
            backend = self._backend_for(self._storage_type)
        if backend is None:
            return False

        try:
            raw = backend.get(self.key)
            if raw is None:
                return False
            record = PersistedRecord.from_json(raw)
        except (StorageError, SyncError) as e:
            logger.error(f"Polling sync error: {e}")
            return False

        return self._reconcile(record, source="poll")

    def _reconcile(self, record: PersistedRecord, source: str) -> bool:
        """Adopt record if strictly newer than the current state.

        The incoming metadata is kept as-is (timestamp and sync key), so
        delivering the same record twice is a no-op. Nothing is written
        back: the shared medium already holds the record.
        """
        with self._lock:
            if record.session_config is None:
                return False
            current = self._session_config.timestamp if self._session_config else 0
            if record.timestamp <= current:
                logger.debug(f"Ignoring {source} record at {record.timestamp} (current {current})")
                return False

            self._config = record.config
            self._session_config = record.session_config
            self._sync_retry_count = 0
            self._polling_active = False

        logger.info(f"Adopted {record.config.display_format} from {source}")
        self._sync_poller()
        self._emit()
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _next_timestamp(self) -> int:
        """Timestamp for a local write, strictly above every earlier one."""
        current = self._session_config.timestamp if self._session_config else 0
        timestamp = max(self._clock(), self._last_write_ts + 1, current + 1)
        self._last_write_ts = timestamp
        return timestamp

    def _is_expired(self, session_config: SessionConfig) -> bool:
        return self._clock() - session_config.timestamp > self._expiry_ms

    def _clear_locked(self) -> None:
        self._config = None
        self._session_config = None
        self._sync_retry_count = 0
        self._polling_active = False

    def _backend_for(self, storage_type: StorageType) -> Optional[StorageBackend]:
        if storage_type == StorageType.LOCAL_STORAGE:
            return self._primary
        if storage_type == StorageType.SESSION_STORAGE:
            return self._fallback
        return None

    def _restore_locked(self) -> PersistedRecord:
        """Read the first decodable record holding a configuration."""
        for backend in (self._primary, self._fallback):
            if backend is None:
                continue
            try:
                raw = backend.get(self.key)
                if raw is None:
                    continue
                record = PersistedRecord.from_json(raw)
            except (StorageError, SyncError) as e:
                logger.warning(f"Ignoring unreadable record in {backend.storage_type.value}: {e}")
                continue
            if record.session_config is not None:
                return record
        return PersistedRecord()

    def _persist_locked(self) -> None:
        backend = self._backend_for(self._storage_type)
        if backend is None:
            return
        record = PersistedRecord(config=self._config, session_config=self._session_config)
        try:
            backend.set(self.key, record.to_json())
        except StorageError as e:
            # Keep running from memory; the next successful write catches up
            logger.warning(f"Failed to persist configuration: {e}")

    def _sync_poller(self) -> None:
        """Start or stop the poller to match the polling flag.

        Runs outside the state lock (stopping joins the poller thread,
        which may itself be waiting on the lock) and re-checks the flag
        afterwards in case it flipped meanwhile.
        """
        while True:
            with self._lock:
                wanted = self._polling_active and not self._closed
            if wanted:
                self._poller.start()
            else:
                self._poller.stop()
            with self._lock:
                if (self._polling_active and not self._closed) == wanted:
                    return

    def _emit(self) -> None:
        snapshot = self.snapshot()
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Store listener failed: {e}", exc_info=True)


def create_dice_store(
    storage_dir: Optional[str] = None,
    notifier: Optional[ChangeNotifier] = None,
    **kwargs,
) -> DiceConfigStore:
    """Build a store over the shared file medium with a private fallback.

    Args:
        storage_dir: Shared directory (default from config)
        notifier: Change notifier; defaults to the process-wide watcher
            for storage_dir
        **kwargs: Passed through to DiceConfigStore

    Returns:
        An unstarted store; call start() or use it as a context manager
    """
    primary = FileStorage(storage_dir or settings.STORAGE_DIR)
    if notifier is None:
        notifier = get_shared_notifier(primary)
    return DiceConfigStore(
        primary=primary,
        fallback=MemoryStorage(),
        notifier=notifier,
        **kwargs,
    )
