"""
Change notifications for persisted keys.

A store subscribes to its key and receives ``(key, old_value, new_value)``
whenever another writer changes the value on the shared medium:

    subscription = notifier.subscribe("dice-config-store", store.handle_storage_event)
    ...
    subscription.unsubscribe()

FileChangeNotifier watches a FileStorage directory with a watchdog
observer. NullNotifier is used for media with no notification facility;
stores then rely on polling alone.

Writes made through the same directory are reported too, including a
store's own writes. Stores ignore them through the timestamp rule.
"""
import logging
import os
import threading
from typing import Callable, Dict, List, Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from frontend.sync.storage import FileStorage
from frontend.utils.exceptions import StorageError

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[str, Optional[str], Optional[str]], None]


class Subscription:
    """Handle returned by subscribe(); call unsubscribe() to stop delivery."""

    def __init__(self, notifier: "ChangeNotifier", key: str, callback: ChangeCallback):
        self.notifier = notifier
        self.key = key
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self.notifier._remove(self)


class ChangeNotifier:
    """Subscription registry; subclasses decide when to call _dispatch()."""

    def __init__(self):
        self._subscriptions: Dict[str, List[Subscription]] = {}
        self._lock = threading.Lock()

    def subscribe(self, key: str, callback: ChangeCallback) -> Subscription:
        subscription = Subscription(self, key, callback)
        with self._lock:
            self._subscriptions.setdefault(key, []).append(subscription)
        self._on_subscribe(key)
        return subscription

    def subscriber_count(self, key: Optional[str] = None) -> int:
        with self._lock:
            if key is not None:
                return len(self._subscriptions.get(key, []))
            return sum(len(subs) for subs in self._subscriptions.values())

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            subs = self._subscriptions.get(subscription.key, [])
            if subscription in subs:
                subs.remove(subscription)
            if not subs:
                self._subscriptions.pop(subscription.key, None)

    def _on_subscribe(self, key: str) -> None:
        """Hook for subclasses (e.g. start watching)."""

    def _dispatch(self, key: str, old_value: Optional[str], new_value: Optional[str]) -> None:
        """Deliver a change to every active subscriber of key."""
        with self._lock:
            subscribers = list(self._subscriptions.get(key, []))

        for subscription in subscribers:
            if not subscription.active:
                continue
            try:
                subscription.callback(key, old_value, new_value)
            except Exception as e:
                # One failing subscriber must not stop delivery to the others
                logger.error(f"Change callback for '{key}' failed: {e}", exc_info=True)

    def stop(self) -> None:
        """Release any watcher resources."""


class NullNotifier(ChangeNotifier):
    """Notifier for media without change events; never dispatches."""


class _StorageDirectoryHandler(FileSystemEventHandler):
    """Forwards file events under the storage directory to the notifier."""

    def __init__(self, notifier: "FileChangeNotifier"):
        self.notifier = notifier

    def on_created(self, event):
        if not event.is_directory:
            self.notifier.on_path_changed(os.fsdecode(event.src_path))

    def on_modified(self, event):
        if not event.is_directory:
            self.notifier.on_path_changed(os.fsdecode(event.src_path))

    def on_moved(self, event):
        # Atomic writes land as a move of the temp file onto the key file
        if not event.is_directory:
            self.notifier.on_path_changed(os.fsdecode(event.dest_path))

    def on_deleted(self, event):
        if not event.is_directory:
            self.notifier.on_path_changed(os.fsdecode(event.src_path))


class FileChangeNotifier(ChangeNotifier):
    """Watches a FileStorage directory and reports value changes per key.

    The observer thread is started on the first subscription. The last
    value seen per key is remembered so callbacks receive old and new
    values, and duplicate filesystem events for one write are dropped.
    """

    def __init__(self, storage: FileStorage):
        super().__init__()
        self.storage = storage
        self._observer: Optional[Observer] = None
        self._observer_lock = threading.Lock()
        self._last_values: Dict[str, Optional[str]] = {}

    @property
    def is_watching(self) -> bool:
        return self._observer is not None

    def _on_subscribe(self, key: str) -> None:
        with self._lock:
            if key not in self._last_values:
                try:
                    self._last_values[key] = self.storage.get(key)
                except StorageError as e:
                    logger.warning(f"Could not read initial value for '{key}': {e}")
                    self._last_values[key] = None
        self.start()

    def start(self) -> None:
        """Start the watchdog observer (idempotent)."""
        with self._observer_lock:
            if self._observer is not None:
                return
            self.storage.directory.mkdir(parents=True, exist_ok=True)
            observer = Observer()
            observer.daemon = True
            observer.schedule(_StorageDirectoryHandler(self), str(self.storage.directory), recursive=False)
            observer.start()
            self._observer = observer
            logger.info(f"Watching {self.storage.directory} for configuration changes")

    def stop(self) -> None:
        with self._observer_lock:
            observer, self._observer = self._observer, None
        if observer is not None:
            observer.stop()
            if observer is not threading.current_thread():
                observer.join(timeout=5)
            logger.info("Stopped watching for configuration changes")

    def on_path_changed(self, path: str) -> None:
        """Handle a filesystem event for a path in the storage directory."""
        key = self.storage.key_for(path)
        if key is None or self.subscriber_count(key) == 0:
            return

        try:
            new_value = self.storage.get(key)
        except StorageError as e:
            logger.warning(f"Could not read changed value for '{key}': {e}")
            return

        with self._lock:
            old_value = self._last_values.get(key)
            if new_value == old_value:
                return
            self._last_values[key] = new_value

        logger.debug(f"Storage change detected for '{key}'")
        self._dispatch(key, old_value, new_value)


# One watcher per storage directory, shared by every store in the process
_shared_notifiers: Dict[str, FileChangeNotifier] = {}
_shared_notifiers_lock = threading.Lock()


def get_shared_notifier(storage: FileStorage) -> FileChangeNotifier:
    """Get the process-wide notifier for a storage directory (thread-safe)."""
    directory = str(storage.directory.resolve())
    with _shared_notifiers_lock:
        notifier = _shared_notifiers.get(directory)
        if notifier is None:
            notifier = FileChangeNotifier(storage)
            _shared_notifiers[directory] = notifier
        return notifier


def stop_shared_notifiers() -> None:
    """Stop every shared watcher (process shutdown and tests)."""
    with _shared_notifiers_lock:
        notifiers = list(_shared_notifiers.values())
        _shared_notifiers.clear()
    for notifier in notifiers:
        notifier.stop()
