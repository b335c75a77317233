# core/change_feed.py

"""
In-process change notifications for the registry collections.

Service writes publish here; dashboard aggregators subscribe per collection.
These only cover writes made by this process. Until a realtime bridge
(e.g. Supabase Realtime) calls attach_bridge(), the feed reports itself
disconnected so aggregators also poll and pick up writes made elsewhere.
An attached bridge reports outages through channel_error() / channel_restored().
"""

import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from core.logging_config import logger


@dataclass(frozen=True)
class ChangeEvent:
    collection: str
    action: str                 # insert / update / delete
    record_id: Optional[str] = None


ChangeCallback = Callable[[ChangeEvent], None]
ErrorCallback = Callable[[Exception], None]
RestoreCallback = Callable[[], None]


@dataclass
class _Subscription:
    collection: str
    on_change: ChangeCallback
    on_error: Optional[ErrorCallback] = None
    on_restore: Optional[RestoreCallback] = None


class LocalChangeFeed:

    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: Dict[int, _Subscription] = {}
        self._next_id = 0
        self.bridged = False
        self.connected = False

    def attach_bridge(self):
        """Called by a realtime bridge once it is listening to the backend."""
        self.bridged = True
        self.channel_restored()

    def subscribe(
        self,
        collection: str,
        on_change: ChangeCallback,
        on_error: Optional[ErrorCallback] = None,
        on_restore: Optional[RestoreCallback] = None,
    ) -> Callable[[], None]:
        """Register listeners; returns an unsubscribe function (safe to call twice)."""
        with self._lock:
            sub_id = self._next_id
            self._next_id += 1
            self._subscriptions[sub_id] = _Subscription(collection, on_change, on_error, on_restore)

        def unsubscribe():
            with self._lock:
                self._subscriptions.pop(sub_id, None)

        return unsubscribe

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def _snapshot(self) -> List[_Subscription]:
        with self._lock:
            return list(self._subscriptions.values())

    def publish(self, collection: str, action: str, record_id: Optional[str] = None):
        event = ChangeEvent(collection=collection, action=action, record_id=record_id)
        for sub in self._snapshot():
            if sub.collection != collection:
                continue
            try:
                sub.on_change(event)
            except Exception as e:
                logger.error(f"Change listener failed for {collection}: {e}", exc_info=True)

    def channel_error(self, error: Exception):
        self.connected = False
        logger.warning(f"Realtime channel error: {error}")
        for sub in self._snapshot():
            if sub.on_error is None:
                continue
            try:
                sub.on_error(error)
            except Exception as e:
                logger.error(f"Channel error listener failed: {e}", exc_info=True)

    def channel_restored(self):
        if not self.bridged:
            logger.warning("Ignoring channel restore: no realtime bridge attached")
            return
        self.connected = True
        logger.info("Realtime channel restored")
        for sub in self._snapshot():
            if sub.on_restore is None:
                continue
            try:
                sub.on_restore()
            except Exception as e:
                logger.error(f"Channel restore listener failed: {e}", exc_info=True)


# ============================================================
# Process-wide feed
# ============================================================
_feed = LocalChangeFeed()


def get_change_feed() -> LocalChangeFeed:
    return _feed


def notify_change(collection: str, action: str, record_id: Optional[str] = None):
    _feed.publish(collection, action, record_id)
