"""
In-process event hub for live auction updates.

The bid ledger and the auction session publish here after their changes
are committed; the Socket.IO layer (and tests) subscribe with plain
callbacks. The allocation engine never depends on subscribers.
"""

import threading
from collections import defaultdict
from typing import Any, Callable, Dict, Hashable, List

from franchise_auction.logger import get_logger

logger = get_logger(__name__)

Callback = Callable[[Dict[str, Any]], None]

# Topics
SESSION_TOPIC = 'session'
ALL_BIDS_TOPIC = 'bids'


def bid_topic(player_id: int) -> tuple:
    """Topic for bids on a single player."""
    return ('bids', player_id)


class EventHub:
    """Topic-based observer registry."""

    def __init__(self):
        self._subscribers: Dict[Hashable, List[Callback]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, topic: Hashable, callback: Callback) -> Callable[[], None]:
        """Register a callback for a topic.

        Returns:
            A function that removes the registration when called.
        """
        with self._lock:
            self._subscribers[topic].append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers.get(topic, []):
                    self._subscribers[topic].remove(callback)

        return unsubscribe

    def publish(self, topic: Hashable, payload: Dict[str, Any]) -> None:
        """Deliver a payload to every subscriber of a topic.

        A failing subscriber is logged and does not stop delivery to the
        others; the state change being announced is already committed.
        """
        with self._lock:
            callbacks = list(self._subscribers.get(topic, []))

        for callback in callbacks:
            try:
                callback(payload)
            except Exception as e:
                logger.error(f"Subscriber for {topic!r} failed: {e}", exc_info=True)


# Process-wide hub shared by repositories and the socket layer
event_hub = EventHub()
