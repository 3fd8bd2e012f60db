"""
Auction session repository.

The session is a single addressable record; this repository hides its
primary key and offers get / update / subscribe on it.
"""

from typing import Any, Callable, Dict, Optional

from franchise_auction import db
from franchise_auction.constants import AUCTION_SESSION_ID
from franchise_auction.events import SESSION_TOPIC, EventHub, event_hub
from franchise_auction.models import AuctionSession
from franchise_auction.repositories.base import BaseRepository


class AuctionSessionRepository(BaseRepository[AuctionSession]):
    """Repository for the singleton auction session record."""

    def __init__(self, hub: Optional[EventHub] = None):
        super().__init__(AuctionSession)
        self.hub = hub or event_hub

    def get_session(self) -> Optional[AuctionSession]:
        """Get the session record, or None before init."""
        return self.get(AUCTION_SESSION_ID)

    def get_session_for_update(self) -> Optional[AuctionSession]:
        """Get the session record with row-level locking."""
        return self.get_for_update(AUCTION_SESSION_ID)

    def get_or_create(self, **defaults: Any) -> AuctionSession:
        """Get the session record, creating it with defaults if absent."""
        auction_session = self.get_session()
        if auction_session is None:
            auction_session = self.create(id=AUCTION_SESSION_ID, **defaults)
            db.session.flush()
        return auction_session

    def subscribe(self, callback: Callable[[Dict[str, Any]], None]) -> Callable[[], None]:
        """Receive every committed session change.

        Returns:
            Unsubscribe function.
        """
        return self.hub.subscribe(SESSION_TOPIC, callback)

    def publish(self, snapshot: Dict[str, Any]) -> None:
        """Notify subscribers of a committed session change."""
        self.hub.publish(SESSION_TOPIC, snapshot)
