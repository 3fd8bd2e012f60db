"""
Socket.IO push for live auction displays.

Events sent to clients:
- ``auction_state``: full snapshot, on connect and after every session change or bid
- ``bid_placed``: a new bid, sent to room ``player:<id>`` and room ``bids``

Events from clients:
- ``watch_player`` / ``unwatch_player`` with ``{'player_id': id}`` join or
  leave ``player:<id>``; without a player_id they join or leave ``bids``
"""

from typing import Any, Callable, Dict, List, Optional

from flask_socketio import emit, join_room, leave_room

from franchise_auction import socketio
from franchise_auction.events import ALL_BIDS_TOPIC, SESSION_TOPIC, event_hub
from franchise_auction.logger import get_logger
from franchise_auction.services.bidding_service import bidding_service
from franchise_auction.utils import validate_positive_int

logger = get_logger(__name__)

BIDS_ROOM = 'bids'

_unsubscribers: List[Callable[[], None]] = []


def player_room(player_id: int) -> str:
    return f'player:{player_id}'


def broadcast_state(_payload: Optional[Dict[str, Any]] = None) -> None:
    """Push the current snapshot to every connected client."""
    snapshot = bidding_service.current_auction_state()
    socketio.emit('auction_state', snapshot.to_dict())


def broadcast_bid(bid: Dict[str, Any]) -> None:
    """Push a new bid to its player's watchers and the all-bids room."""
    socketio.emit('bid_placed', bid, to=[player_room(bid['player_id']), BIDS_ROOM])
    broadcast_state()


def register_listeners() -> None:
    """Connect the event hub to Socket.IO.

    Safe to call more than once; earlier registrations are replaced.
    """
    while _unsubscribers:
        _unsubscribers.pop()()
    _unsubscribers.append(event_hub.subscribe(SESSION_TOPIC, broadcast_state))
    _unsubscribers.append(event_hub.subscribe(ALL_BIDS_TOPIC, broadcast_bid))
    logger.debug("Socket.IO listeners registered")


def _room_from(data: Any) -> Optional[str]:
    """Room named by a watch request, or None if the player_id is invalid."""
    player_id = data.get('player_id') if isinstance(data, dict) else None
    if player_id is None:
        return BIDS_ROOM
    value, error = validate_positive_int(player_id, 'player_id')
    if error:
        emit('error', {'success': False, 'error': error})
        return None
    return player_room(value)


@socketio.on('connect')
def handle_connect():
    emit('auction_state', bidding_service.current_auction_state().to_dict())


@socketio.on('watch_player')
def handle_watch_player(data=None):
    room = _room_from(data)
    if room:
        join_room(room)
        emit('watching', {'room': room})


@socketio.on('unwatch_player')
def handle_unwatch_player(data=None):
    room = _room_from(data)
    if room:
        leave_room(room)
        emit('unwatched', {'room': room})
