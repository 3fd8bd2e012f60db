"""
Concurrency helpers for the auction's critical sections.

SQLite has no SELECT FOR UPDATE, so on SQLite the session, sale and wallet
paths are serialized with process-wide locks instead. Other databases rely
on row locks taken by ``BaseRepository.get_for_update`` and skip these.

Lock order is always AuctionLock before BidLock. Taking AuctionLock while
holding BidLock raises instead of risking a deadlock.
"""

import threading
from functools import wraps
from typing import Any, Callable, Type, TypeVar

from franchise_auction import db

F = TypeVar('F', bound=Callable[..., Any])

_held = threading.local()


def is_sqlite() -> bool:
    """Check if the bound database is SQLite."""
    return db.engine.dialect.name == 'sqlite'


class _SerialLock:
    """Re-entrant process-wide lock, taken only when running on SQLite."""

    _lock: threading.RLock
    name: str

    def __init__(self):
        self._acquired = False

    def _depth(self) -> int:
        return getattr(_held, self.name, 0)

    def _check_order(self) -> None:
        pass

    def __enter__(self) -> '_SerialLock':
        self._check_order()
        if is_sqlite():
            self._lock.acquire()
            self._acquired = True
        setattr(_held, self.name, self._depth() + 1)
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        setattr(_held, self.name, self._depth() - 1)
        if self._acquired:
            self._acquired = False
            self._lock.release()


class AuctionLock(_SerialLock):
    """Guards the auction session, sale resolution and wallet changes."""

    _lock = threading.RLock()
    name = 'auction'

    def _check_order(self) -> None:
        if getattr(_held, BidLock.name, 0) and not self._depth():
            raise RuntimeError("AuctionLock must be taken before BidLock")


class BidLock(_SerialLock):
    """Serializes bid validation and recording so two bids are never
    validated against the same highest bid."""

    _lock = threading.RLock()
    name = 'bid'


def with_lock(lock_class: Type[_SerialLock]) -> Callable[[F], F]:
    """Run the decorated function inside ``lock_class()``."""
    def decorator(f: F) -> F:
        @wraps(f)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with lock_class():
                return f(*args, **kwargs)
        return wrapper  # type: ignore
    return decorator
