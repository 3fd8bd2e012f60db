"""
Generic data access shared by the player, team, bid and session repositories.

Repositories never commit; the calling service owns the transaction.
"""

from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func, select

from franchise_auction import db
from franchise_auction.db_utils import is_sqlite

T = TypeVar('T')


class BaseRepository(Generic[T]):
    """CRUD helpers over one model class, written against the SQLAlchemy 2.0
    ``select()`` API."""

    def __init__(self, model: Type[T]):
        self.model = model

    def get(self, id: int) -> Optional[T]:
        return db.session.get(self.model, id)

    def get_for_update(self, id: int) -> Optional[T]:
        """Load a row for a read-modify-write.

        Uses SELECT ... FOR UPDATE where the database supports it. On SQLite
        the caller must already hold AuctionLock or BidLock.
        """
        statement = select(self.model).where(self.model.id == id)
        if not is_sqlite():
            statement = statement.with_for_update()
        return db.session.execute(statement).scalar_one_or_none()

    def get_all(self) -> List[T]:
        return db.session.execute(select(self.model).order_by(self.model.id)).scalars().all()

    def filter_by(self, **kwargs) -> List[T]:
        """Equality filter, ordered by ID."""
        return db.session.execute(
            select(self.model).filter_by(**kwargs).order_by(self.model.id)
        ).scalars().all()

    def query(self, *criteria: Any, order_by: Any = None) -> List[T]:
        """Filter with column expressions, e.g. ``Player.times_unsold > 0``.

        Ordered by ``order_by`` when given, otherwise by ID.
        """
        statement = select(self.model).where(*criteria)
        statement = statement.order_by(self.model.id if order_by is None else order_by)
        return db.session.execute(statement).scalars().all()

    def create(self, **kwargs) -> T:
        """Add a new row to the session (not yet committed)."""
        instance = self.model(**kwargs)
        db.session.add(instance)
        return instance

    def update(self, instance: T, **fields) -> T:
        """Set attributes on ``instance``; unknown names raise AttributeError."""
        for key, value in fields.items():
            if not hasattr(self.model, key):
                raise AttributeError(f"{self.model.__name__} has no attribute '{key}'")
            setattr(instance, key, value)
        return instance

    def delete(self, instance: T) -> None:
        db.session.delete(instance)

    def count(self, **kwargs) -> int:
        return db.session.execute(
            select(func.count()).select_from(self.model).filter_by(**kwargs)
        ).scalar_one()
