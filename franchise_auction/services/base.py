"""
Service layer base: the error hierarchy and the transaction wrapper.

Every auction failure is a ServiceError subclass carrying its HTTP status,
so routes let them propagate to the JSON error handler.
"""

from contextlib import contextmanager
from typing import Generator, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from franchise_auction import db
from franchise_auction.logger import get_logger

logger = get_logger(__name__)


class ServiceError(Exception):
    """Base for service failures; ``to_dict`` is the response body."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict:
        return {'success': False, 'error': self.message}


class NotFoundError(ServiceError):
    """Exception raised when a requested resource is not found, or is not
    in the status the operation needs."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, 404)


class ValidationError(ServiceError):
    """Bad input: a malformed amount, name, price or setting."""

    def __init__(self, message: str):
        super().__init__(message, 400)


class InvalidStateError(ServiceError):
    """Operation not allowed in the current auction session state."""

    def __init__(self, message: str):
        super().__init__(message, 409)


class NoBidsError(ServiceError):
    """A sale was requested for a lot with no bids."""

    def __init__(self, message: str = "No bids recorded for this player; mark the player unsold instead"):
        super().__init__(message, 409)


class InsufficientFundsError(ServiceError):
    """A team's wallet cannot cover the amount."""

    def __init__(self, message: str = "Insufficient funds", required: Optional[int] = None,
                 available: Optional[int] = None):
        self.required = required
        self.available = available
        super().__init__(message, 400)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({'required': self.required, 'available': self.available})
        return data


class BidTooLowError(ServiceError):
    """Bid below the minimum acceptable amount."""

    def __init__(self, minimum: int):
        self.minimum = minimum
        super().__init__(f"Bid must be at least {minimum}", 400)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['minimum'] = self.minimum
        return data


class SameBidderError(ServiceError):
    """A team tried to raise its own standing bid while self-raising is disabled."""

    def __init__(self, message: str = "Team already holds the highest bid"):
        super().__init__(message, 400)


class ImportFileError(ValidationError):
    """A roster file was rejected as a whole."""

    def __init__(self, errors: List[str], warnings: Optional[List[str]] = None):
        self.errors = errors
        self.warnings = warnings or []
        super().__init__(errors[0] if errors else "Import failed")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({'errors': self.errors, 'warnings': self.warnings, 'created': 0})
        return data


class BaseService:
    """Base class for the auction services.

    Example:
        class AllocationEngine(BaseService):
            def resolve_player_sale(self, player_id: int):
                with AuctionLock(), BidLock():
                    with self.transaction():
                        ...  # committed on exit, rolled back on any error
                self.session_repo.publish(payload)  # only after commit
    """

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        """Commit on success, roll back on any exception.

        ServiceErrors pass through unchanged. A constraint violation (a
        duplicate name, a negative wallet) becomes a 409; other database or
        unexpected errors become a 500 ServiceError.
        """
        try:
            yield
            db.session.commit()
        except ServiceError:
            db.session.rollback()
            raise
        except IntegrityError as e:
            db.session.rollback()
            logger.warning(f"Constraint violation: {e.orig}")
            raise ServiceError("Change conflicts with existing data", 409) from e
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Database error: {e}", exc_info=True)
            raise ServiceError("Database operation failed", 500) from e
        except Exception as e:
            db.session.rollback()
            logger.error(f"Unexpected error: {e}", exc_info=True)
            raise ServiceError("An unexpected error occurred", 500) from e

    def flush(self) -> None:
        """Send pending changes so generated IDs are available before commit."""
        db.session.flush()
