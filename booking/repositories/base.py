"""Database error translation shared by the repositories."""
from contextlib import contextmanager
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import ConflictError, StoreError
from ..core.messages import get_message

logger = logging.getLogger(__name__)


@contextmanager
def store_operation(db: Session, operation: str, conflict_message: str = None):
    """
    Run a unit of database work, translating SQLAlchemy failures.

    Args:
        db: Database session
        operation: Description of the operation, used in logs
        conflict_message: Message for ConflictError on a unique violation;
            when None, integrity errors are treated as store failures

    Raises:
        ConflictError: A unique constraint rejected the write
        StoreError: Any other database failure
    """
    try:
        yield
    except IntegrityError as e:
        db.rollback()
        if conflict_message is None:
            logger.error(f"Integrity error during {operation}: {e}")
            raise StoreError(get_message("store_error"), details=str(e)) from e
        logger.info(f"Unique constraint rejected {operation}")
        raise ConflictError(conflict_message) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error during {operation}: {e}")
        raise StoreError(get_message("store_error"), details=str(e)) from e
