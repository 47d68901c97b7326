"""
Database Utilities
Session handling for the SQL store with consistent commit/rollback and error wrapping
"""
from contextlib import contextmanager

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from lexibridge.errors import DatabaseError
from lexibridge.logging_config import get_logger
from lexibridge.models import db

logger = get_logger('db_utils')


@contextmanager
def session_scope(commit=True):
    """Context manager for the request session with automatic commit/rollback

    IntegrityError is re-raised untouched so callers can map constraint
    violations (duplicate vote, concurrent case insert) to domain errors.
    Any other SQLAlchemy failure becomes a DatabaseError.
    """
    session = db.session
    try:
        yield session
        if commit:
            session.commit()
    except IntegrityError:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Database operation failed: {e}")
        raise DatabaseError(f"Database operation failed: {e}")
    except Exception:
        session.rollback()
        raise


def check_connection():
    """Return True when the configured database answers a trivial query"""
    try:
        db.session.execute(text('SELECT 1'))
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database connection error: {e}")
        return False
