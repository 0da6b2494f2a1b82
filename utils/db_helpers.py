"""
Database helper utilities for the school results system
"""

import logging

from database import db, handle_db_error
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


@handle_db_error
def safe_add_and_commit(obj):
    """Safely add object to database with error handling"""
    try:
        db.session.add(obj)
        db.session.commit()
        return True, "Record added successfully"
    except IntegrityError as e:
        db.session.rollback()
        logger.warning("Integrity error adding %r: %s", obj, e)
        if 'UNIQUE constraint failed' in str(e):
            return False, "Record with this identifier already exists"
        return False, "Database constraint violation"
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Database error adding %r", obj)
        return False, f"Database error: {str(e)}"


@handle_db_error
def safe_delete_and_commit(obj):
    """Safely delete object from database with error handling"""
    try:
        db.session.delete(obj)
        db.session.commit()
        return True, "Record deleted successfully"
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Database error deleting %r", obj)
        return False, f"Database error: {str(e)}"

