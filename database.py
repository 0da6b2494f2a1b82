"""
Database configuration and initialization for the school results system
"""

import logging
import sqlite3
from functools import wraps

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

# Initialize SQLAlchemy instance
db = SQLAlchemy()


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign key constraints for SQLite"""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def init_db(app):
    """Initialize database with application context"""
    with app.app_context():
        # Import all models to ensure they are registered
        from models import (
            Term, Subject, Student, TermMark,
            StudentTermAttendance, SavedReport
        )

        # Create all tables
        db.create_all()
        logger.info("Database initialized")


class DatabaseError(Exception):
    """Custom exception for database operations"""
    pass


def handle_db_error(func):
    """Decorator to handle database errors gracefully"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError as e:
            db.session.rollback()
            raise DatabaseError(f"Database operation failed: {str(e)}")
    return wrapper
