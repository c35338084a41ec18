"""
Database connection management.
Handles per-request connections, initialization, and teardown.
"""

import os
import sqlite3
from contextlib import contextmanager
from flask import g, current_app


def get_db():
    """
    Get the request-scoped database connection with row factory.

    Dates are kept as ISO strings (no declared-type conversion) and parsed
    as local calendar dates by the models.

    Returns:
        sqlite3.Connection: Database connection object
    """
    if 'db' not in g:
        db_path = current_app.config.get('DATABASE_PATH', 'instance/space_booking.db')
        if db_path != ':memory:':
            directory = os.path.dirname(db_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
        g.db = sqlite3.connect(db_path)
        g.db.row_factory = sqlite3.Row
        # Enable foreign key constraints
        g.db.execute('PRAGMA foreign_keys = ON')
        if db_path != ':memory:':
            # Enable WAL mode for better concurrency
            g.db.execute('PRAGMA journal_mode = WAL')
    return g.db


@contextmanager
def write_transaction():
    """
    Hold the database write lock from the first read to the commit.

    BEGIN IMMEDIATE makes every other writer wait, so the rows read inside
    the block cannot change before the block writes. Model functions that
    commit on their own end the transaction early; the lock is released
    at that commit.

    Yields:
        sqlite3.Connection: The request connection
    """
    db = get_db()
    db.execute('BEGIN IMMEDIATE')
    try:
        yield db
    except Exception:
        if db.in_transaction:
            db.rollback()
        raise
    if db.in_transaction:
        db.commit()


def close_db(e=None):
    """
    Close database connection.

    Args:
        e: Exception if any (from Flask teardown context)
    """
    db = g.pop('db', None)
    if db is not None:
        db.close()


def init_db():
    """
    Initialize database: drop existing tables, create new schema, insert seed data.
    WARNING: This will delete all existing data!
    """
    from database.schema import drop_tables, create_tables, create_indexes
    from database.seed import seed_database

    db = get_db()

    # Drop existing tables (in reverse order of dependencies)
    drop_tables(db)

    # Create all tables
    create_tables(db)

    # Create indexes
    create_indexes(db)

    # Insert seed data
    seed_database(db)

    db.commit()
    current_app.logger.info('Database initialized')
