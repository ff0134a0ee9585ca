"""
SQLite connection for the studio database.

One connection per Flask application context, stored on `g` and closed by
the teardown handler registered in app.py.
"""

import sqlite3
import os
from flask import g, current_app


def get_db():
    """
    Return the connection bound to the current app context, opening it on
    first use.

    Rows come back as sqlite3.Row; foreign keys are enforced so an agenda
    row can only point at an existing user.
    """
    if 'db' not in g:
        db_path = current_app.config.get('DATABASE_PATH', 'instance/fotoestudio.db')
        directory = os.path.dirname(db_path)
        if directory and db_path != ':memory:':
            os.makedirs(directory, exist_ok=True)
        g.db = sqlite3.connect(
            db_path,
            detect_types=sqlite3.PARSE_DECLTYPES
        )
        g.db.row_factory = sqlite3.Row
        g.db.execute('PRAGMA foreign_keys = ON')
        # Editor saves and API reads overlap
        g.db.execute('PRAGMA journal_mode = WAL')
    return g.db


def close_db(e=None):
    db = g.pop('db', None)
    if db is not None:
        db.close()


def init_db():
    """
    Rebuild the studio schema and load the role, lifecycle and payment
    catalogs plus the admin user. Existing data is lost.
    """
    from database.schema import drop_tables, create_tables, create_indexes
    from database.seed import seed_database

    db = get_db()

    drop_tables(db)
    create_tables(db)
    create_indexes(db)
    seed_database(db)

    db.commit()
    current_app.logger.info('Database initialized at %s', current_app.config.get('DATABASE_PATH'))
