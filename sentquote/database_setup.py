import logging
import sqlite3

import click
from flask import current_app
from sqlalchemy import event, inspect as sql_inspect, text

from sentquote import db

logger = logging.getLogger(__name__)


def _set_sqlite_pragmas(dbapi_connection, connection_record):
    """WAL for many readers / one writer, and enforce foreign keys."""
    if not isinstance(dbapi_connection, sqlite3.Connection):
        return
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA journal_mode=WAL')
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


def configure_engine():
    """Install the connection hook on the current app's engine."""
    engine = db.engine
    if not event.contains(engine, 'connect', _set_sqlite_pragmas):
        event.listen(engine, 'connect', _set_sqlite_pragmas)


def check_database_connection():
    """Check if database connection is working"""
    try:
        db.session.execute(text('SELECT 1'))
        return True
    except Exception as e:
        logger.error("Database connection failed: %s", e)
        db.session.rollback()
        return False


def get_existing_tables():
    """Get list of existing tables in the database"""
    return sql_inspect(db.engine).get_table_names()


def initialize_database():
    """Create any missing tables. Safe to call on every startup."""
    configure_engine()

    expected = set(db.metadata.tables)
    missing = expected - set(get_existing_tables())
    if missing:
        logger.info("Creating %d missing tables: %s", len(missing), ', '.join(sorted(missing)))
        db.create_all()

    if not check_database_connection():
        return False

    logger.info("Database ready (%s)", current_app.config['SQLALCHEMY_DATABASE_URI'].split('://')[0])
    return True


# Flask CLI commands registration
def register_db_commands(app):
    """Register database commands with Flask CLI"""

    @app.cli.command('init_db')
    def init_db_command():
        """Creates missing tables."""
        initialize_database()
        click.echo('Database initialised.')

    @app.cli.command('reset_db')
    @click.confirmation_option(prompt='This will delete all data. Continue?')
    def reset_db_command():
        """Drops all tables and re-initializes the database."""
        db.drop_all()
        initialize_database()
        click.echo('Database has been reset.')
