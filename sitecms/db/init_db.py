"""
Database initialization utilities.
"""
import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from sitecms.db.models import Base
from sitecms.db.database import engine as default_engine

logger = logging.getLogger(__name__)


def create_tables(engine: Engine = None):
    """Create all tables defined in models."""
    engine = engine or default_engine
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("All tables created successfully")


def drop_all_tables(engine: Engine = None):
    """Drop all tables, including every stored entity."""
    engine = engine or default_engine
    logger.info("Dropping all database tables...")
    Base.metadata.drop_all(bind=engine)
    logger.info("All tables dropped successfully")


def reset_database(engine: Engine = None):
    """Drop and recreate all tables."""
    logger.info("Resetting database...")
    drop_all_tables(engine)
    create_tables(engine)
    logger.info("Database reset complete")


def init_database(engine: Engine = None):
    """
    Create missing tables and report the ones present.

    Returns:
        Names of the content tables found after initialization
    """
    engine = engine or default_engine
    logger.info(f"Initializing database at {engine.url.render_as_string(hide_password=True)}")
    create_tables(engine)
    tables = sorted(inspect(engine).get_table_names())
    logger.info(f"Database ready with tables: {', '.join(tables)}")
    return tables


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_database()
