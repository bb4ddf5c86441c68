# database.py
"""
Database management for the rank engine.
Single database holding participants, sales and rank history.
"""
import logging
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

import config
from models import Base

logger = logging.getLogger(__name__)

# Database engines
_engine = None
_SessionFactory = None


def get_engine():
    """Get or create database engine."""
    global _engine
    if _engine is None:
        connect_args = {}
        if config.DATABASE_URL.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        _engine = create_engine(config.DATABASE_URL, connect_args=connect_args)
        logger.info(f"Database engine created: {config.DATABASE_URL}")
    return _engine


def get_session_factory():
    """Get or create session factory."""
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=get_engine())
        logger.info("Session factory created")
    return _SessionFactory


def get_session() -> Session:
    """Get a new database session."""
    return get_session_factory()()


@contextmanager
def get_db_session_ctx():
    """
    Context manager for database sessions.

    Usage:
        with get_db_session_ctx() as session:
            service = SaleService(session)
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Database error: {e}")
        raise
    finally:
        session.close()


def setup_database(engine=None):
    """Initialize database - create all tables."""
    logger.info("Setting up database...")
    Base.metadata.create_all(engine or get_engine())
    logger.info("Database setup completed")


def drop_all_tables(engine=None):
    """Drop all tables - USE WITH CAUTION!"""
    logger.warning("Dropping all tables...")
    Base.metadata.drop_all(engine or get_engine())
    logger.info("All tables dropped")


if __name__ == "__main__":
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    setup_database()
