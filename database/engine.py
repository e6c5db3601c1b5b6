"""
Database Persistence Layer - Core Engine.

============================================================
RECORD STORE ENGINE
============================================================

Provides the SQLAlchemy engine, session factory and the
transaction scope every event and every off-chain completion
runs inside.

Requirements:
- SQLAlchemy 2.0 ORM (SQLite for local replay, PostgreSQL in production)
- Explicit transaction management, one transaction per event
- Hard failures on persistence errors

Configuration (environment, .env supported):
- DATABASE_URL: SQLAlchemy URL (default sqlite:///agent_registry.db)
- DATABASE_ECHO: "true" to log SQL statements

============================================================
"""

import os
import logging
from typing import Generator, Optional
from contextlib import contextmanager

from sqlalchemy import create_engine, event, func, inspect, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.exc import SQLAlchemyError, OperationalError

from dotenv import load_dotenv

from storage.models import Base

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///agent_registry.db"

# =============================================================
# DATABASE ENGINE
# =============================================================

_engine: Optional[Engine] = None
_SessionFactory: Optional[sessionmaker] = None


def get_database_url() -> str:
    """Get database URL from environment."""
    url = os.getenv("DATABASE_URL")
    if not url:
        url = DEFAULT_DATABASE_URL
        logger.warning(f"DATABASE_URL not set, using default: {url}")
    return url


def create_database_engine(
    database_url: Optional[str] = None,
    echo: Optional[bool] = None,
) -> Engine:
    """
    Create (or return the already created) SQLAlchemy engine.
    
    Args:
        database_url: Overrides DATABASE_URL
        echo: Log SQL statements, overrides DATABASE_ECHO
        
    Returns:
        SQLAlchemy Engine
    """
    global _engine
    
    if _engine is not None:
        return _engine
    
    url = database_url or get_database_url()
    if echo is None:
        echo = os.getenv("DATABASE_ECHO", "false").lower() == "true"
    
    logger.info(f"Creating database engine for: {url.split('@')[-1]}")
    
    _engine = create_engine(url, echo=echo, future=True)
    
    if _engine.dialect.name == "sqlite":
        @event.listens_for(_engine, "connect")
        def on_connect(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
    
    return _engine


def get_engine() -> Engine:
    """Get the database engine, creating if necessary."""
    global _engine
    if _engine is None:
        _engine = create_database_engine()
    return _engine


def get_session_factory() -> sessionmaker:
    """Get session factory, creating if necessary."""
    global _SessionFactory
    
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(
            bind=get_engine(),
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
    
    return _SessionFactory


def reset_engine() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _SessionFactory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None


# =============================================================
# SESSION MANAGEMENT
# =============================================================


@contextmanager
def transaction_scope(
    session_factory: Optional[sessionmaker] = None,
) -> Generator[Session, None, None]:
    """
    Context manager for explicit transaction boundaries.
    
    Commits only if no exception occurs.
    Rolls back on ANY exception and re-raises it.
    
    Usage:
        with transaction_scope() as session:
            AgentRepository(session).save(agent)
            # Commits automatically at end
    """
    factory = session_factory or get_session_factory()
    session = factory()
    try:
        yield session
        session.commit()
        logger.debug("Database transaction committed successfully")
    except SQLAlchemyError as e:
        logger.error(f"Database transaction failed, rolling back: {e}")
        session.rollback()
        raise
    except Exception as e:
        logger.error(f"Transaction failed with unexpected error, rolling back: {e}")
        session.rollback()
        raise
    finally:
        session.close()


# =============================================================
# DATABASE INITIALIZATION
# =============================================================


def create_all_tables(engine: Optional[Engine] = None) -> None:
    """
    Create all tables defined in ORM models.
    
    Raises:
        DatabaseInitializationError if table creation fails
    """
    engine = engine or get_engine()
    
    try:
        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except OperationalError as e:
        logger.error(f"Cannot reach database: {e}")
        raise DatabaseConnectionError(f"Cannot connect to database: {e}") from e
    except SQLAlchemyError as e:
        logger.error(f"Failed to create database tables: {e}")
        raise DatabaseInitializationError(f"Table creation failed: {e}") from e


def get_table_row_counts(engine: Optional[Engine] = None) -> dict:
    """Row counts for every indexer table, -1 where the table is missing."""
    engine = engine or get_engine()
    existing = set(inspect(engine).get_table_names())
    
    counts = {}
    with engine.connect() as conn:
        for table in Base.metadata.sorted_tables:
            if table.name not in existing:
                counts[table.name] = -1
                continue
            counts[table.name] = conn.execute(
                select(func.count()).select_from(table)
            ).scalar()
    
    return counts


# =============================================================
# CUSTOM EXCEPTIONS
# =============================================================


class DatabasePersistenceError(Exception):
    """Base exception for database persistence errors."""


class DatabaseConnectionError(DatabasePersistenceError):
    """Database connection failed."""


class DatabaseInitializationError(DatabasePersistenceError):
    """Database initialization failed."""
