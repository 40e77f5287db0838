"""
Database persistence layer for client storage blobs and events.

This module provides an optional SQL-backed persistence layer that can be
enabled by setting the DATABASE_URL environment variable. If DATABASE_URL is
not set, db_is_enabled() returns False and callers fall back to in-memory
storage (client storage) or the JSONL file (events).

When DATABASE_URL is set:
- Client storage blobs are stored in the storage_blobs table, one row per
  (session_id, key)
- Events are stored in the events table
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import Column, DateTime, Index, Integer, String, Text, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.sql import func

logger = logging.getLogger(__name__)

Base = declarative_base()

# Database engine and session factory (only set when a database is configured)
engine = None
SessionLocal = None


class StorageBlobRow(Base):
    """Client storage table - one opaque value per session and key."""
    __tablename__ = "storage_blobs"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(255), nullable=False)
    key = Column(String(255), nullable=False)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_storage_blob_key", "session_id", "key", unique=True),
    )


class EventRow(Base):
    """Events table - stores analytics events for user actions."""
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    ts = Column(DateTime, nullable=False, index=True)  # UTC timestamp
    session_id = Column(String(255), nullable=True, index=True)
    event_type = Column(String(100), nullable=False, index=True)
    payload = Column(Text, nullable=True)  # JSON string


def configure_database(database_url: Optional[str]) -> None:
    """
    Create (or drop) the engine and session factory.

    Called on import with DATABASE_URL; tests call it with a temporary
    SQLite URL. Passing None disables the database.
    """
    global engine, SessionLocal

    if not database_url:
        engine = None
        SessionLocal = None
        return

    try:
        engine = create_engine(database_url, pool_pre_ping=True, echo=False)
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        logger.info("Database connection initialized (DATABASE_URL is set)")
    except SQLAlchemyError as e:
        logger.error("Failed to initialize database connection: %s", e)
        engine = None
        SessionLocal = None


configure_database(os.getenv("DATABASE_URL"))


def db_is_enabled() -> bool:
    """
    Check if database persistence is enabled.

    Returns:
        True if a database URL was configured and the engine was created
    """
    return engine is not None and SessionLocal is not None


def init_db() -> None:
    """
    Initialize database tables (create if they don't exist).

    Safe to call multiple times.

    Raises:
        SQLAlchemyError: If the connection or table creation fails
    """
    if not db_is_enabled():
        logger.debug("Database not enabled, skipping init_db()")
        return

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables initialized (or already exist)")


def get_db_session():
    """
    Get a database session.

    Raises:
        RuntimeError: If database is not enabled
    """
    if not db_is_enabled():
        raise RuntimeError("Database is not enabled. Set DATABASE_URL environment variable.")

    return SessionLocal()


# ============================================================================
# Client Storage Functions
# ============================================================================

def db_get_item(session_id: str, key: str) -> Optional[str]:
    """
    Read one storage blob.

    Returns:
        The stored string, or None if the key was never written
    """
    db = get_db_session()
    try:
        row = (
            db.query(StorageBlobRow)
            .filter(StorageBlobRow.session_id == session_id, StorageBlobRow.key == key)
            .first()
        )
        return row.value if row else None
    finally:
        db.close()


def db_set_item(session_id: str, key: str, value: str) -> None:
    """
    Write one storage blob, replacing any previous value for the key.
    """
    db = get_db_session()
    try:
        row = (
            db.query(StorageBlobRow)
            .filter(StorageBlobRow.session_id == session_id, StorageBlobRow.key == key)
            .first()
        )
        if row is None:
            db.add(StorageBlobRow(session_id=session_id, key=key, value=value))
        else:
            row.value = value
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Error writing storage blob %r for session %s: %s", key, session_id, e)
        raise
    finally:
        db.close()


# ============================================================================
# Event Functions
# ============================================================================

def db_log_event(event_type: str, session_id: Optional[str], payload: Optional[Dict[str, Any]]) -> None:
    """
    Store one analytics event.

    Raises:
        SQLAlchemyError: If the insert fails (callers swallow it)
    """
    if not db_is_enabled():
        return

    db = get_db_session()
    try:
        db.add(EventRow(
            ts=datetime.now(timezone.utc),
            session_id=session_id,
            event_type=event_type,
            payload=json.dumps(payload or {}, ensure_ascii=False),
        ))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    finally:
        db.close()

