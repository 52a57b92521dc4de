# lidera/db.py
"""
Database Connection Management

Version: 1.0.0
Features:
- Singleton pattern with thread-safe double-checked locking
- Connection pooling with auto-reconnect (MySQL), single shared connection (SQLite)
- `documents` table backing every collection of the document store
- Health check utilities
"""

import logging
import threading
from contextlib import contextmanager
from typing import Tuple, Optional, Dict, Any

from sqlalchemy import (
    create_engine, text, MetaData, Table, Column,
    Integer, String, DateTime, JSON, Index,
)
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool, StaticPool
from sqlalchemy.exc import OperationalError

from .config import config

logger = logging.getLogger(__name__)

# ==================== SCHEMA ====================

metadata = MetaData()

# One row per document. `seq` orders pages, `id` is the opaque public id.
documents = Table(
    "documents",
    metadata,
    Column("seq", Integer, primary_key=True, autoincrement=True),
    Column("id", String(36), nullable=False, unique=True),
    Column("collection", String(64), nullable=False),
    Column("company_id", String(64), nullable=True),
    Column("data", JSON, nullable=False),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
    Index("ix_documents_collection_company", "collection", "company_id"),
)

# ==================== SINGLETON ENGINE ====================

_engine = None
_engine_lock = threading.Lock()


def get_db_engine() -> Engine:
    """
    Get SQLAlchemy database engine (singleton pattern)

    Thread-safe implementation using double-checked locking.
    Reuses the same engine across all calls to prevent
    connection pool exhaustion.
    """
    global _engine

    if _engine is None:
        with _engine_lock:
            if _engine is None:
                _engine = create_store_engine(config.get_database_url())
                init_schema(_engine)

    return _engine


def create_store_engine(url: str) -> Engine:
    """Create new database engine with configured settings"""
    if url.startswith("sqlite"):
        logger.info(f"🔌 Creating SQLite engine: {url}")
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False
        )

    app_config = config.app_config
    pool_size = app_config.get("DB_POOL_SIZE", 5)
    pool_recycle = app_config.get("DB_POOL_RECYCLE", 3600)

    safe_url = url.split("@")[-1]
    logger.info(f"🔌 Creating database engine: ***@{safe_url}")

    engine = create_engine(
        url,
        poolclass=QueuePool,
        pool_size=pool_size,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=pool_recycle,
        pool_pre_ping=True,  # Auto-reconnect on stale connections
        echo=False
    )

    logger.info(f"✅ Database engine created (pool_size={pool_size}, recycle={pool_recycle}s)")

    return engine


def init_schema(engine: Engine):
    """Create the documents table if missing"""
    metadata.create_all(engine)


# ==================== CONNECTION MANAGEMENT ====================

def check_db_connection() -> Tuple[bool, Optional[str]]:
    """
    Check if database connection is healthy

    Returns:
        Tuple of (is_connected: bool, error_message: str or None)
    """
    try:
        engine = get_db_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True, None
    except OperationalError as e:
        error_msg = "Não foi possível conectar ao banco de dados. Verifique sua conexão."
        logger.error(f"❌ Database connection failed: {e}")
        return False, error_msg
    except Exception as e:
        error_msg = f"Erro de banco de dados: {str(e)}"
        logger.error(f"❌ Database error: {e}")
        return False, error_msg


def reset_db_engine():
    """
    Reset the database engine (force new connection)

    Call this after persistent connection errors or
    when you need to reconnect with different settings.
    """
    global _engine

    with _engine_lock:
        if _engine is not None:
            try:
                _engine.dispose()
                logger.info("🔄 Database engine disposed")
            except Exception as e:
                logger.error(f"Error disposing engine: {e}")
            _engine = None

    logger.info("🔄 Database engine reset - will reconnect on next query")


def get_connection_pool_status() -> Dict[str, Any]:
    """Get connection pool statistics for monitoring"""
    if _engine is None:
        return {"status": "not_initialized"}

    pool = _engine.pool
    if not isinstance(pool, QueuePool):
        return {"status": "active", "pool": type(pool).__name__}

    try:
        return {
            "status": "active",
            "pool_size": pool.size(),
            "checked_in": pool.checkedin(),
            "checked_out": pool.checkedout(),
            "overflow": pool.overflow(),
        }
    except Exception as e:
        return {"status": "error", "error": str(e)}


# ==================== CONTEXT MANAGERS ====================

@contextmanager
def get_transaction(engine: Engine = None):
    """
    Context manager for database transactions

    Usage:
        with get_transaction() as conn:
            conn.execute(documents.insert().values(...))
            conn.execute(documents.update().where(...).values(...))
            # Auto-commit on success, auto-rollback on exception
    """
    engine = engine or get_db_engine()
    conn = engine.connect()
    trans = conn.begin()
    try:
        yield conn
        trans.commit()
    except Exception:
        trans.rollback()
        raise
    finally:
        conn.close()


__all__ = [
    'documents',
    'metadata',
    'get_db_engine',
    'create_store_engine',
    'init_schema',
    'check_db_connection',
    'reset_db_engine',
    'get_connection_pool_status',
    'get_transaction',
]
