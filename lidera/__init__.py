# lidera/__init__.py
"""
Lidera Skills shared package

- auth: Authentication and session management
- config: Configuration management (local + Streamlit Cloud)
- db: Database engine with pooling
- store: Collection-oriented document store
- tenant: Current company of the session
- audit: Audit trail
- errors: Error codes and user-facing messages
- s3_utils: Employee photo storage
- performance: Evaluation analytics, import / export, charts

Usage:
    from lidera import AuthManager, DocumentStore, TenantSession, config
"""

# Configuration
from .config import config, Config

# Database
from .db import get_db_engine, check_db_connection, reset_db_engine

# Store
from .store import DocumentStore, Page
from .errors import StoreError, ErrorCode, notify_error

# Session
from .auth import AuthManager, require_login
from .tenant import TenantSession
from .audit import AuditLogger

__all__ = [
    'config',
    'Config',
    'get_db_engine',
    'check_db_connection',
    'reset_db_engine',
    'DocumentStore',
    'Page',
    'StoreError',
    'ErrorCode',
    'notify_error',
    'AuthManager',
    'require_login',
    'TenantSession',
    'AuditLogger',
]

__version__ = '1.0.0'
