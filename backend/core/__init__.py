"""
Core backend modules.
- database: SQLite with SQLAlchemy
- audit: JSON-lines audit log
- auth: X-Session-ID validation
"""
from backend.core.database import get_db, get_db_session, init_db

__all__ = [
    # Database
    "get_db",
    "get_db_session",
    "init_db",
]
