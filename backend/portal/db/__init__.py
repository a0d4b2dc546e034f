from portal.db.base import Base
from portal.db.session import get_db, engine, SessionLocal, retry_transient
from portal.db.tables import ALL_TABLE_NAMES, NOTIFICATION_TABLE_NAMES

__all__ = [
    "get_db",
    "engine",
    "SessionLocal",
    "retry_transient",
    "Base",
    "ALL_TABLE_NAMES",
    "NOTIFICATION_TABLE_NAMES",
]
