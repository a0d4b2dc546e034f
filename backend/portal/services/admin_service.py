"""
Admin: clear notification state (admin broadcasts, read receipts, per-user notifications).
Users, sessions, document requests and settings are untouched. Tables: see portal.db.tables.
"""
import logging

from sqlalchemy import delete
from sqlalchemy.orm import Session

import portal.models  # noqa: F401  (registers the tables on Base.metadata)
from portal.db.base import Base
from portal.db.tables import NOTIFICATION_TABLE_NAMES

logger = logging.getLogger(__name__)


def clear_notifications(db: Session) -> dict[str, int]:
    """
    Delete all rows from the notification tables, children first so no FK cascade is needed.
    Returns dict of table -> deleted count.
    """
    deleted: dict[str, int] = {}
    try:
        for name in NOTIFICATION_TABLE_NAMES:
            result = db.execute(delete(Base.metadata.tables[name]))
            deleted[name] = result.rowcount
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("clear_notifications: %s", deleted)
    return deleted
