"""
Notification repository: the only module that reads or writes notification tables.

Admin notifications are broadcast rows; is_read and read_by_count are computed per requesting admin
by joining admin_notification_reads. Per-user notifications carry is_read/read_at on the row.
Every function takes the session first and is wrapped in retry_transient, so store failures surface
as StoreError and malformed `data` payloads surface as None.
"""
import logging
from typing import Any

from sqlalchemy import Integer, and_, case, func, insert, literal, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.orm import Session, aliased

from portal.core.constants import DEFAULT_LIST_LIMIT, DEFAULT_PAGE_LIMIT, ROLE_ADMIN
from portal.core.errors import CreationFailed
from portal.core.payload import decode_notification_data, encode_notification_data
from portal.db.session import retry_transient
from portal.models.admin_notification import AdminNotification, AdminNotificationRead
from portal.models.notification import Notification
from portal.models.user import User
from portal.schemas.notification import AdminNotificationOut, AdminNotificationPage, NotificationOut

logger = logging.getLogger(__name__)

_NEWEST_FIRST = (AdminNotification.created_at.desc(), AdminNotification.id.desc())


# ---------------------------------------------------------------------------
# Hydration
# ---------------------------------------------------------------------------


def _admin_out(
    row: AdminNotification, is_read: Any = None, read_by_count: Any = None
) -> AdminNotificationOut:
    return AdminNotificationOut(
        id=row.id,
        type=row.type,
        title=row.title,
        message=row.message,
        related_id=row.related_id,
        related_type=row.related_type,
        data=decode_notification_data(row.data, row.id, row.type),
        created_at=row.created_at,
        is_read=None if is_read is None else bool(is_read),
        read_by_count=None if read_by_count is None else int(read_by_count),
    )


def _user_out(row: Notification) -> NotificationOut:
    return NotificationOut(
        id=row.id,
        user_id=row.user_id,
        type=row.type,
        title=row.title,
        message=row.message,
        related_id=row.related_id,
        related_type=row.related_type,
        is_read=bool(row.is_read),
        created_at=row.created_at,
        read_at=row.read_at,
    )


# ---------------------------------------------------------------------------
# Query builders
# ---------------------------------------------------------------------------


def _insert_ignore(db: Session, table):
    """INSERT that silently skips rows violating a unique key (MySQL IGNORE, SQLite OR IGNORE, PG ON CONFLICT)."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert(table), True
    if dialect == "sqlite":
        return insert(table).prefix_with("OR IGNORE"), False
    return insert(table).prefix_with("IGNORE"), False


def _read_by_count():
    return (
        select(func.count(AdminNotificationRead.id))
        .where(AdminNotificationRead.notification_id == AdminNotification.id)
        .correlate(AdminNotification)
        .scalar_subquery()
    )


def _admin_listing(admin_id: int):
    """Admin notifications newest first, each with this admin's is_read flag and the global read count."""
    mine = aliased(AdminNotificationRead)
    return (
        select(
            AdminNotification,
            case((mine.id.is_not(None), 1), else_=0).label("is_read"),
            _read_by_count().label("read_by_count"),
        )
        .outerjoin(mine, and_(mine.notification_id == AdminNotification.id, mine.admin_id == admin_id))
        .order_by(*_NEWEST_FIRST)
    )


# ---------------------------------------------------------------------------
# Admin notifications
# ---------------------------------------------------------------------------


@retry_transient
def get_admin_notification(db: Session, notification_id: int) -> AdminNotificationOut | None:
    row = db.get(AdminNotification, notification_id)
    return _admin_out(row) if row else None


@retry_transient
def create_admin_notification(
    db: Session,
    notification_type: str,
    title: str,
    message: str,
    related_id: int | None = None,
    related_type: str | None = None,
    data: dict[str, Any] | None = None,
) -> AdminNotificationOut:
    """Insert one broadcast row (never one per admin) and return it re-read by id, data decoded."""
    row = AdminNotification(
        type=notification_type,
        title=title,
        message=message,
        related_id=related_id or None,
        related_type=related_type or None,
        data=encode_notification_data(data),
    )
    db.add(row)
    db.commit()
    if not row.id:
        raise CreationFailed("Admin notification insert returned no id")
    created = get_admin_notification(db, row.id)
    if created is None:
        raise CreationFailed(f"Admin notification {row.id} not found after insert")
    logger.info("Created admin notification %s type=%s", created.id, notification_type)
    return created


@retry_transient
def get_admin_notifications(db: Session, admin_id: int, limit: int = DEFAULT_LIST_LIMIT) -> list[AdminNotificationOut]:
    rows = db.execute(_admin_listing(admin_id).limit(limit)).all()
    return [_admin_out(n, is_read, count) for n, is_read, count in rows]


@retry_transient
def get_unread_admin_notifications(db: Session, admin_id: int) -> list[AdminNotificationOut]:
    mine = aliased(AdminNotificationRead)
    rows = db.scalars(
        select(AdminNotification)
        .outerjoin(mine, and_(mine.notification_id == AdminNotification.id, mine.admin_id == admin_id))
        .where(mine.id.is_(None))
        .order_by(*_NEWEST_FIRST)
    ).all()
    return [_admin_out(n, is_read=False) for n in rows]


@retry_transient
def get_admin_notifications_paginated(
    db: Session, admin_id: int, limit: int = DEFAULT_PAGE_LIMIT, offset: int = 0
) -> AdminNotificationPage:
    """
    One page (newest first, ties by id) plus the total count of all admin notifications.
    total is counted in the same call so hasMore always matches the current table.
    """
    rows = db.execute(_admin_listing(admin_id).limit(limit).offset(offset)).all()
    total = db.scalar(select(func.count()).select_from(AdminNotification)) or 0
    return AdminNotificationPage(
        notifications=[_admin_out(n, is_read, count) for n, is_read, count in rows],
        total=int(total),
    )


@retry_transient
def get_unread_admin_notification_count(db: Session, admin_id: int) -> int:
    mine = aliased(AdminNotificationRead)
    count = db.scalar(
        select(func.count(AdminNotification.id))
        .select_from(AdminNotification)
        .outerjoin(mine, and_(mine.notification_id == AdminNotification.id, mine.admin_id == admin_id))
        .where(mine.id.is_(None))
    )
    return int(count or 0)


@retry_transient
def mark_admin_notification_as_read(db: Session, notification_id: int, admin_id: int) -> None:
    """Idempotent: a second call hits the (notification_id, admin_id) unique key and is ignored."""
    stmt, on_conflict = _insert_ignore(db, AdminNotificationRead.__table__)
    stmt = stmt.values(notification_id=notification_id, admin_id=admin_id)
    if on_conflict:
        stmt = stmt.on_conflict_do_nothing()
    db.execute(stmt)
    db.commit()


@retry_transient
def mark_all_admin_notifications_as_read(db: Session, admin_id: int) -> None:
    """Insert a read receipt for every admin notification this admin has not read yet."""
    already_read = select(AdminNotificationRead.notification_id).where(AdminNotificationRead.admin_id == admin_id)
    unread = select(AdminNotification.id, literal(admin_id, type_=Integer)).where(
        AdminNotification.id.not_in(already_read)
    )
    stmt, on_conflict = _insert_ignore(db, AdminNotificationRead.__table__)
    stmt = stmt.from_select(["notification_id", "admin_id"], unread)
    if on_conflict:
        stmt = stmt.on_conflict_do_nothing()
    result = db.execute(stmt)
    db.commit()
    logger.info("Admin %s marked %s notification(s) as read", admin_id, result.rowcount)


# ---------------------------------------------------------------------------
# Per-user notifications
# ---------------------------------------------------------------------------


@retry_transient
def get_user_notification(db: Session, notification_id: int) -> NotificationOut | None:
    row = db.get(Notification, notification_id)
    return _user_out(row) if row else None


@retry_transient
def create_user_notification(
    db: Session,
    user_id: int,
    notification_type: str,
    title: str,
    message: str,
    related_id: int | None = None,
    related_type: str | None = None,
) -> NotificationOut:
    row = Notification(
        user_id=user_id,
        type=notification_type,
        title=title,
        message=message,
        related_id=related_id or None,
        related_type=related_type or None,
    )
    db.add(row)
    db.commit()
    if not row.id:
        raise CreationFailed("User notification insert returned no id")
    created = get_user_notification(db, row.id)
    if created is None:
        raise CreationFailed(f"User notification {row.id} not found after insert")
    return created


@retry_transient
def get_user_notifications(db: Session, user_id: int, limit: int = DEFAULT_LIST_LIMIT) -> list[NotificationOut]:
    rows = db.scalars(
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
    ).all()
    return [_user_out(r) for r in rows]


@retry_transient
def mark_user_notification_as_read(db: Session, notification_id: int, user_id: int) -> None:
    """Guarded by user_id so nobody can mark another user's notification; read_at keeps the first read."""
    db.execute(
        update(Notification)
        .where(
            Notification.id == notification_id,
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        )
        .values(is_read=True, read_at=func.now())
    )
    db.commit()


@retry_transient
def get_unread_user_notification_count(db: Session, user_id: int) -> int:
    count = db.scalar(
        select(func.count(Notification.id)).where(Notification.user_id == user_id, Notification.is_read.is_(False))
    )
    return int(count or 0)


@retry_transient
def get_all_admin_ids(db: Session) -> list[int]:
    return list(db.scalars(select(User.id).where(User.role == ROLE_ADMIN).order_by(User.id)).all())
