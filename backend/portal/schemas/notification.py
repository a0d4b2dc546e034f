"""Wire shapes for notifications, shared by the API routes and portal.client."""
from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field


def _as_utc(value: datetime | None) -> datetime | None:
    # Drivers hand back naive datetimes; every engine session runs in UTC (portal.db.session)
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class AdminNotificationOut(BaseModel):
    id: int
    type: str
    title: str
    message: str
    related_id: int | None = None
    related_type: str | None = None
    data: dict[str, Any] | None = None
    created_at: UtcDatetime
    # Derived per requesting admin; absent on a freshly created row
    is_read: bool | None = None
    read_by_count: int | None = None


class NotificationOut(BaseModel):
    id: int
    user_id: int
    type: str
    title: str
    message: str
    related_id: int | None = None
    related_type: str | None = None
    is_read: bool = False
    created_at: UtcDatetime
    read_at: UtcDatetime | None = None


class AdminNotificationPage(BaseModel):
    """Repository result: one page plus the unfiltered admin_notifications count."""

    notifications: list[AdminNotificationOut]
    total: int


class PaginationOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int = Field(alias="totalPages")
    has_more: bool = Field(alias="hasMore")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationOut":
        total_pages = (total + limit - 1) // limit if limit > 0 else 0
        return cls(page=page, limit=limit, total=total, total_pages=total_pages, has_more=page * limit < total)


class PaginatedNotificationsOut(BaseModel):
    """`data` of GET /api/notifications/paginated."""

    model_config = ConfigDict(populate_by_name=True)

    notifications: list[AdminNotificationOut]
    unread_count: int = Field(alias="unreadCount")
    pagination: PaginationOut

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
