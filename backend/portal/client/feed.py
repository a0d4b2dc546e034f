"""
Local view of the admin notification dropdown, as a plain reducer (no timers, no network).

Two triggers feed it: the fixed-interval poll (always page 1) and infinite scroll (next page while
open). It decides which items deserve a toast: only after the first load, only from page 1, only
unread items not already alerted whose created_at falls inside the recency window. Ids are marked
processed before the toast is handed out, so overlapping polls cannot alert twice.
The server's unreadCount is authoritative; local edits only bridge the gap to the next poll.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable

from portal.core.constants import (
    ALERT_RECENCY_WINDOW_SECONDS,
    PROCESSED_PRUNE_WINDOW_SECONDS,
    TOAST_AUTO_CLOSE_MS,
    TYPE_DOCUMENT_REQUEST,
)
from portal.schemas.notification import AdminNotificationOut, PaginatedNotificationsOut


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def profile_path(notification: AdminNotificationOut) -> str | None:
    """Where a document_request notification leads: the requesting client's profile."""
    if notification.type != TYPE_DOCUMENT_REQUEST:
        return None
    user_id = (notification.data or {}).get("user_id")
    return f"/admin/user/{user_id}" if user_id else None


@dataclass(frozen=True)
class Toast:
    notification_id: int
    title: str
    details: str
    kind: str = "default"  # 'document_request' | 'default'
    action_text: str | None = None
    action_path: str | None = None
    auto_close_ms: int = TOAST_AUTO_CLOSE_MS


def build_toast(notification: AdminNotificationOut) -> Toast:
    if notification.type == TYPE_DOCUMENT_REQUEST:
        return Toast(
            notification_id=notification.id,
            title=notification.title,
            details=notification.message or "New document request awaiting approval",
            kind="document_request",
            action_text="View profile",
            action_path=profile_path(notification),
        )
    return Toast(notification_id=notification.id, title=notification.title, details=notification.message or "")


@dataclass
class FeedUpdate:
    alerts: list[tuple[AdminNotificationOut, Toast]] = field(default_factory=list)

    @property
    def play_sound(self) -> bool:
        # One sound per cycle no matter how many toasts
        return bool(self.alerts)


class NotificationFeed:
    def __init__(
        self,
        *,
        recency_window: timedelta = timedelta(seconds=ALERT_RECENCY_WINDOW_SECONDS),
        prune_window: timedelta = timedelta(seconds=PROCESSED_PRUNE_WINDOW_SECONDS),
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.recency_window = recency_window
        self.prune_window = prune_window
        self._clock = clock
        self.items: list[AdminNotificationOut] = []
        self.unread_count = 0
        self.page = 1
        self.has_more = True
        self.is_open = False
        self.loading_more = False
        self.initial_load_done = False
        self.processed_ids: set[int] = set()

    # --- server responses ---

    def _fresh_unread(self, notifications: list[AdminNotificationOut]) -> list[AdminNotificationOut]:
        cutoff = self._clock() - self.recency_window
        return [
            n for n in notifications
            if not n.is_read and n.id not in self.processed_ids and n.created_at > cutoff
        ]

    def apply_page(self, page_number: int, result: PaginatedNotificationsOut) -> FeedUpdate:
        """
        Merge one page. Page 1 replaces the list (the poll and a reopen always show the freshest
        page); later pages append, skipping ids already shown.
        """
        candidates: list[AdminNotificationOut] = []
        if self.initial_load_done and page_number == 1:
            candidates = self._fresh_unread(result.notifications)

        if page_number == 1:
            self.items = list(result.notifications)
            self.page = 1
        else:
            seen = {n.id for n in self.items}
            self.items.extend(n for n in result.notifications if n.id not in seen)
            self.page = page_number
        self.unread_count = result.unread_count
        self.has_more = result.pagination.has_more

        update = FeedUpdate()
        for n in candidates:
            self.processed_ids.add(n.id)
            update.alerts.append((n, build_toast(n)))
        self.initial_load_done = True
        return update

    # --- dropdown state ---

    def open(self) -> int:
        """Closed -> Open: pagination restarts at page 1 (returned so the caller fetches it)."""
        self.is_open = True
        self.page = 1
        self.has_more = True
        return 1

    def close(self) -> None:
        self.is_open = False

    def begin_load_more(self) -> int | None:
        """Next page to fetch, or None when closed, exhausted or a load is already in flight."""
        if not self.is_open or self.loading_more or not self.has_more:
            return None
        self.loading_more = True
        return self.page + 1

    def end_load_more(self) -> None:
        self.loading_more = False

    # --- local read state ---

    def mark_read_locally(self, notification_id: int) -> None:
        for i, n in enumerate(self.items):
            if n.id == notification_id:
                if not n.is_read:
                    self.items[i] = n.model_copy(update={"is_read": True})
                    self.unread_count = max(0, self.unread_count - 1)
                return

    def mark_all_read_locally(self) -> None:
        self.items = [n if n.is_read else n.model_copy(update={"is_read": True}) for n in self.items]
        self.unread_count = 0

    # --- housekeeping ---

    def prune_processed(self) -> int:
        """Keep only processed ids still among recent notifications; returns how many were dropped."""
        cutoff = self._clock() - self.prune_window
        recent = {n.id for n in self.items if n.created_at > cutoff}
        before = len(self.processed_ids)
        self.processed_ids &= recent
        return before - len(self.processed_ids)
