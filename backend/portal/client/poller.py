"""
Admin notification poller: fetches page 1 on a fixed interval and turns fresh notifications into
toasts + one sound per cycle. Also the single entry point for dropdown open/close, load-more and
mark-read, so every trigger goes through the same feed and lock.

Runs its timers on an APScheduler BackgroundScheduler: the poll (only while browser notifications
are enabled) and the prune of processed ids.
"""
import logging
import threading
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler

from portal.client.api_client import NotificationsApiClient, SessionExpired
from portal.client.feed import FeedUpdate, NotificationFeed, Toast, profile_path
from portal.core.constants import (
    DEFAULT_PAGE_LIMIT,
    POLL_INTERVAL_SECONDS,
    POLL_JOB_ID,
    PROCESSED_PRUNE_INTERVAL_SECONDS,
    PRUNE_JOB_ID,
)
from portal.schemas.notification import AdminNotificationOut
from portal.schemas.settings import NotificationSettings

logger = logging.getLogger(__name__)

AlertSink = Callable[[AdminNotificationOut, Toast], None]
SoundSink = Callable[[], None]


class NotificationPoller:
    def __init__(
        self,
        client: NotificationsApiClient,
        *,
        feed: NotificationFeed | None = None,
        on_alert: AlertSink | None = None,
        on_sound: SoundSink | None = None,
        prefs: NotificationSettings | None = None,
        page_limit: int = DEFAULT_PAGE_LIMIT,
        poll_interval_seconds: int = POLL_INTERVAL_SECONDS,
        prune_interval_seconds: int = PROCESSED_PRUNE_INTERVAL_SECONDS,
        scheduler: BackgroundScheduler | None = None,
    ) -> None:
        self.client = client
        self.feed = feed or NotificationFeed()
        self.on_alert = on_alert
        self.on_sound = on_sound
        self.prefs = prefs
        self.page_limit = page_limit
        self.poll_interval_seconds = poll_interval_seconds
        self.prune_interval_seconds = prune_interval_seconds
        self._scheduler = scheduler or BackgroundScheduler()
        self._lock = threading.RLock()

    # --- lifecycle ---

    def load_prefs(self) -> NotificationSettings:
        """Saved notification settings, or defaults if they cannot be fetched."""
        try:
            self.prefs = self.client.get_settings()
        except Exception as e:
            logger.warning("Could not load notification settings, using defaults: %s", e)
            self.prefs = NotificationSettings()
        return self.prefs

    def start(self) -> None:
        if self.prefs is None:
            self.load_prefs()
        # Initial load: fills the list and unread count, never alerts
        self.refresh()
        if self.prefs.browser_notifications:
            self._scheduler.add_job(
                self.refresh,
                "interval",
                seconds=self.poll_interval_seconds,
                id=POLL_JOB_ID,
                replace_existing=True,
                max_instances=1,
                coalesce=True,
            )
        else:
            logger.info("Browser notifications disabled; not polling")
        self._scheduler.add_job(
            self.prune,
            "interval",
            seconds=self.prune_interval_seconds,
            id=PRUNE_JOB_ID,
            replace_existing=True,
        )
        if not self._scheduler.running:
            self._scheduler.start()
        logger.info("Notification poller started (every %ss)", self.poll_interval_seconds)

    def stop(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)

    # --- fetching ---

    def _fetch(self, page: int) -> FeedUpdate | None:
        try:
            result = self.client.fetch_page(page, self.page_limit)
        except SessionExpired:
            logger.debug("Session expired; skipping notification fetch for page %s", page)
            return None
        except Exception as e:
            logger.warning("Notification fetch for page %s failed: %s", page, e)
            return None
        with self._lock:
            update = self.feed.apply_page(page, result)
        self._deliver(update)
        return update

    def _deliver(self, update: FeedUpdate) -> None:
        for item, toast in update.alerts:
            if self.on_alert is None:
                logger.info("New notification %s: %s", item.id, item.title)
                continue
            try:
                self.on_alert(item, toast)
            except Exception:
                logger.exception("Alert sink failed for notification %s", item.id)
        if update.play_sound and self.on_sound is not None and (self.prefs is None or self.prefs.sound_enabled):
            try:
                self.on_sound()
            except Exception as e:
                # Playback being blocked must not break the cycle
                logger.warning("Notification sound could not be played: %s", e)

    def refresh(self) -> FeedUpdate | None:
        """One poll cycle: page 1, replacing the local list."""
        return self._fetch(1)

    def request_next_page(self) -> FeedUpdate | None:
        """Load-more (scroll, button, viewport observer): at most one in flight, only while open."""
        with self._lock:
            page = self.feed.begin_load_more()
        if page is None:
            return None
        try:
            return self._fetch(page)
        finally:
            with self._lock:
                self.feed.end_load_more()

    # --- dropdown ---

    def open(self) -> FeedUpdate | None:
        with self._lock:
            page = self.feed.open()
        return self._fetch(page)

    def close(self) -> None:
        with self._lock:
            self.feed.close()

    def open_notification(self, notification: AdminNotificationOut) -> str | None:
        """Click on an item: close the dropdown, mark it read, return where to navigate (if anywhere)."""
        self.close()
        if not notification.is_read:
            self.mark_read(notification.id)
        return profile_path(notification)

    # --- read state ---

    def mark_read(self, notification_id: int) -> bool:
        try:
            self.client.mark_read(notification_id)
        except Exception as e:
            logger.warning("Failed to mark notification %s read: %s", notification_id, e)
            return False
        with self._lock:
            self.feed.mark_read_locally(notification_id)
        return True

    def mark_all_read(self) -> bool:
        try:
            self.client.mark_all_read()
        except Exception as e:
            logger.warning("Failed to mark all notifications read: %s", e)
            return False
        with self._lock:
            self.feed.mark_all_read_locally()
        return True

    def prune(self) -> int:
        with self._lock:
            removed = self.feed.prune_processed()
        if removed:
            logger.debug("Pruned %s processed notification ids", removed)
        return removed
