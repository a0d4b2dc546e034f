"""
Integration tests for the notification repository on SQLite: broadcast rows, per-admin read receipts,
pagination, counts and per-user notifications.
"""
from datetime import datetime, timedelta, timezone

from sqlalchemy import Text, func, select

from portal.models import AdminNotification, AdminNotificationRead, Notification
from portal.services import notifications


def _count(db, model):
    return db.scalar(select(func.count()).select_from(model))


class TestAdminNotifications:
    def test_create_stores_one_row_for_all_admins(self, db, users):
        created = notifications.create_admin_notification(
            db,
            "document_request",
            "New document request",
            "Carol Client requested: W-2",
            related_id=12,
            related_type="document_requests",
            data={"document_type": "W-2", "user_id": users["carol"], "user_name": "Carol Client"},
        )
        assert _count(db, AdminNotification) == 1
        assert created.id > 0
        assert created.data == {"document_type": "W-2", "user_id": users["carol"], "user_name": "Carol Client"}
        assert created.is_read is None
        assert created.created_at.tzinfo is not None
        for admin in ("alice", "bob"):
            assert notifications.get_unread_admin_notification_count(db, users[admin]) == 1

    def test_empty_related_fields_are_stored_as_null(self, db, users):
        created = notifications.create_admin_notification(db, "system", "t", "m", related_id=0, related_type="")
        assert created.related_id is None
        assert created.related_type is None
        assert created.data is None

    def test_mark_read_is_idempotent_and_per_admin(self, db, users):
        nid = notifications.create_admin_notification(db, "system", "Maintenance", "Tonight").id
        notifications.mark_admin_notification_as_read(db, nid, users["alice"])
        notifications.mark_admin_notification_as_read(db, nid, users["alice"])
        assert _count(db, AdminNotificationRead) == 1
        assert notifications.get_unread_admin_notification_count(db, users["alice"]) == 0
        assert notifications.get_unread_admin_notification_count(db, users["bob"]) == 1

        alice_view = notifications.get_admin_notifications(db, users["alice"])
        bob_view = notifications.get_admin_notifications(db, users["bob"])
        assert alice_view[0].is_read is True
        assert bob_view[0].is_read is False
        assert alice_view[0].read_by_count == bob_view[0].read_by_count == 1

    def test_mark_all_read_only_for_that_admin(self, db, users, add_admin_notification):
        for i in range(3):
            add_admin_notification(f"n{i}")
        first = notifications.get_admin_notifications(db, users["alice"])[0].id
        notifications.mark_admin_notification_as_read(db, first, users["alice"])

        notifications.mark_all_admin_notifications_as_read(db, users["alice"])
        notifications.mark_all_admin_notifications_as_read(db, users["alice"])

        assert _count(db, AdminNotificationRead) == 3
        assert notifications.get_unread_admin_notification_count(db, users["alice"]) == 0
        assert notifications.get_unread_admin_notification_count(db, users["bob"]) == 3
        assert notifications.get_unread_admin_notifications(db, users["alice"]) == []
        assert len(notifications.get_unread_admin_notifications(db, users["bob"])) == 3

    def test_unread_count_plus_read_equals_total(self, db, users, add_admin_notification):
        ids = [add_admin_notification(f"n{i}") for i in range(5)]
        for nid in ids[:2]:
            notifications.mark_admin_notification_as_read(db, nid, users["bob"])
        page = notifications.get_admin_notifications_paginated(db, users["bob"], 10, 0)
        unread = notifications.get_unread_admin_notification_count(db, users["bob"])
        read = sum(1 for n in page.notifications if n.is_read)
        assert unread + read == page.total == 5

    def test_pagination_newest_first_with_total(self, db, users, add_admin_notification):
        start = datetime(2026, 1, 1, tzinfo=timezone.utc)
        for i in range(25):
            add_admin_notification(f"n{i:02d}", created_at=start + timedelta(minutes=i))

        first = notifications.get_admin_notifications_paginated(db, users["alice"], 10, 0)
        assert first.total == 25
        assert [n.title for n in first.notifications][:3] == ["n24", "n23", "n22"]
        assert len(first.notifications) == 10

        last = notifications.get_admin_notifications_paginated(db, users["alice"], 10, 20)
        assert [n.title for n in last.notifications] == ["n04", "n03", "n02", "n01", "n00"]

        beyond = notifications.get_admin_notifications_paginated(db, users["alice"], 10, 30)
        assert beyond.notifications == []
        assert beyond.total == 25

    def test_same_timestamp_ordered_by_id_desc(self, db, users, add_admin_notification):
        at = datetime(2026, 2, 2, tzinfo=timezone.utc)
        ids = [add_admin_notification(f"same{i}", created_at=at) for i in range(3)]
        listed = notifications.get_admin_notifications(db, users["alice"])
        assert [n.id for n in listed] == sorted(ids, reverse=True)

    def test_malformed_data_degrades_to_null(self, db, users, add_admin_notification):
        good = add_admin_notification("good", data='{"user_id": 3}')
        bad = add_admin_notification("bad", data="{this is not json")
        listed = {n.id: n for n in notifications.get_admin_notifications(db, users["alice"])}
        assert listed[good].data == {"user_id": 3}
        assert listed[bad].data is None
        assert notifications.get_admin_notification(db, bad).data is None

    def test_data_column_holds_raw_json_text(self, db, users, add_admin_notification):
        assert isinstance(AdminNotification.__table__.c.data.type, Text)
        nid = add_admin_notification("typed", data='{"user_id": "5", "user_name": "Carol"}', notification_type="document_request")
        assert db.scalar(select(AdminNotification.data).where(AdminNotification.id == nid)) == (
            '{"user_id": "5", "user_name": "Carol"}'
        )
        assert notifications.get_admin_notification(db, nid).data == {"user_id": 5, "user_name": "Carol"}

    def test_read_by_count_tracks_distinct_admins(self, db, users, add_admin_notification):
        nid = add_admin_notification("shared")
        for admin in ("alice", "bob", "alice"):
            notifications.mark_admin_notification_as_read(db, nid, users[admin])
        for admin in ("alice", "bob"):
            listed = notifications.get_admin_notifications(db, users[admin])
            assert listed[0].read_by_count == 2
            assert listed[0].is_read is True
        assert _count(db, AdminNotificationRead) == 2

    def test_all_pages_cover_total_without_repeats(self, db, users, add_admin_notification):
        at = datetime(2026, 2, 2, tzinfo=timezone.utc)
        for i in range(23):
            # Every third row shares a timestamp so the id tie-break decides page boundaries
            add_admin_notification(f"n{i}", created_at=at + timedelta(minutes=i // 3))
        seen = []
        offset = 0
        while True:
            page = notifications.get_admin_notifications_paginated(db, users["alice"], 5, offset)
            if not page.notifications:
                break
            seen.extend(n.id for n in page.notifications)
            offset += 5
        assert page.total == 23
        assert len(seen) == len(set(seen)) == 23

    def test_get_missing_notification(self, db, users):
        assert notifications.get_admin_notification(db, 12345) is None
        assert notifications.get_user_notification(db, 12345) is None

    def test_get_all_admin_ids(self, db, users):
        assert notifications.get_all_admin_ids(db) == [users["alice"], users["bob"]]


class TestUserNotifications:
    def test_create_list_and_count(self, db, users):
        carol = users["carol"]
        for i in range(3):
            notifications.create_user_notification(
                db, carol, "document_request_update", "Request updated", f"m{i}", related_id=i + 1,
                related_type="document_request",
            )
        notifications.create_user_notification(db, users["dave"], "system", "Hi", "Dave only")

        listed = notifications.get_user_notifications(db, carol)
        assert [n.message for n in listed] == ["m2", "m1", "m0"]
        assert all(n.user_id == carol for n in listed)
        assert notifications.get_unread_user_notification_count(db, carol) == 3
        assert len(notifications.get_user_notifications(db, carol, limit=2)) == 2

    def test_mark_read_guarded_by_owner(self, db, users):
        created = notifications.create_user_notification(db, users["carol"], "system", "t", "m")
        notifications.mark_user_notification_as_read(db, created.id, users["dave"])
        assert notifications.get_user_notification(db, created.id).is_read is False

        notifications.mark_user_notification_as_read(db, created.id, users["carol"])
        marked = notifications.get_user_notification(db, created.id)
        assert marked.is_read is True
        assert marked.read_at is not None
        assert notifications.get_unread_user_notification_count(db, users["carol"]) == 0

    def test_second_mark_keeps_first_read_at(self, db, users):
        created = notifications.create_user_notification(db, users["carol"], "system", "t", "m")
        notifications.mark_user_notification_as_read(db, created.id, users["carol"])
        first_read_at = db.scalar(select(Notification.read_at).where(Notification.id == created.id))
        notifications.mark_user_notification_as_read(db, created.id, users["carol"])
        assert db.scalar(select(Notification.read_at).where(Notification.id == created.id)) == first_read_at
