"""
Document requests as the notification source: fan-out on create, owner notification on update,
best-effort isolation of notification failures, and cache invalidation.
"""
from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from portal.config import settings
from portal.core.errors import StoreError
from portal.models import AdminNotification, Notification
from portal.schemas.settings import NotificationSettings
from portal.services import document_requests, notification_helpers, notifications
from portal.services.user_settings import save_notification_settings


def _admin_rows(db):
    return db.scalar(select(func.count()).select_from(AdminNotification))


class TestCreate:
    def test_create_fans_out_one_admin_notification(self, db, users):
        created = document_requests.create_document_request(db, users["carol"], "2025 W-2", "Please upload", "W-2")
        assert created["status"] == "pending"
        assert created["first_name"] == "Carol"
        assert _admin_rows(db) == 1

        note = notifications.get_admin_notifications(db, users["alice"])[0]
        assert note.type == "document_request"
        assert note.title == "New document request"
        assert note.message == "Carol Client requested: 2025 W-2"
        assert note.related_id == created["id"]
        assert note.related_type == "document_requests"
        assert note.data == {"document_type": "W-2", "user_id": users["carol"], "user_name": "Carol Client"}

    def test_user_without_name_is_called_user(self, db, users):
        document_requests.create_document_request(db, users["dave"], "Bank statement")
        note = notifications.get_admin_notifications(db, users["alice"])[0]
        assert note.message == "User requested: Bank statement"

    def test_notification_failure_does_not_fail_request(self, db, users, caplog):
        with patch.object(
            notifications, "create_admin_notification", side_effect=StoreError("create_admin_notification failed")
        ):
            created = document_requests.create_document_request(db, users["carol"], "1099")
        assert created["id"] > 0
        assert _admin_rows(db) == 0
        assert "failed" in caplog.text

    def test_unknown_user_raises_lookup_error(self, db, users):
        with pytest.raises(LookupError):
            document_requests.create_document_request(db, 9999, "Nope")


class TestUpdate:
    def test_status_update_notifies_owner(self, db, users):
        created = document_requests.create_document_request(db, users["carol"], "W-2")
        updated = document_requests.update_request_status(
            db, created["id"], "in_progress", responded_by=users["alice"], responded_by_name="Alice Admin"
        )
        assert updated["status"] == "in_progress"
        assert updated["responded_by_name"] == "Alice Admin"

        inbox = notifications.get_user_notifications(db, users["carol"])
        assert len(inbox) == 1
        assert inbox[0].title == "Request updated"
        assert inbox[0].message == 'Your request "W-2" was updated to: in_progress'
        assert inbox[0].type == "document_request_update"
        assert inbox[0].related_type == "document_request"
        assert inbox[0].related_id == created["id"]

    def test_admin_message_sends_response_notification(self, db, users):
        created = document_requests.create_document_request(db, users["carol"], "W-2")
        document_requests.update_request_status(db, created["id"], "completed", admin_message="Uploaded to your files")
        inbox = notifications.get_user_notifications(db, users["carol"])
        assert inbox[0].title == "New response"
        assert inbox[0].message == 'You received a response to your request "W-2"'

    def test_user_notification_failure_is_isolated(self, db, users):
        created = document_requests.create_document_request(db, users["carol"], "W-2")
        with patch.object(notifications, "create_user_notification", side_effect=StoreError("down")):
            updated = document_requests.update_request_status(db, created["id"], "rejected")
        assert updated["status"] == "rejected"
        assert db.scalar(select(func.count()).select_from(Notification)) == 0

    def test_invalid_status_and_missing_request(self, db, users):
        with pytest.raises(ValueError):
            document_requests.update_request_status(db, 1, "archived")
        with pytest.raises(LookupError):
            document_requests.update_request_status(db, 4242, "completed")

    def test_owner_gets_update_email(self, db, users):
        created = document_requests.create_document_request(db, users["carol"], "W-2")
        with patch.object(document_requests, "send_request_update_email", return_value=True) as send:
            document_requests.update_request_status(db, created["id"], "completed", admin_message="Done")
        send.assert_called_once_with("carol@client.test", title="W-2", status="completed", admin_message="Done")


class TestUpdateTemplates:
    def test_unknown_update_type_uses_generic_text(self, db, users):
        note = notification_helpers.notify_user_document_request_update(
            db, users["carol"], {"id": 5, "title": "W-2", "status": "pending"}, "something_else"
        )
        assert note.title == "Request updated"
        assert note.message == 'Your request "W-2" was updated'

    def test_admin_fan_out_reraises(self, db, users):
        with patch.object(notifications, "create_admin_notification", side_effect=StoreError("down")):
            with pytest.raises(StoreError):
                notification_helpers.notify_admins_new_document_request(
                    db, {"id": 1, "title": "x", "user_id": users["carol"], "user_name": "Carol"}
                )


class TestAdminEmail:
    def test_disabled_by_default(self, db, users):
        assert notification_helpers.email_admins_new_document_request(db, {"id": 1, "title": "W-2"}) == 0

    def test_respects_admin_preferences(self, db, users, monkeypatch):
        monkeypatch.setattr(settings, "notify_admins_by_email", True)
        save_notification_settings(db, users["bob"], NotificationSettings(email_notifications=False))
        with patch.object(notification_helpers, "send_new_request_email", return_value=True) as send:
            sent = notification_helpers.email_admins_new_document_request(
                db, {"id": 1, "title": "W-2", "user_id": users["carol"], "user_name": "Carol Client"}
            )
        assert sent == 1
        send.assert_called_once_with("alice@office.test", user_name="Carol Client", title="W-2", user_id=users["carol"])

    def test_smtp_failure_is_not_raised(self, db, users, monkeypatch):
        monkeypatch.setattr(settings, "notify_admins_by_email", True)
        with patch.object(notification_helpers, "send_new_request_email", side_effect=RuntimeError("smtp down")):
            assert notification_helpers.email_admins_new_document_request(db, {"id": 1, "title": "W-2"}) == 0


class TestCaches:
    def test_detail_cache_until_update(self, db, users):
        created = document_requests.create_document_request(db, users["carol"], "W-2")
        first = document_requests.get_request_details(db, created["id"])
        assert first["status"] == "pending"
        with patch.object(document_requests, "_load_detail") as load:
            assert document_requests.get_request_details(db, created["id"]) == first
            load.assert_not_called()

        document_requests.update_request_status(db, created["id"], "completed")
        assert document_requests.get_request_details(db, created["id"])["status"] == "completed"

    def test_list_cache_invalidated_by_create(self, db, users):
        document_requests.create_document_request(db, users["carol"], "A")
        page = document_requests.list_document_requests(db, 1, 10)
        assert page["totalRequests"] == 1
        document_requests.create_document_request(db, users["carol"], "B")
        page = document_requests.list_document_requests(db, 1, 10)
        assert page["totalRequests"] == 2
        assert [r["title"] for r in page["requests"]] == ["B", "A"]

    def test_list_filters_and_bypass(self, db, users):
        a = document_requests.create_document_request(db, users["carol"], "A")
        document_requests.create_document_request(db, users["dave"], "B")
        document_requests.update_request_status(db, a["id"], "completed")

        completed = document_requests.list_document_requests(db, status="completed")
        assert [r["title"] for r in completed["requests"]] == ["A"]
        mine = document_requests.list_document_requests(db, user_id=users["dave"], use_cache=False)
        assert [r["title"] for r in mine["requests"]] == ["B"]
        oldest = document_requests.list_document_requests(db, newest_first=False)
        assert [r["title"] for r in oldest["requests"]] == ["A", "B"]

    def test_missing_detail_is_cached_but_cleared_on_create(self, db, users):
        assert document_requests.get_request_details(db, 1) is None
        created = document_requests.create_document_request(db, users["carol"], "First")
        assert created["id"] == 1
        assert document_requests.get_request_details(db, 1)["title"] == "First"
