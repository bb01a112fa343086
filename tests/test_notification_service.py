import logging

from career_api.db.mongodb import COLLECTIONS
from career_api.services.notification_service import NotificationService


class BrokenStore:
    def insert(self, collection, doc, doc_id=None):
        raise RuntimeError("database unavailable")


def test_emit_records_notification(store):
    assert NotificationService(store).emit("u1", "Hello", "World", "success", "/home") is True
    [notification] = store.find(COLLECTIONS["notifications"])
    assert notification["read"] is False
    assert notification["type"] == "success"


def test_unknown_type_falls_back_to_info(store):
    NotificationService(store).emit("u1", "Hello", "World", "urgent")
    assert store.find(COLLECTIONS["notifications"])[0]["type"] == "info"


def test_notification_type_by_keyword(store):
    NotificationService(store).emit("u1", "Offer", "Accepted", notification_type="warning", action_url="/x")
    [notification] = store.find(COLLECTIONS["notifications"])
    assert notification["type"] == "warning"
    assert notification["action_url"] == "/x"


def test_emit_failure_is_logged_not_raised(caplog):
    with caplog.at_level(logging.ERROR):
        assert NotificationService(BrokenStore()).emit("u1", "Hello", "World") is False
    assert "Failed to create notification" in caplog.text
