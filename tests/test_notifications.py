"""
Tests for /api/notifications.
"""

from conftest import register
from lumina.store import storage


class TestNotifications:

    def test_requires_auth(self, client):
        assert client.get("/api/notifications").status_code == 401

    def test_own_only(self, client):
        asha, headers = register(client)
        ravi, _ = register(client, email="ravi@example.org")
        storage.create_notification({"user_id": asha["id"], "title": "Hi", "message": "m", "type": "payment"})
        storage.create_notification({"user_id": ravi["id"], "title": "Not yours", "message": "m", "type": "payment"})

        notes = client.get("/api/notifications", headers=headers).json()
        assert [n["title"] for n in notes] == ["Hi"]
        assert notes[0]["read"] is False

    def test_mark_read(self, client):
        asha, headers = register(client)
        note = storage.create_notification({"user_id": asha["id"], "title": "Hi", "message": "m", "type": "payment"})

        resp = client.patch(f"/api/notifications/{note['id']}/read", headers=headers)
        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        assert client.get("/api/notifications", headers=headers).json()[0]["read"] is True

    def test_cannot_mark_someone_elses(self, client):
        asha, _ = register(client)
        _, ravi_headers = register(client, email="ravi@example.org")
        note = storage.create_notification({"user_id": asha["id"], "title": "Hi", "message": "m", "type": "payment"})

        resp = client.patch(f"/api/notifications/{note['id']}/read", headers=ravi_headers)
        assert resp.status_code == 404
        assert storage.get_notification(note["id"])["read"] is False

    def test_missing(self, client):
        _, headers = register(client)
        assert client.patch("/api/notifications/nope/read", headers=headers).status_code == 404
