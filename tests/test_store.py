"""
Tests for the in-memory store: defaults, ordering, filters and feed writes.
"""

from datetime import datetime, timedelta, timezone

import pytest

from conftest import BENGALURU, MYSURU
from lumina.errors import NotFoundError
from lumina.store import DEFAULT_RADIUS_KM, distance_km, location_filter, storage, within_radius


def _donation(**extra):
    data = {"donor_id": "u1", "type": "food", "title": "Rice", "description": None, "location": None}
    data.update(extra)
    return storage.create_donation(data)


def _request(**extra):
    data = {"requester_id": "u1", "type": "medical", "title": "Insulin", "description": "For the clinic"}
    data.update(extra)
    return storage.create_request(data)


class TestDistance:

    def test_same_point_is_zero(self):
        assert distance_km(BENGALURU, BENGALURU) == pytest.approx(0.0)

    def test_bengaluru_to_mysuru(self):
        # roughly 128 km as the crow flies
        assert 120 < distance_km(BENGALURU, MYSURU) < 140

    def test_within_radius_defaults_to_25km(self):
        near = {"id": "a", "location": {"lat": 12.98, "lng": 77.60}}
        far = {"id": "b", "location": MYSURU}
        found = within_radius([near, far], {"lat": BENGALURU["lat"], "lng": BENGALURU["lng"], "radius": None})
        assert [r["id"] for r in found] == ["a"]
        assert DEFAULT_RADIUS_KM == 25.0

    def test_records_without_location_never_match(self):
        found = within_radius([{"id": "x", "location": None}], {"lat": 0, "lng": 0, "radius": 10000})
        assert found == []

    def test_no_filter_keeps_everything(self):
        records = [{"id": "x", "location": None}]
        assert within_radius(records, None) == records

    def test_location_filter_needs_both_coordinates(self):
        assert location_filter(12.9, None) is None
        assert location_filter(None, 77.5) is None
        assert location_filter(12.9, 77.5, 5) == {"lat": 12.9, "lng": 77.5, "radius": 5}


class TestUsers:

    def test_create_sets_defaults(self):
        user = storage.create_user({"email": "a@b.co", "name": "A", "user_type": "donor", "password_hash": "x"})
        assert user["id"]
        assert user["verified"] is False
        assert user["avatar"] is None
        assert user["created_at"].tzinfo is not None

    def test_email_lookup_ignores_case(self):
        storage.create_user({"email": "a@b.co", "name": "A", "user_type": "donor", "password_hash": "x"})
        assert storage.get_user_by_email("A@B.CO")["email"] == "a@b.co"

    def test_update_missing_user_raises(self):
        with pytest.raises(NotFoundError):
            storage.update_user("nope", {"name": "B"})


class TestDonationsAndRequests:

    def test_donation_defaults(self):
        donation = _donation()
        assert donation["status"] == "active"
        assert donation["images"] == []
        assert donation["recipient_id"] is None

    def test_request_defaults(self):
        request = _request()
        assert request["urgency"] == "medium"
        assert request["raised_amount"] == 0.0
        assert request["received_quantity"] == 0

    def test_donations_newest_first(self):
        first = _donation(title="first")
        second = _donation(title="second")
        assert [d["id"] for d in storage.get_donations()] == [second["id"], first["id"]]

    def test_donations_filter_by_type(self):
        _donation(type="food")
        clothes = _donation(type="clothing")
        assert [d["id"] for d in storage.get_donations(type="clothing")] == [clothes["id"]]

    def test_requests_filter_by_urgency(self):
        _request(urgency="low")
        urgent = _request(urgency="high")
        assert [r["id"] for r in storage.get_requests(urgency="high")] == [urgent["id"]]

    def test_requests_geofilter(self):
        near = _request(location=BENGALURU)
        _request(location=MYSURU)
        _request()
        found = storage.get_requests(location=location_filter(12.97, 77.59))
        assert [r["id"] for r in found] == [near["id"]]

    def test_update_is_shallow_merge(self):
        donation = _donation()
        updated = storage.update_donation(donation["id"], {"status": "completed"})
        assert updated["status"] == "completed"
        assert updated["title"] == "Rice"


class TestActivities:

    def _activity(self, start):
        return storage.create_activity({
            "organizer_id": "org",
            "title": "Clean-up",
            "description": "Beach",
            "location": BENGALURU,
            "start_time": start,
            "end_time": start + timedelta(hours=2),
        })

    def test_sorted_by_start_time(self):
        now = datetime.now(timezone.utc)
        later = self._activity(now + timedelta(days=2))
        sooner = self._activity(now + timedelta(days=1))
        assert [a["id"] for a in storage.get_activities()] == [sooner["id"], later["id"]]

    def test_starts_empty(self):
        activity = self._activity(datetime.now(timezone.utc))
        assert activity["current_volunteers"] == 0
        assert activity["skills"] == []


class TestActivityFeed:

    def test_each_create_writes_a_feed_item(self):
        _donation(title="Rice")
        _request(title="Insulin", urgency="high")
        feed = storage.get_activity_feed()
        assert [item["type"] for item in feed] == ["request", "donation"]
        assert feed[0]["title"] == "New request: Insulin"
        assert feed[0]["metadata"]["urgency"] == "high"
        assert feed[1]["title"] == "New donation: Rice"
        assert feed[1]["metadata"]["type"] == "food"

    def test_limit(self):
        for i in range(5):
            _donation(title=str(i))
        assert len(storage.get_activity_feed(limit=3)) == 3

    def test_like(self):
        item = storage.create_activity_feed_item({"user_id": "u", "type": "donation", "title": "t"})
        storage.like_activity_feed_item(item["id"])
        assert storage.like_activity_feed_item(item["id"])["likes"] == 2

    def test_like_missing_item(self):
        with pytest.raises(NotFoundError):
            storage.like_activity_feed_item("missing")


class TestNotifications:

    def test_only_own_notifications_newest_first(self):
        old = storage.create_notification({"user_id": "u1", "title": "a", "message": "a", "type": "payment"})
        new = storage.create_notification({"user_id": "u1", "title": "b", "message": "b", "type": "payment"})
        storage.create_notification({"user_id": "u2", "title": "c", "message": "c", "type": "payment"})
        assert [n["id"] for n in storage.get_notifications("u1")] == [new["id"], old["id"]]

    def test_mark_read(self):
        n = storage.create_notification({"user_id": "u1", "title": "a", "message": "a", "type": "payment"})
        assert n["read"] is False
        assert storage.mark_notification_as_read(n["id"])["read"] is True
